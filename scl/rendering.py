"""
Help, version, and banner rendering for scl commands (rich based).

Palette keys
- usage-label, program-name, usage-section, description-section
- group-label, argument-description, option-name, flag-name, metavar,
  greedy-metavar, default-value, envvar
- children-title, children-table, children, aliases, children-description
- program-version, banner

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When the root command is not colorful, styling is suppressed.
"""
import itertools
import logging
from collections import defaultdict
from importlib import resources

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from .arguments import Cardinal, Option, Flag

logger = logging.getLogger(__name__)

BANNER = "banner.txt"

_styles = {
    # === Head sections ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",

    # === Groups / arguments ===
    "group-label": "bold #FFFFFF",
    "argument-description": "#9CA3AF",
    "option-name": "bold #00E6FF",
    "flag-name": "bold #22C55E",
    "metavar": "bold #FFD600",
    "greedy-metavar": "bold italic #FFD600",
    "default-value": "#737373",
    "envvar": "italic #737373",

    # === Children table ===
    "children-title": "bold #FFFFFF",
    "children-table": "#4B5563",
    "children": "bold #36C5F0",
    "aliases": "#36C5F0 dim",
    "children-description": "#9CA3AF",

    # === Version / banner ===
    "program-version": "bold #00E6FF",
    "banner": "#8B008B",
}


def _palette(colorful):
    if not colorful:
        return defaultdict(str)
    return defaultdict(str, _styles | getattr(__import__("__main__"), "__styles__", {}))


def _styler(colorful):
    styles = _palette(colorful)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        return Text(str(fragment), styles[style])

    return text


def _names(argument, text):
    style = "flag-name" if isinstance(argument, Flag) else "option-name"
    longs = [name for name in argument.names if name.startswith("--")]
    shorts = [name for name in argument.names if not name.startswith("--")]
    return Text(", ").join(text(name, style) for name in itertools.chain(longs, shorts))


def _metavar(argument, text):
    style = "greedy-metavar" if argument.multiple else "metavar"
    metavar = text(argument.metavar, style)
    match argument.nargs:
        case "?":
            return Text.assemble("[", metavar, "]")
        case "*":
            return Text.assemble("[", metavar, " ...]")
        case "+":
            return Text.assemble(metavar, " [", metavar, " ...]")
        case _:
            return metavar


def _usage(command, text):
    usage = Text()
    usage.append(text("usage", "usage-label")).append(": ")
    usage.append(text(command.route, "program-name"))
    if command.children:
        usage.append(" ").append(text("<command>", "usage-section"))
    if command.options or command.globals:
        usage.append(" ").append(text("[options]", "usage-section"))
    for cardinal in command.cardinals.values():
        usage.append(" ").append(_metavar(cardinal, text))
    return usage


def _row(argument, text):
    if isinstance(argument, Cardinal):
        names = _metavar(argument, text)
    elif isinstance(argument, Option):
        names = Text.assemble(_names(argument, text), " ", _metavar(argument, text))
    else:
        names = _names(argument, text)

    descr = text(argument.descr, "argument-description")
    if not isinstance(argument, Flag) and argument.initial not in (None, "", ()):
        default = getattr(argument.initial, "name", argument.initial)
        descr.append(" ").append(text(f"[default: {default}]", "default-value"))
    if envvars := getattr(argument, "envvars", ()):
        descr.append(" ").append(text(f"[env: {', '.join(envvars)}]", "envvar"))
    return names, descr


def _section(title, arguments, text):
    grid = Table.grid(padding=(0, 2))
    grid.add_column(no_wrap=True)
    grid.add_column()
    for argument in arguments:
        names, descr = _row(argument, text)
        grid.add_row(Text("  ").append_text(names), descr)
    return Group(Text.assemble(text(title, "group-label"), ":"), grid, Text(""))


def help(command, /, *, console=None):
    """
    Print the help screen of command.

    Sections: usage line, description, sub-commands (with aliases), arguments,
    options (the node's own), and global options inherited from the root.
    """
    console = console or Console()
    styles = _palette(command.root.colorful)
    text = _styler(command.root.colorful)
    renders = [_usage(command, text), Text("")]

    if command.descr:
        renders += [text(command.descr, "description-section"), Text("")]

    if command.children:
        typeof = "subcommands" if command.parent else "commands"
        table = Table(
            title=text(typeof, "children-title"),
            box=ROUNDED,
            style=styles["children-table"],
            header_style=styles["children-title"],
            title_justify="left",
        )
        table.add_column("name", no_wrap=True)
        table.add_column("help")
        for name, child in command.children.items():
            label = text(name, "children")
            if child.aliases:
                label.append(" ").append(text(f"({', '.join(child.aliases)})", "aliases"))
            table.add_row(label, text(child.descr or f"run '{child.route} --help' for details", "children-description"))
        renders += [table, Text("")]

    if command.cardinals:
        renders.append(_section("arguments", command.cardinals.values(), text))
    if command.options:
        renders.append(_section("options", command.options, text))
    renders.append(_section("global options", command.globals, text))

    console.print(Group(*renders))


def version(command, /, *, console=None):
    """Print "<name> <version>" for the root of command."""
    console = console or Console()
    root = command.root
    text = _styler(root.colorful)
    console.print(Text(" ").join((text(root.name, "program-name"), text(root.version or "0.0.0", "program-version"))))


def banner(*, colorful=True, console=None):
    """
    Print the decorative banner shipped in scl/files, when present.

    The banner is cosmetic: a missing, unreadable or undecodable file prints nothing.
    """
    try:
        content = resources.files(__package__).joinpath("files", BANNER).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exception:
        logger.debug("banner not shown: %s", exception)
        return False

    if not content.strip():
        return False

    console = console or Console()
    console.print(_styler(colorful)(content.rstrip(), "banner"), highlight=False)
    return True


__all__ = (
    "help",
    "version",
    "banner",
)
