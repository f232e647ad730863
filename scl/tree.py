"""
The scl command tree.

    scl [--dry-run|-d] [--verbose|-v]
    ├── add               --user|--username|-u (env: USER, USERNAME)
    ├── bootstrap|bs
    │   ├── add           --services|-s ... | --all|-a
    │   └── remove|rm     --services|-s ... | --all|-a
    ├── build             --build-type|-b {Debug,Release}
    ├── check
    ├── config
    ├── init
    ├── logs
    ├── remove
    ├── set               <key> <value> [<value> ...]
    └── sync

build() assembles the tree once and seals it; the same instance is then
handed by reference to the parser and the dispatcher.
"""
import re

from . import __version__, handlers
from .arguments import Cardinal, Option, Flag
from .commands import Command
from .models import *

VALID_KEYS = ("Namespace", "AppName", "Args", "Port", "NodePort")

# inclusive lower bound, exclusive upper bound
PORT_RANGES = {
    "Port": (1, 64 * 1024),
    "NodePort": (30000, 32 * 1024),
}


def validate_key(key):
    """The key of set must be one of VALID_KEYS."""
    if not key.strip():
        return "key argument cannot be empty"
    if key not in VALID_KEYS:
        return "invalid key\n  valid keys: %s" % " ".join(VALID_KEYS)
    return None


def validate_set(result):
    """
    Arity and numeric domain of the set values, depending on the key.

    - Args takes any number of values.
    - Port and NodePort take one integer within PORT_RANGES.
    - Every other key takes exactly one value.

    Unknown keys are left to validate_key.
    """
    key, values = result.get("key"), result.get("value", ())
    if key not in VALID_KEYS:
        return None
    if not values:
        return "Failed to parse value(s)"
    if key == "Args":
        return None

    messages = []
    if len(values) > 1:
        messages.append(f"{key} only takes one value")

    if key in PORT_RANGES:
        low, high = PORT_RANGES[key]
        text = values[0].strip()
        port = int(text) if re.fullmatch(r"[+-]?[0-9]+", text) else None
        if port is None or not low <= port < high:
            messages.append(f"{key} must be an integer >= {low} and < {high}")

    return messages


def validate_bootstrap(result):
    """Exactly one of --services and --all; an empty services list counts as absent."""
    services = bool(result.get("services"))
    every = bool(result.get("all"))
    if not services and not every:
        return "--services or --all must be specified"
    if services and every:
        return "--services and --all cannot be combined"
    return None


def _bootstrap(parent, name, callback, verb, *, aliases=()):
    command = parent.command(
        name,
        aliases=aliases,
        descr="example of using sub-command specific options and validation",
        config=BootstrapConfig.from_result,
    )(callback)
    command.add_option(Option("--services", "-s", nargs="+", descr=f"bootstrap service(s) to {verb}"))
    command.add_option(Flag("--all", "-a", descr=f"{verb.capitalize()} all bootstrap services"))
    command.add_validator(validate_bootstrap)
    return command


def build(*, colorful=True, strict=True):
    """Construct and seal the scl command tree."""
    root = Command(
        "scl",
        descr="System.CommandLine Sample App",
        version=__version__,
        colorful=colorful,
        strict=strict,
    )
    root.add_global(Flag("--dry-run", "-d", descr="Validates and displays configuration"))
    root.add_global(Flag("--verbose", "-v", descr="Show verbose output"))

    add = root.command(
        "add",
        descr="example of using environment variables as default values",
        config=UserConfig.from_result,
    )(handlers.add)
    add.add_option(Option("--user", "--username", "-u", default="", envvars=("USER", "USERNAME"), descr="User name"))

    bootstrap = Command(
        "bootstrap",
        root,
        aliases=("bs",),
        descr="example of using sub-command specific options and validation",
    )
    _bootstrap(bootstrap, "add", handlers.bootstrap_add, "add")
    _bootstrap(bootstrap, "remove", handlers.bootstrap_remove, "remove", aliases=("rm",))

    builder = root.command(
        "build",
        descr="example using an enum option with defaults",
        config=BuildConfig.from_result,
    )(handlers.build)
    builder.add_option(Option("--build-type", "-b", type=BuildType, default=BuildType.Debug, descr="Build type"))

    for name, callback, descr in (
        ("check", handlers.check, "check the application configuration"),
        ("config", handlers.config, "show the application configuration"),
        ("init", handlers.init, "initialize a new application"),
        ("logs", handlers.logs, "show the application logs"),
        ("remove", handlers.remove, "remove the application"),
    ):
        root.command(name, descr=descr, config=AppConfig.from_result)(callback)

    setter = root.command("set", descr="Set application values", config=AppSetConfig.from_result)(handlers.set)
    setter.add_argument(Cardinal("key", descr="Value to set (%s)" % " ".join(VALID_KEYS), validators=(validate_key,)))
    setter.add_argument(Cardinal("value", nargs="+", descr="New value(s)"))
    setter.add_validator(validate_set)

    root.command("sync", descr="synchronize the application", config=AppConfig.from_result)(handlers.sync)

    return root.seal()


__all__ = (
    "VALID_KEYS",
    "PORT_RANGES",
    "validate_key",
    "validate_set",
    "validate_bootstrap",
    "build",
)
