"""
scl command layer: declare, compose, and dispatch a command tree.

What this module provides
- Command: one node of the tree, with
  • a name and optional aliases, unique among its siblings;
  • positional cardinals and named switches (Option/Flag);
  • node validators evaluated after binding (see scl.validation);
  • an optional handler (leaf) or children (group), never both.
- invoke(root, prompt, environ): parse, validate, and dispatch in one call and
  return the process exit code.

Core ideas
- Build once, then seal: the tree is assembled at startup and becomes
  immutable with seal(); parsing never mutates it.
- Global switches live on the root and are inherited by every descendant.
  The root always carries --help/-h/-? and --version.
- Handlers receive a typed configuration object built from the parse result
  by a per-command factory, and return an int exit code.

Quick start
    from scl.arguments import Cardinal, Flag
    from scl.commands import Command, invoke

    root = Command("tool", descr="demo")
    root.add_global(Flag("--verbose", "-v"))

    @root.command("greet", config=lambda result: result["name"])
    def greet(name):
        print("hello", name)
        return 0

    greet.add_argument(Cardinal("name"))
    invoke(root.seal(), "greet world")
"""
import builtins
import inspect
import logging
import re
import shlex
import sys
from collections.abc import Iterable

from . import exits, rendering
from .arguments import Cardinal, Option, Flag
from .faults import *
from .logger import configure
from .parser import Parser
from .utils import *
from .validation import validate

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass that turns commands into introspectable, read-only nodes.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name and used in messages.
    - __displayable__ (if set) narrows which properties are shown by
      __rich_repr__; otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join("%s=%r" % pair for pair in self.__rich_repr__())
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Command(metaclass=CommandType):
    """
    One node of a command tree.

    Lifecycle
    - Construct the root with Command(name, ...); construct children either
      with Command(name, parent) or, for leaves, with the @parent.command(...)
      decorator that also binds the handler.
    - Declare specs with add_argument/add_option/add_global and rules with
      add_validator.
    - Call seal() on the root once the tree is complete; every further
      mutation raises DefinitionError.

    Invariants (checked at construction time)
    - Names and aliases are unique among siblings.
    - Switch names are unique within a node and never shadow a root global.
    - Destination identifiers are unique within a node.
    - A node with a handler has no children, and seal() rejects leaves without
      a handler.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "descr",
        "parent",
        "children",
        "cardinals",
        "switches",
        "validators",
        "version",
        "colorful",
        "strict",
    )

    __displayable__ = (
        "name",
        "aliases",
        "descr",
        "children",
        "cardinals",
        "switches",
    )

    def __new__(
            cls,
            name,
            /,
            parent=Unset,
            *,
            aliases=(),
            descr=Unset,
            version=Unset,
            colorful=True,
            strict=True,
    ):
        """
        Construct a command node.

        Parameters
        - name: str, shell-friendly token ("build", "bootstrap").
        - parent: Unset | Command, attaches the new node under parent.
        - aliases: Iterable[str], alternative tokens ("bs", "rm").
        - descr: Unset | str, one-line description shown in help.
        - version: Unset | str, shown by --version (root only).
        - colorful: bool, rich styling of help and faults (root only).
        - strict: bool, report unmatched tokens as errors (root only).
        """
        tokens = [name, *(aliases if isinstance(aliases, Iterable) and not isinstance(aliases, str) else [aliases])]
        for token in tokens:
            if not isinstance(token, str) or not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", token):
                raise DefinitionError(f"{cls.__typename__} name {token!r} is not a valid shell-style command name")
        if len(set(tokens)) != len(tokens):
            raise DefinitionError(f"{cls.__typename__} {name!r} aliases cannot repeat its names")
        if not isinstance(descr, str | Unset) or (isinstance(descr, str) and not descr.strip()):
            raise DefinitionError(f"{cls.__typename__} 'descr' must be a non-empty string")

        self = super().__new__(cls)
        self._name = name
        self._aliases = tuple(tokens[1:])
        self._descr = coalesce(descr and descr.strip())
        self._version = coalesce(version)
        self._colorful = bool(colorful)
        self._strict = bool(strict)
        self._parent = None
        self._children = {}
        self._routes = {}
        self._cardinals = {}
        self._switches = {}
        self._options = []
        self._globals = []
        self._validators = []
        self._handler = None
        self._sealed = False

        if parent is Unset:
            self.add_global(Flag("--help", "-h", "-?", descr="Show help and usage information"))
            self.add_global(Flag("--version", descr="Show version information"))
        else:
            parent.attach(self)
        return self

    @property
    def root(self):
        """The topmost command of this node's tree."""
        command = self
        while command.parent:
            command = command.parent
        return command

    @property
    def path(self):
        """The ancestry from the root to this node, as a tuple."""
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def route(self):
        """The user-facing route, e.g. 'scl bootstrap add'."""
        return " ".join(command.name for command in self.path)

    @property
    def routes(self):
        """Every token (name or alias) that selects one of the children."""
        return tuple(self._routes)

    @property
    def handler(self):
        return self._handler

    @property
    def invokable(self):
        """True for leaves; group nodes only route to their children."""
        return not self._children

    @property
    def sealed(self):
        return self.root._sealed

    @property
    def options(self):
        """The node's own switches, in declaration order, without alias repeats."""
        return tuple(self._options)

    @property
    def globals(self):
        """The root's global switches, in declaration order."""
        return tuple(self.root._globals)

    @property
    def arguments(self):
        """Cardinals followed by switches: the specs bound by this node."""
        return (*self._cardinals.values(), *self._options)

    def lookup(self, token, /):
        """Return the child selected by token (name or alias), or None."""
        return self._routes.get(token)

    def walk(self):
        """Yield this node and all its descendants, depth first."""
        yield self
        for child in self._children.values():
            yield from child.walk()

    def _mutable(self):
        if self.sealed:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} belongs to a sealed tree")

    def _claim(self, spec, /):
        if spec.dest in (argument.dest for argument in (*self.arguments, *self.globals)):
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} already binds {spec.dest!r}")
        for name in getattr(spec, "names", ()):
            if name in self._switches:
                raise DefinitionError(f"{type(self).__typename__} {self.route!r} already uses switch {name!r}")
            if any(name in argument.names for argument in self.globals):
                raise DefinitionError(f"switch {name!r} of {self.route!r} shadows a global switch")

    def attach(self, child, /):
        """
        Register child under this node.

        Raises
        - DefinitionError: when this node has a handler, when child already
          has a parent, or when one of child's names/aliases is taken.
        """
        self._mutable()
        if not isinstance(child, Command):
            raise TypeError("attach() argument must be a command")
        if child.parent is not None:
            raise DefinitionError(f"{type(self).__typename__} {child.name!r} is already attached to {child.parent.route!r}")
        if child._globals:
            raise DefinitionError(f"{type(self).__typename__} {child.name!r} declares global switches; only a root can")
        if self._handler is not None:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} has a handler and cannot own subcommands")
        if self._cardinals:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} takes arguments and cannot own subcommands")
        for token in (child.name, *child.aliases):
            if token in self._routes:
                typeof = "subcommand" if self.parent else "command"
                raise DefinitionError(f"{typeof} name or alias {token!r} is already in use under {self.route!r}")

        child._parent = self
        self._children[child.name] = child
        self._routes |= dict.fromkeys((child.name, *child.aliases), child)
        return child

    def add_argument(self, cardinal, /):
        """Declare a positional argument; they bind in declaration order."""
        self._mutable()
        if not isinstance(cardinal, Cardinal):
            raise TypeError("add_argument() argument must be a cardinal")
        if self._children:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} routes to subcommands and cannot take arguments")
        if any(argument.multiple for argument in self._cardinals.values()):
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} list argument must be the last positional")
        self._claim(cardinal)
        self._cardinals[cardinal.name] = cardinal
        return cardinal

    def add_option(self, switch, /):
        """Declare a named option or flag local to this node."""
        self._mutable()
        if not isinstance(switch, Option | Flag):
            raise TypeError("add_option() argument must be an option or a flag")
        self._claim(switch)
        self._switches |= dict.fromkeys(switch.names, switch)
        self._options.append(switch)
        return switch

    def add_global(self, flag, /):
        """
        Declare a global flag on the root.

        Global flags are recognised at any depth, before or after subcommand
        tokens, and land in ParseResult.globals.
        """
        self._mutable()
        if not isinstance(flag, Flag):
            raise TypeError("add_global() argument must be a flag")
        if self.parent:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} is not a root; globals belong to the root")
        for command in self.walk():
            for name in flag.names:
                if name in command._switches:
                    raise DefinitionError(f"global switch {name!r} clashes with a switch of {command.route!r}")
        self._claim(flag)
        self._globals.append(flag)
        return flag

    def add_validator(self, validator, /):
        """
        Attach a node validator: result -> None | str | Iterable[str].

        Returns the validator so this method can be used as a decorator.
        """
        self._mutable()
        if not callable(validator):
            raise TypeError("add_validator() argument must be callable")
        self._validators.append(validator)
        return validator

    def bind(self, callback, /, config=Unset):
        """
        Bind the handler of a leaf.

        Parameters
        - callback: Callable[[config], int | None]
        - config: Unset | Callable[[ParseResult], object], builds the object
          handed to callback. When Unset, callback receives the ParseResult.
        """
        self._mutable()
        if not callable(callback):
            raise TypeError("bind() first argument must be callable")
        if config is not Unset and not callable(config):
            raise TypeError("bind() 'config' must be callable")
        if self._children:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} routes to subcommands and cannot have a handler")
        if self._handler is not None:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} already has a handler")

        factory = coalesce(config, lambda result: result)

        @rename(f"{getattr(callback, '__name__', 'handler')}_handler")
        def handler(result):
            code = callback(factory(result))
            return exits.SUCCESS if code is None else int(code)

        self._handler = handler
        return callback

    def command(self, name, /, *, aliases=(), descr=Unset, config=Unset):
        """
        Decorator creating a child leaf whose handler is the decorated callable.

        Returns the new child (not the callable), so further specs can be
        added to it right away.
        """
        @rename("command")
        def wrapper(callback, /):
            if not builtins.callable(callback):
                raise TypeError("@command() must be applied to a callable")
            summary = descr
            if summary is Unset and (doc := inspect.getdoc(callback)):
                summary = doc.splitlines()[0]
            child = Command(name, self, aliases=aliases, descr=summary)
            child.bind(callback, config)
            return child

        return wrapper

    def seal(self):
        """
        Freeze the whole tree.

        Raises
        - DefinitionError: for any leaf without a handler (a dead leaf).
        """
        if self.parent:
            raise DefinitionError(f"{type(self).__typename__} {self.route!r} is not a root; seal the root instead")
        for command in self.walk():
            if command.invokable and command._handler is None:
                raise DefinitionError(f"{type(self).__typename__} {command.route!r} has neither subcommands nor a handler")
        self._sealed = True
        logger.debug("sealed command tree %r", self.name)
        return self

    def __invoke__(self, prompt=Unset, environ=Unset, /):
        """
        Parse, validate, and dispatch a token stream against this tree.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        - environ: Unset | Mapping[str, str], defaults to os.environ.

        Returns
        - int exit code: 0 on success, non-zero on parse/validation faults or
          whatever the handler returned.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        root = self.root
        options = {"tool": root, "shell": True, "colorful": root.colorful}

        try:
            result = Parser(root, environ).parse(tokens)
        except ParseExit as exit:
            trigger(exit, **options)
            return exits.FAILURE

        configure(result.verbose)
        logger.debug("resolved %r with %r", result.command.route, dict(result.values))

        if result.version:
            rendering.version(root)
            return exits.SUCCESS

        if result.help:
            rendering.banner(colorful=root.colorful)
            rendering.help(result.command)
            return exits.SUCCESS

        if outcome := validate(result.command, result):
            trigger(outcome.exit(), **options)
            return exits.FAILURE

        if result.dry_run:
            rendering.banner(colorful=root.colorful)

        return result.command.handler(result)


def invoke(object, prompt=Unset, environ=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - object: an instance providing __invoke__(prompt, environ).
    - prompt: Unset | str | Iterable[str] (see Command.__invoke__).
    - environ: Unset | Mapping[str, str]

    Returns
    - int exit code.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt, environ)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Command",
    "invoke",
)

del CommandType
