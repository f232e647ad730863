"""
scl parser: turn a token sequence into the deepest matching command and a
typed, immutable parse result.

Phases
- globals
  • switches declared on the root (--dry-run, --verbose, --help, --version)
    are recognised anywhere before a literal '--' and removed from the stream.
- routing
  • starting at the root, each leading token that names a child (or one of its
    aliases) descends one level. Sibling names/aliases are unique by
    construction, so the walk is deterministic.
- binding
  • remaining tokens are matched against the resolved command's switches
    (spaced '--name value' or inline '--name=value') and, in declaration order,
    its cardinals. List-typed values accumulate across occurrences and split
    on commas, keeping insertion order and duplicates.
- resolution
  • every spec goes through scl.environment.resolve (cli > env > default);
    every raw value goes through the spec's bind() coercion.

Faults
- Every problem found in one pass is collected and raised together as a
  ParseExit (an ExceptionGroup of ParseError instances), with position-first
  messages ("at second position") so users learn by trying.
- When --help or --version is present the result is returned even if binding
  failed; the dispatcher renders help/version instead of the faults.
"""
import copy
import difflib
import logging
import re
from collections import deque
from types import MappingProxyType

from .arguments import Flag
from .environment import resolve
from .faults import *
from .utils import Unset, ordinal

logger = logging.getLogger(__name__)

_SWITCH = re.compile(r"(?P<input>-[^=]*)(=(?P<value>.*))?", re.DOTALL)
_NAME = re.compile(r"--?[^\W\d_](-?[^\W_]+)*|-\?")
_NUMBER = re.compile(r"-\d+(\.\d+)?")


def _is_switch(token):
    """True when a token looks like a switch rather than a value."""
    return len(token) > 1 and token.startswith("-") and token != "--" and not _NUMBER.fullmatch(token)


def _is_value(token):
    return token != "--" and not _is_switch(token)


class ParseResult:
    """
    Immutable outcome of one parse.

    Attributes
    - command: the resolved (deepest matched) Command.
    - values: read-only mapping dest -> typed value for the command's own
      cardinals and switches. Lists are stored as tuples.
    - sources: read-only mapping dest -> "cli" | "env" | "default", covering
      both the command's specs and the root's global switches.
    - dry_run / verbose / help / version: global switches, inherited from the
      root regardless of the matched depth.
    - unmatched: tokens kept aside when the tree is not strict.

    Two results compare equal when they resolved the same command with the
    same values, sources and globals.
    """

    __slots__ = ("_command", "_values", "_sources", "_globals", "_unmatched")

    def __init__(self, command, values, sources, globals, unmatched=()):
        self._command = command
        self._values = MappingProxyType(dict(values))
        self._sources = MappingProxyType(dict(sources))
        self._globals = MappingProxyType(dict(globals))
        self._unmatched = tuple(unmatched)

    command = property(lambda self: self._command)
    values = property(lambda self: self._values)
    sources = property(lambda self: self._sources)
    globals = property(lambda self: self._globals)
    unmatched = property(lambda self: self._unmatched)

    dry_run = property(lambda self: bool(self._globals.get("dry_run", False)))
    verbose = property(lambda self: bool(self._globals.get("verbose", False)))
    help = property(lambda self: bool(self._globals.get("help", False)))
    version = property(lambda self: bool(self._globals.get("version", False)))

    def __getitem__(self, dest, /):
        try:
            return self._values[dest]
        except KeyError:
            return self._globals[dest]

    def __contains__(self, dest, /):
        return dest in self._values or dest in self._globals

    def get(self, dest, default=None, /):
        try:
            return self[dest]
        except KeyError:
            return default

    def asdict(self):
        """
        Plain dict of the bound values plus the dry_run/verbose globals.

        Tuples are turned back into lists so the mapping is JSON-friendly.
        """
        values = {
            "dry_run": self.dry_run,
            "verbose": self.verbose,
        }
        for dest, value in self._values.items():
            values[dest] = list(value) if isinstance(value, tuple) else value
        return values

    def __eq__(self, other):
        if not isinstance(other, ParseResult):
            return NotImplemented
        return (
            self._command is other._command and
            self._values == other._values and
            self._sources == other._sources and
            self._globals == other._globals and
            self._unmatched == other._unmatched
        )

    __hash__ = None

    def __rich_repr__(self):
        yield "command", self._command.route
        yield "values", dict(self._values)
        yield "sources", dict(self._sources)
        yield "globals", dict(self._globals)
        if self._unmatched:
            yield "unmatched", self._unmatched

    def __repr__(self):
        return "parse-result(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class Parser:
    """
    Parser bound to an immutable command tree.

    Parameters
    - root: the root Command (built once, passed by reference).
    - environ: Mapping[str, str] used for env-backed switches (defaults to
      os.environ at resolution time).

    The parser keeps no state between calls: parsing the same tokens twice
    yields equal results.
    """

    def __init__(self, root, environ=Unset, /):
        if root.parent:
            raise TypeError("Parser() argument must be a root command")
        self.root = root
        self.environ = environ
        self.globals = {name: spec for spec in root.globals for name in spec.names}

    def parse(self, tokens, /):
        """
        Parse tokens into a ParseResult.

        Raises
        - ParseExit: grouping UnknownTokenError, MissingValueError,
          TypeCoercionError, ... when the input cannot be bound.
        """
        if isinstance(tokens, str):
            raise TypeError("parse() argument must be an iterable of strings, not a string")
        tokens = tuple(tokens)
        faults = []

        remaining, explicit = self._extract(tokens, faults)
        command, position = self._descend(remaining)
        globals, sources = self._resolve(self.root.globals, explicit, faults)
        early = globals.get("help") or globals.get("version")

        values = {}
        unmatched = ()
        if command.invokable:
            explicit, unmatched = self._bind(command, remaining[position:], faults)
            values, bound = self._resolve(command.arguments, explicit, faults)
            sources |= bound
        elif not early:
            self._missing(command, remaining[position:], faults)

        if faults and not early:
            logger.debug("parsing %r failed with %d fault(s)", command.route, len(faults))
            raise ParseExit(faults, command=command)

        return ParseResult(command, values, sources, globals, unmatched)

    def _extract(self, tokens, faults):
        """Pull the root's global switches out of the stream (up to '--')."""
        remaining = []
        explicit = {}
        literal = False

        for index, token in enumerate(tokens, 1):
            if literal or not _is_switch(token):
                literal = literal or token == "--"
                remaining.append((index, token))
                continue

            match = _SWITCH.fullmatch(token)
            if (argument := self.globals.get(match["input"])) is None:
                remaining.append((index, token))
                continue

            if match["value"] is not None:
                faults.append(FlagAssignmentError(
                    "flag %r at %s position cannot have an inline value" % (match["input"], ordinal(index)),
                    title="flag cannot take a value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    hint="remove everything from '=' (for example: %s)" % match["input"],
                    input=match["input"],
                    index=index,
                ))
                continue

            if argument.dest in explicit:
                faults.append(DuplicatedSwitchError(
                    "flag %r at %s position was already provided" % (match["input"], ordinal(index)),
                    title="duplicated flag",
                    code=FaultCode.DUPLICATED_SWITCH,
                    hint="keep a single flag; each flag can be specified only once",
                    input=match["input"],
                    index=index,
                ))
                continue

            explicit[argument.dest] = True

        return remaining, explicit

    def _descend(self, remaining):
        """Walk from the root, one level per leading token naming a child."""
        command, position = self.root, 0
        while position < len(remaining) and command.children:
            index, token = remaining[position]
            if (child := command.lookup(token)) is None:
                break
            logger.debug("%r at %s position routes to %r", token, ordinal(index), child.route)
            command, position = child, position + 1
        return command, position

    def _missing(self, command, rest, faults):
        """Report why a group command (one with children) cannot be invoked."""
        kind = "subcommand" if command.parent else "command"

        if rest:
            index, token = rest[0]
            if _is_switch(token):
                faults.append(self._unknown_switch(command, token, index))
            else:
                suggestions = difflib.get_close_matches(token, command.routes, 5)
                try:
                    hint = "did you mean %r? you can also run '%s --help' to see available %ss" % (
                        suggestions[0], command.route, kind
                    )
                except IndexError:
                    hint = "run '%s --help' to see available %ss" % (command.route, kind)
                faults.append(UnknownCommandError(
                    "unknown %s %r at %s position" % (kind, token, ordinal(index)),
                    title="unknown %s" % kind,
                    code=FaultCode.UNKNOWN_COMMAND,
                    hint=hint,
                    input=token,
                    index=index,
                    suggestions=suggestions,
                ))

        faults.append(MissingCommandError(
            "required %s was not provided" % kind,
            title="missing %s" % kind,
            code=FaultCode.MISSING_COMMAND,
            hint="pick one of: %s" % " ".join(command.children),
        ))

    def _unknown_switch(self, command, token, index):
        input = _SWITCH.fullmatch(token)["input"]
        suggestions = difflib.get_close_matches(input, [*command.switches, *self.globals], 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (
                suggestions[0], command.route
            )
        except IndexError:
            hint = "try '%s --help' to see all available options" % command.route
        return UnknownSwitchError(
            "unknown option or flag %r at %s position" % (input, ordinal(index)),
            title="unknown option or flag",
            code=FaultCode.UNKNOWN_SWITCH,
            hint=hint,
            input=input,
            index=index,
            suggestions=suggestions,
        )

    def _bind(self, command, rest, faults):
        """
        Bind the tokens left after routing to the command's specs.

        Returns (explicit, unmatched) where explicit maps dest -> coerced
        command-line value.
        """
        explicit = {}
        unmatched = []
        seen = set()
        cardinals = deque(command.cardinals.values())
        stream = deque(rest)
        literal = False

        while stream:
            index, token = stream.popleft()

            if not literal and token == "--":
                literal = True
                continue

            if not literal and _is_switch(token):
                self._bind_switch(command, index, token, stream, explicit, unmatched, faults)
                continue

            if not cardinals:
                if not self.root.strict:
                    unmatched.append(token)
                    continue
                faults.append(UnexpectedCardinalError(
                    "unexpected argument %r at %s position" % (token, ordinal(index)),
                    title="unexpected argument",
                    code=FaultCode.UNEXPECTED_CARDINAL,
                    hint="remove this extra value or run '%s --help' to see the expected usage" % command.route,
                    input=token,
                    index=index,
                ))
                continue

            cardinal = cardinals[0]
            seen.add(cardinal.dest)
            if not cardinal.multiple:
                cardinals.popleft()

            try:
                value = cardinal.bind(token)
            except TypeCoercionError as fault:
                faults.append(copy.replace(fault, index=index))
                continue

            if cardinal.multiple:
                explicit[cardinal.dest] = explicit.get(cardinal.dest, ()) + (value,)
            else:
                explicit[cardinal.dest] = value

        for cardinal in command.cardinals.values():
            if cardinal.required and cardinal.dest not in seen:
                faults.append(MissingCardinalsError(
                    "required argument %r was not provided" % cardinal.name,
                    title="missing argument",
                    code=FaultCode.MISSING_CARDINALS,
                    hint="add the missing values, then run '%s --help' to see the expected order" % command.route,
                    argument=cardinal,
                ))

        return explicit, unmatched

    def _bind_switch(self, command, index, token, stream, explicit, unmatched, faults):
        match = _SWITCH.fullmatch(token)

        if not _NAME.fullmatch(input := match["input"]):
            faults.append(MalformedTokenError(
                "bad form of option or flag %r at %s position" % (token, ordinal(index)),
                title="malformed option or flag",
                code=FaultCode.MALFORMED_TOKEN,
                hint="try '%s --help' to see valid spellings and forms (e.g., --name=value)" % command.route,
                input=token,
                index=index,
            ))
            return

        if (argument := command.switches.get(input)) is None:
            if not self.root.strict:
                unmatched.append(token)
                return
            faults.append(self._unknown_switch(command, token, index))
            return

        value = match["value"]

        if isinstance(argument, Flag):
            if value is not None:
                faults.append(FlagAssignmentError(
                    "flag %r at %s position cannot have an inline value" % (input, ordinal(index)),
                    title="flag cannot take a value",
                    code=FaultCode.FLAG_ASSIGNMENT,
                    hint="remove everything from '=' (for example: %s)" % input,
                    input=input,
                    index=index,
                    argument=argument,
                ))
            elif argument.dest in explicit:
                faults.append(self._duplicated("flag", input, index, argument))
            else:
                explicit[argument.dest] = True
            return

        if value is not None:
            raws = [value] if value else []
        elif argument.multiple:
            raws = []
            while stream and _is_value(stream[0][1]):
                raws.append(stream.popleft()[1])
        elif stream and _is_value(stream[0][1]):
            raws = [stream.popleft()[1]]
        else:
            raws = []

        if argument.multiple:
            raws = [item.strip() for raw in raws for item in raw.split(",") if item.strip()]

        if not raws and argument.nargs != "*":
            faults.append(OptionValueRequiredError(
                "option %r at %s position requires a value" % (input, ordinal(index)),
                title="option value required",
                code=FaultCode.OPTION_VALUE_REQUIRED,
                hint="pass a value after a space or inline (for example: %s <value> or %s=<value>)" % (input, input),
                input=input,
                index=index,
                argument=argument,
            ))
            return

        if not argument.multiple and argument.dest in explicit:
            faults.append(self._duplicated("option", input, index, argument))
            return

        values = []
        for raw in raws:
            try:
                values.append(argument.bind(raw))
            except TypeCoercionError as fault:
                faults.append(copy.replace(fault, input=input, index=index))
                return

        if argument.multiple:
            explicit[argument.dest] = explicit.get(argument.dest, ()) + tuple(values)
        else:
            explicit[argument.dest] = values[0]

    @staticmethod
    def _duplicated(kind, input, index, argument):
        return DuplicatedSwitchError(
            "%s %r at %s position was already provided" % (kind, input, ordinal(index)),
            title="duplicated %s" % kind,
            code=FaultCode.DUPLICATED_SWITCH,
            hint="keep a single %s; each %s can be specified only once" % (kind, kind),
            input=input,
            index=index,
            argument=argument,
        )

    def _resolve(self, specs, explicit, faults):
        """Apply cli > env > default precedence to every spec."""
        values = {}
        sources = {}
        for spec in specs:
            try:
                resolution = resolve(spec, explicit.get(spec.dest, Unset), self.environ)
            except TypeCoercionError as fault:
                faults.append(fault)
                continue
            values[spec.dest] = resolution.value
            sources[spec.dest] = resolution.source
            logger.debug("%s = %r (from %s)", spec.dest, resolution.value, resolution.origin or resolution.source)
        return values, sources


def parse(root, tokens, environ=Unset, /):
    """Shorthand for Parser(root, environ).parse(tokens)."""
    return Parser(root, environ).parse(tokens)


__all__ = (
    "ParseResult",
    "Parser",
    "parse",
)
