"""
scl faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type that carries a message + options and knows how
  to render itself in a friendly, lowercased, and actionable way.
- ParseError / ValidationError: the two runtime families. Parse errors abort
  binding (unknown tokens, missing values, type coercion); validation errors
  abort dispatch (rule violations on an already bound result).
- CommandExit: an ExceptionGroup bundling every fault found in one pass, so a
  user sees all of them at once instead of fixing them one by one.
- DefinitionError: build-time faults (duplicate names/aliases, dead leaves).
  These are programming errors and never reach end users.
- trigger(): central entry point to surface any fault (render in shell mode,
  raise otherwise).

Integration
- The parser collects faults and raises a ParseExit; the dispatcher triggers it
  in shell mode, which prints it on stderr, and returns a non-zero exit code.
- The host application can customise copy via __main__ dunders:
  __prog__ (program name), __codes__ (code relabelling), __styles__ (palette).
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, MISSING_COMMAND
    - switches (1111x)
      • MALFORMED_TOKEN, UNKNOWN_SWITCH, FLAG_ASSIGNMENT, DUPLICATED_SWITCH,
        OPTION_VALUE_REQUIRED
    - positionals (1112x)
      • UNEXPECTED_CARDINAL, MISSING_CARDINALS
    - coercion (1113x)
      • UNCASTABLE_VALUE, INVALID_CHOICE
    - validation (1114x)
      • RULE_VIOLATION
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    MISSING_COMMAND             = 11102

    # --- switch/flag/option errors ---
    MALFORMED_TOKEN             = 11111
    UNKNOWN_SWITCH              = 11112
    FLAG_ASSIGNMENT             = 11113
    DUPLICATED_SWITCH           = 11115
    OPTION_VALUE_REQUIRED       = 11117

    # --- positional/cardinal errors ---
    UNEXPECTED_CARDINAL         = 11121
    MISSING_CARDINALS           = 11125

    # --- coercion errors ---
    UNCASTABLE_VALUE            = 11131
    INVALID_CHOICE              = 11134

    # --- validation errors ---
    RULE_VIOLATION              = 11141

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _program(options):
    main = __import__("__main__")
    tool = options.get("tool")
    return getattr(main, "__prog__", tool.root.name if tool is not None else "scl")


class CommandException(Exception):
    """
    base class of every runtime fault.

    options (read-only, merged through copy.replace)
    - title: short lowercased headline.
    - code: FaultCode.
    - hint: single actionable sentence.
    - tool: the Command the fault belongs to (used for the program name).
    - shell: when True, __trigger__ prints instead of raising.
    - colorful: rendering toggle.
    - any extra context (input, index, argument, value, origin, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(_program(self.options), "prog-name"),
            " — ",
            text(code.normalize() if code is not None else "?", "code"),
            " | ",
            text(str(self.options.get("title", "error")).title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        parts = [header, message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        return Group(*parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseError(CommandException):
    """Raised while binding tokens to a command; aborts the invocation."""


class UnknownTokenError(ParseError): ...
class UnknownCommandError(UnknownTokenError): ...
class UnknownSwitchError(UnknownTokenError): ...
class MalformedTokenError(UnknownTokenError): ...
class UnexpectedCardinalError(UnknownTokenError): ...

class MissingValueError(ParseError): ...
class MissingCommandError(MissingValueError): ...
class OptionValueRequiredError(MissingValueError): ...
class MissingCardinalsError(MissingValueError): ...

class FlagAssignmentError(ParseError): ...
class DuplicatedSwitchError(ParseError): ...

class TypeCoercionError(ParseError): ...
class UncastableValueError(TypeCoercionError): ...
class InvalidChoiceError(TypeCoercionError): ...


class ValidationError(CommandException):
    """One rule violation reported by a validator; aborts dispatch."""


class DefinitionError(ValueError):
    """Raised at tree construction time (duplicate names, dead leaves, sealed trees)."""


class CommandExit(ExceptionGroup[CommandException]):
    """
    group of faults surfaced together at the end of a pass.

    messages is the ordered tuple of plain messages, handy for callers that
    want text instead of rich renderables.
    """
    title = "bad exit"

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, cls.title, tuple(exceptions))

    def __init__(self, exceptions, **options):
        super().__init__(self.title, tuple(exceptions))
        self.options = MappingProxyType(options)

    @property
    def messages(self):
        return tuple(str(exception) for exception in self.exceptions)

    def __rich__(self):
        styles = _palette({
            "prog-name": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        })
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(_program(self.options), "prog-name"),
            " — ",
            text(self.message.title(), "title"),
            " ]"
        )

        shared = {name: self.options[name] for name in ("tool", "colorful") if name in self.options}
        renders = [copy.replace(exception, **shared) for exception in self.exceptions]
        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


class ParseExit(CommandExit):
    title = "invalid input"


class ValidationExit(CommandExit):
    title = "invalid configuration"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options).
    - in shell mode, rendering happens via the rich console on stderr;
      otherwise, the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "CommandException",
    "ParseError",
    "UnknownTokenError",
    "UnknownCommandError",
    "UnknownSwitchError",
    "MalformedTokenError",
    "UnexpectedCardinalError",
    "MissingValueError",
    "MissingCommandError",
    "OptionValueRequiredError",
    "MissingCardinalsError",
    "FlagAssignmentError",
    "DuplicatedSwitchError",
    "TypeCoercionError",
    "UncastableValueError",
    "InvalidChoiceError",
    "ValidationError",
    "DefinitionError",
    "CommandExit",
    "ParseExit",
    "ValidationExit",
    "FaultCode",
    "trigger",
)
