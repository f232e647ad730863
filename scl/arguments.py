r"""
scl argument specifications.

Overview
- Specs
  • Cardinal: positional, value-bearing argument (exactly one, optional, or list-of-string).
  • Option: named, value-bearing option with one or more aliases (e.g., -u/--user/--username).
  • Flag: named, presence-only boolean switch, e.g., -v/--verbose.

- Binding
  • bind(raw) coerces a single raw token to the declared type and raises a
    TypeCoercionError subclass when that is impossible. It has no side effects.
  • check(value) runs the per-value validators and returns the messages they
    produced (an empty tuple means the value is valid).

- Environment
  • Option and Flag accept an ordered 'envvars' list; the first variable that is
    set and non-empty supplies the value when the switch is absent from the
    command line (see scl.environment).

Value types
- str, int (or any callable converter raising ValueError/TypeError),
  bool (Flag, or env text such as "true"/"0"/"yes"),
  enum.Enum subclasses (matched by member name, case-insensitive),
  list-of-string via nargs="*" or nargs="+".

Metadata (sanitized on construction)
- names: shell-style switch names, unique within a spec.
- descr: Unset | str | Text (short help), non-empty when provided.
- type: Callable (converter).
- nargs: Unset | "?" | "*" | "+".
- validators: Iterable of callables value -> str | None.

Quick example:
    >>> from scl.arguments import Cardinal, Option, Flag
    >>> key = Cardinal("key", descr="value to set")
    >>> user = Option("--user", "--username", "-u", default="", envvars=("USER", "USERNAME"))
    >>> verbose = Flag("--verbose", "-v")
    >>> user.dest, verbose.dest
    ('user', 'verbose')
"""
import enum
import functools
import operator
import re
from collections.abc import Iterable
from types import MappingProxyType

from rich.text import Text

from .faults import DefinitionError, FaultCode, InvalidChoiceError, UncastableValueError
from .utils import *

# accepted spellings of a boolean coming from the environment
_BOOLEANS = MappingProxyType({
    "true": True,
    "yes": True,
    "on": True,
    "1": True,
    "false": False,
    "no": False,
    "off": False,
    "0": False,
})


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every spec.

    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.
    - validators: iterable of callables, normalized into a tuple.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise DefinitionError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise DefinitionError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(validators := metadata["validators"], Iterable):
        raise DefinitionError(f"{cls.__typename__} 'validators' must be iterable")
    validators = tuple(validators)
    if not all(map(callable, validators)):
        raise DefinitionError(f"{cls.__typename__} validators must be callable")
    metadata["validators"] = validators


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate and normalize metadata for named (switch-like) specs.

    - names: required, ordered. Each name must match r"--?[^\W\d_](-?[^\W_]+)*"
      ('-x', '--long', '--long-name') or be the conventional '-?' help alias.
      Duplicates are rejected.
    - envvars: ordered iterable of non-empty strings, normalized into a tuple.
    - dest: the identifier the bound value is stored under. Defaults to the
      first double-dash name ("--build-type" → "build_type"), otherwise the
      first name.
    """
    names = []
    if not metadata["names"]:
        raise DefinitionError(f"{cls.__typename__} must specify at least one name")

    for name in metadata["names"]:
        if not isinstance(name, str):
            raise DefinitionError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise DefinitionError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"--?[^\W\d_](-?[^\W_]+)*|-\?", name):
            raise DefinitionError(f"{cls.__typename__} name {name!r} is not a valid shell-style option name")
        elif name in names:
            raise DefinitionError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)
    metadata["names"] = tuple(names)

    if isinstance(envvars := metadata["envvars"], str) or not isinstance(envvars, Iterable):
        raise DefinitionError(f"{cls.__typename__} 'envvars' must be an iterable of strings")
    envvars = tuple(envvars)
    if not all(isinstance(envvar, str) and envvar.strip() for envvar in envvars):
        raise DefinitionError(f"{cls.__typename__} 'envvars' must contain non-empty strings")
    metadata["envvars"] = envvars

    if metadata["dest"] is Unset:
        longs = [name for name in names if name.startswith("--")]
        metadata["dest"] = identifier((longs or names)[0])


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing specs.

    - type: must be callable (converter) or an enum.Enum subclass.
    - nargs: Unset | "?" | "*" | "+". List forms always carry strings.
    - default: left untouched; Unset is materialized later (see Argument.initial).
    """
    if not callable(metadata["type"]):
        raise DefinitionError(f"{cls.__typename__} 'type' must be callable")

    if not isinstance(nargs := metadata["nargs"], str | Unset):
        raise DefinitionError(f"{cls.__typename__} 'nargs' must be a string")
    if isinstance(nargs, str) and nargs not in ("?", "+", "*"):
        raise DefinitionError(f"{cls.__typename__} 'nargs' must be one of '?', '+', or '*'")
    if nargs in ("+", "*") and metadata["type"] is not str:
        raise DefinitionError(f"{cls.__typename__} list arguments only carry strings")


class Argument(metaclass=ArgumentType):
    """
    Shared behavior of every spec: coercion, validation, and defaults.

    Subclasses populate the private backing fields (_type, _nargs, _default,
    _validators, ...) in __new__; the metaclass mirrors them as read-only
    properties.
    """

    @property
    def multiple(self):
        """True when the spec binds an ordered list of strings."""
        return self._nargs in ("*", "+")

    @property
    def initial(self):
        """The declared default with Unset materialized for the spec's shape."""
        if self.multiple:
            return tuple(coalesce(self._default, ()))
        return coalesce(self._default)

    @property
    def label(self):
        """How the spec is referred to in user-facing messages."""
        raise NotImplementedError

    def bind(self, raw, /, *, origin=Unset):
        """
        Coerce one raw token to the declared type.

        Parameters
        - raw: str
          The token as it appeared on the command line or in the environment.
        - origin: Unset | str
          Environment variable name when the token came from the environment.

        Raises
        - InvalidChoiceError: raw is outside the enum domain.
        - UncastableValueError: the converter rejected raw.
        """
        type = self._type
        source = f" (from ${origin})" if origin is not Unset else ""

        if isinstance(type, enum.EnumType):
            for member in type:
                if member.name.casefold() == raw.strip().casefold():
                    return member
            choices = [member.name for member in type]
            raise InvalidChoiceError(
                "value %r for %s is not one of %s%s" % (raw, self.label, ", ".join(choices), source),
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                hint="use one of: %s" % " ".join(choices),
                argument=self,
                value=raw,
                origin=origin,
                choices=choices,
            )

        if type is bool:
            try:
                return _BOOLEANS[raw.strip().lower()]
            except KeyError:
                raise UncastableValueError(
                    "value %r for %s is not a boolean%s" % (raw, self.label, source),
                    title="uncastable value",
                    code=FaultCode.UNCASTABLE_VALUE,
                    hint="use true or false",
                    argument=self,
                    value=raw,
                    origin=origin,
                ) from None

        try:
            return type(raw)
        except (TypeError, ValueError) as exception:
            typename = getattr(type, "__name__", repr(type))
            raise UncastableValueError(
                "cannot parse %r for %s as expected type %r%s" % (raw, self.label, typename, source),
                title="uncastable value",
                code=FaultCode.UNCASTABLE_VALUE,
                hint="pass a value of type %r" % typename,
                argument=self,
                value=raw,
                origin=origin,
                exception=exception,
            ) from None

    def check(self, value, /):
        """
        Run the per-value validators against a bound value.

        List-typed specs validate each element. Returns a tuple of messages;
        an empty tuple means every validator accepted the value. A validator
        that raises is reported as a message naming it.
        """
        messages = []
        for element in (value if self.multiple else (value,)):
            for validator in self._validators:
                try:
                    message = validator(element)
                except Exception as exception:
                    name = getattr(validator, "__name__", type(validator).__name__)
                    message = f"{name} failed: {exception}" if str(exception) else f"{name} failed"
                if message and (message := str(message).strip()):
                    messages.append(message)
        return tuple(messages)


class Cardinal(Argument):
    """
    Positional, value-bearing argument specification.

    Cardinals are bound in declaration order from the tokens left after option
    extraction. A list cardinal (nargs "*" or "+") is greedy: it takes every
    remaining positional token, keeping insertion order and duplicates.
    """

    __introspectable__ = (
        "name",
        "dest",
        "metavar",
        "type",
        "nargs",
        "default",
        "descr",
        "validators",
    )

    def __new__(
            cls,
            name,
            /,
            type=str,
            nargs=Unset,
            default=Unset,
            descr=Unset,
            *,
            metavar=Unset,
            validators=(),
    ):
        """
        Construct a Cardinal spec with the provided metadata.

        Parameters
        - name: str
          Identifier of the argument; also the key in the parse result.
        - type: Callable | enum.Enum subclass
        - nargs: Unset (exactly one) | "?" | "*" | "+"
        - default: value used when the argument is optional and absent.
        - descr: Unset | str
        - metavar: Unset | str (defaults to "<name>" in help)
        - validators: Iterable[Callable[[value], str | None]]
        """
        if not isinstance(name, str) or not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name := name.strip()):
            raise DefinitionError(f"{cls.__typename__} name must be a valid identifier-like string")
        if not isinstance(metavar, str | Unset) or (isinstance(metavar, str) and not metavar.strip()):
            raise DefinitionError(f"{cls.__typename__} 'metavar' must be a non-empty string")

        metadata = {
            "name": name,
            "dest": identifier(name),
            "metavar": coalesce(metavar, f"<{name}>"),
            "type": type,
            "nargs": nargs,
            "default": default,
            "descr": descr,
            "validators": validators,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def required(self):
        """A cardinal is required unless its arity is optional or it has a default."""
        return self._nargs in (Unset, "+") and self._default is Unset

    @property
    def label(self):
        return "argument %r" % self._name


class Option(Argument):
    """
    Named, value-bearing option specification.

    Highlights
    - Aliases via 'names' (e.g., "-u", "--user", "--username").
    - Spaced (--name value) and inline (--name=value) forms.
    - List options (nargs "*" or "+") accumulate across repeated occurrences
      and split comma-separated values.
    - Environment fallback via 'envvars' (ordered; first set, non-empty wins).
    """

    __introspectable__ = (
        "names",
        "dest",
        "metavar",
        "type",
        "nargs",
        "default",
        "descr",
        "envvars",
        "validators",
    )

    def __new__(
            cls,
            *names,
            type=str,
            nargs=Unset,
            default=Unset,
            descr=Unset,
            metavar=Unset,
            envvars=(),
            dest=Unset,
            validators=(),
    ):
        """
        Construct an Option spec with the provided metadata.

        Parameters
        - names: one or more str (e.g., "-b", "--build-type").
        - type: Callable | enum.Enum subclass
        - nargs: Unset (exactly one) | "*" | "+"
        - default: value used when neither the command line nor the
          environment supplies one.
        - descr: Unset | str
        - metavar: Unset | str (defaults to the enum members or "<dest>")
        - envvars: Iterable[str] candidate environment variables, in order.
        - dest: Unset | str, overrides the derived destination identifier.
        - validators: Iterable[Callable[[value], str | None]]
        """
        metadata = {
            "names": names,
            "dest": dest,
            "metavar": metavar,
            "type": type,
            "nargs": nargs,
            "default": default,
            "descr": descr,
            "envvars": envvars,
            "validators": validators,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        if metadata["nargs"] == "?":
            raise DefinitionError(f"{cls.__typename__} values cannot be optional; use a default instead")

        if metadata["metavar"] is Unset:
            if isinstance(type, enum.EnumType):
                metadata["metavar"] = "{%s}" % ",".join(member.name for member in type)
            else:
                metadata["metavar"] = f"<{metadata['dest']}>"

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return "option %r" % self._names[0]


class Flag(Argument):
    """
    Named, presence-only option specification.

    A Flag binds True when present on the command line. When absent, its
    'envvars' are consulted (values such as "1", "true", "yes"); otherwise it
    is False.
    """

    __introspectable__ = (
        "names",
        "dest",
        "descr",
        "envvars",
        "validators",
    )

    def __new__(cls, *names, descr=Unset, envvars=(), dest=Unset, validators=()):
        metadata = {
            "names": names,
            "dest": dest,
            "descr": descr,
            "envvars": envvars,
            "validators": validators,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._type = bool
        self._nargs = Unset
        self._default = False
        return self

    @property
    def label(self):
        return "flag %r" % self._names[0]


__all__ = (
    "Argument",
    "Cardinal",
    "Option",
    "Flag",
)
