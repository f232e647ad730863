"""
Environment-backed value resolution.

A switch may be satisfied from three places, strictly in this order:

1. the command line, when one of its aliases appeared in the token stream;
2. the first variable of its 'envvars' list that is set and non-empty;
3. its declared default.

This lets one option answer to several operating-system specific variable
names, e.g. a user option backed by USER on Unix-like systems and USERNAME on
Windows, without the caller knowing which one supplied the value.

The environment is always passed in explicitly (defaulting to os.environ) so
resolution stays a pure function of its inputs.
"""
import logging
import os
from collections import namedtuple

from .utils import Unset

logger = logging.getLogger(__name__)

Resolution = namedtuple("Resolution", ("value", "source", "origin"))
Resolution.__doc__ = """
Outcome of resolve().

- value: the typed value.
- source: "cli", "env" or "default".
- origin: the environment variable name when source is "env", otherwise None.
"""

CLI = "cli"
ENV = "env"
DEFAULT = "default"


def lookup(argument, environ, /):
    """
    Return (name, raw) for the first candidate variable that is set and non-empty.

    Returns (None, None) when no candidate qualifies.
    """
    for name in getattr(argument, "envvars", ()):
        if raw := environ.get(name):
            return name, raw
    return None, None


def resolve(argument, explicit=Unset, environ=Unset, /):
    """
    Resolve the value of an argument spec.

    Parameters
    - argument: Cardinal | Option | Flag
    - explicit: the already coerced command-line value, or Unset when the
      switch did not appear in the token stream.
    - environ: Mapping[str, str] (defaults to os.environ)

    Returns
    - Resolution(value, source, origin)

    Raises
    - TypeCoercionError: when an environment value cannot be coerced to the
      declared type. Command-line values were coerced by the caller.
    """
    if explicit is not Unset:
        return Resolution(explicit, CLI, None)

    environ = os.environ if environ is Unset else environ
    name, raw = lookup(argument, environ)
    if name is not None:
        if argument.multiple:
            value = tuple(argument.bind(item.strip(), origin=name) for item in raw.split(",") if item.strip())
        else:
            value = argument.bind(raw, origin=name)
        logger.debug("%s resolved from environment variable %s", argument.label, name)
        return Resolution(value, ENV, name)

    return Resolution(argument.initial, DEFAULT, None)


__all__ = (
    "Resolution",
    "lookup",
    "resolve",
    "CLI",
    "ENV",
    "DEFAULT",
)
