"""
Process exit codes returned by scl.commands.invoke and scl.__main__.main.

Every exit path uses one of these values instead of a bare integer.
"""

SUCCESS = 0
"""The command ran to completion."""

FAILURE = 1
"""Parsing or validation failed; the faults were printed on stderr."""

UNEXPECTED = 2
"""An exception escaped the handler."""

INTERRUPTED = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""


__all__ = (
    "SUCCESS",
    "FAILURE",
    "UNEXPECTED",
    "INTERRUPTED",
)
