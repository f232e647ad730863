"""
scl validation engine: run rule checks on an already bound parse result.

Rules come from two places and are evaluated in this order:

1. argument validators, attached to a Cardinal/Option/Flag spec. They see one
   value at a time (each element for list specs) and only run for values that
   were explicitly supplied (command line or environment); declared defaults
   are trusted.
2. node validators, attached to a Command with add_validator(). They see the
   whole ParseResult and can express cross-argument rules such as "exactly one
   of --services or --all".

A validator returns None (or an empty string) when satisfied, a message when
not, or an iterable of messages when a single rule aggregates several
problems. Exceptions escaping a validator are reported as messages too, so a
buggy rule never hides the rest.

The outcome is a ValidationOutcome: an ordered tuple of messages that is falsy
when valid. Joining it with newlines gives the text the user sees.
"""
import logging

from .environment import DEFAULT
from .faults import FaultCode, ValidationError, ValidationExit

logger = logging.getLogger(__name__)


class ValidationOutcome(tuple):
    """
    Ordered error messages produced by validate().

    - bool(outcome) is False when every rule passed.
    - str(outcome) joins the messages with newlines.
    - exit() wraps the messages into a ValidationExit, ready for trigger().
    """

    __slots__ = ()

    def __new__(cls, messages=(), /):
        return super().__new__(cls, (str(message) for message in messages))

    @property
    def valid(self):
        return not self

    def __str__(self):
        return "\n".join(self)

    def __repr__(self):
        return "validation-outcome(%s)" % ", ".join(map(repr, self))

    def exit(self, **options):
        return ValidationExit([
            ValidationError(
                message,
                title="rule violation",
                code=FaultCode.RULE_VIOLATION,
            )
            for message in self
        ], **options)

    def raise_for_errors(self):
        """Raise a ValidationExit when the outcome carries any message."""
        if self:
            raise self.exit()


def _collect(messages, produced):
    if produced is None:
        return
    if isinstance(produced, str):
        if produced := produced.strip():
            messages.append(produced)
        return
    for message in produced:
        if message := str(message).strip():
            messages.append(message)


def _delegated(validator, exception):
    name = getattr(validator, "__name__", type(validator).__name__)
    logger.debug("validator %s raised %r", name, exception)
    return "%s failed: %s" % (name, exception) if str(exception) else "%s failed" % name


def validate(command, result, /):
    """
    Evaluate every rule attached to command against result.

    Parameters
    - command: the Command resolved by the parser (normally result.command).
    - result: ParseResult

    Returns
    - ValidationOutcome (empty when valid)
    """
    messages = []

    for argument in command.arguments:
        if result.sources.get(argument.dest, DEFAULT) == DEFAULT:
            continue
        messages.extend(argument.check(result[argument.dest]))

    for validator in command.validators:
        try:
            _collect(messages, validator(result))
        except Exception as exception:
            messages.append(_delegated(validator, exception))

    if messages:
        logger.debug("%d rule(s) failed for %r", len(messages), command.route)
    return ValidationOutcome(messages)


__all__ = (
    "ValidationOutcome",
    "validate",
)
