"""
Logging setup for the scl package.

Modules log through logging.getLogger(__name__), so every record lands under
the "scl" logger. configure() attaches a single rich handler on stderr:
WARNING and above by default, DEBUG when --verbose is given. Reconfiguring
replaces the previous handler instead of stacking a new one.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

NAME = "scl"

_theme = Theme({
    "logging.level.debug": "cyan",
    "logging.level.info": "green",
    "logging.level.warning": "yellow",
    "logging.level.error": "red bold",
    "logging.level.critical": "red bold reverse",
    "log.time": "dim cyan",
    "log.path": "dim blue",
})


def configure(verbose=False, /, *, console=None):
    """
    Attach a RichHandler to the package logger and set its level.

    Parameters
    - verbose: bool, DEBUG when true, WARNING otherwise.
    - console: optional rich Console (defaults to a themed stderr console).

    Returns
    - the configured logging.Logger
    """
    logger = logging.getLogger(NAME)
    level = logging.DEBUG if verbose else logging.WARNING

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True, theme=_theme),
        show_time=False,
        show_path=verbose,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


__all__ = (
    "configure",
)
