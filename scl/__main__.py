"""
Entry point of the scl console script (python -m scl).

main() is the outermost error boundary: parse and validation faults are
rendered by the dispatcher, Ctrl+C maps to exits.INTERRUPTED, and anything
escaping a handler is logged and maps to exits.UNEXPECTED.
"""
import logging
import sys

from . import exits, tree
from .commands import invoke
from .faults import console
from .utils import Unset

__prog__ = "scl"

logger = logging.getLogger("scl")


def main(argv=None, environ=None):
    """
    Run scl with argv (defaults to sys.argv[1:]) and return the exit code.

    environ defaults to os.environ; pass a mapping to isolate the run.
    """
    try:
        root = tree.build()
        return invoke(
            root,
            sys.argv[1:] if argv is None else argv,
            Unset if environ is None else environ,
        )
    except KeyboardInterrupt:
        console.print("interrupted", style="bold yellow")
        return exits.INTERRUPTED
    except Exception:
        logger.exception("unexpected error")
        return exits.UNEXPECTED


if __name__ == "__main__":
    sys.exit(main())
