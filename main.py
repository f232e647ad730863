import sys

from scl.__main__ import main

__prog__ = "scl"

if __name__ == '__main__':
    sys.exit(main())
