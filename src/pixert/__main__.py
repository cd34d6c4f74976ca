"""Entry point for ``python -m pixert``."""

import sys

from pixert.cli import main

if __name__ == "__main__":
    sys.exit(main())
