"""Allow ``python -m coursecraft``."""

import sys

from .lesson_cli import main

if __name__ == "__main__":
    sys.exit(main())
