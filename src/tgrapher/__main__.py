"""Allow ``python -m tgrapher``."""

import sys

from tgrapher.app.cli import main

if __name__ == "__main__":
    sys.exit(main())
