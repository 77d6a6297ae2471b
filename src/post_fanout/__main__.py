"""Entry point for ``python -m post_fanout``."""

import sys

from post_fanout.cli import main

if __name__ == "__main__":
    sys.exit(main())
