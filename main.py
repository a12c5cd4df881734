"""Entry point for the MySQL slow query monitor."""

import sys

from slowlog.cli import main

if __name__ == "__main__":
    sys.exit(main())
