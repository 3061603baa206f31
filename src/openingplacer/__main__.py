"""Command-line interface."""
import sys

from openingplacer.main import main

if __name__ == "__main__":
    sys.exit(main())
