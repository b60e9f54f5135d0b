"""CLI entry point for the earnings digest.

Usage:
    python -m earnings_digest analyze transcript.pdf
    python -m earnings_digest serve
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
