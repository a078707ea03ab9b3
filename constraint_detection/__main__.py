"""
Main entry point for the constraint detection package.

Allows running: python -m constraint_detection <command>
"""

import sys

from constraint_detection.cli import main

if __name__ == "__main__":
    sys.exit(main())
