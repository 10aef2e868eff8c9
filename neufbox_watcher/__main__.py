"""
Main entry point for the neufbox_watcher package.

Allows running the watcher as: python -m neufbox_watcher
"""

import sys

from neufbox_watcher.cli import main

if __name__ == "__main__":
    sys.exit(main())
