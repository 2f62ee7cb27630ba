"""
granola-import entry point

Run with: python main.py export.json --vault ~/Notes
Or, once installed: granola-import export.json --vault ~/Notes
"""

import sys

from granola_import.cli import main

if __name__ == "__main__":
    sys.exit(main())
