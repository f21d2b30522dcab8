"""
Entry point for module execution (``python -m import_splitter``).

This module delegates execution to the CLI handler in ``import_splitter.cli.__main__``.
"""

import sys
from import_splitter.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
