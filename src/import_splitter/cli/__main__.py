"""
Main Entry Point for import-splitter CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `import_splitter.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from import_splitter import __version__
from import_splitter.cli import commands
from import_splitter.enums import ImportShape
from import_splitter.utils.console import set_verbose


def _add_package_args(cmd: argparse.ArgumentParser) -> None:
  cmd.add_argument(
    "--package",
    dest="packages",
    action="append",
    default=[],
    help="Package key to split (repeatable). Merged with [tool.import_splitter.packages] from pyproject.toml",
  )
  cmd.add_argument(
    "--shape",
    choices=[shape.value for shape in ImportShape],
    default=None,
    help="Import shape for --package keys (default: named)",
  )


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="import-splitter: per-member import rewriter")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output from the rewriting passes")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: REWRITE ---
  cmd_rw = subparsers.add_parser("rewrite", help="Rewrite a Python file or directory")
  cmd_rw.add_argument("path", type=Path, help="Input source file or directory")
  cmd_rw.add_argument(
    "--out",
    type=Path,
    default=None,
    help="Output destination (file or dir). Files print to stdout and directories are rewritten in place when omitted",
  )
  _add_package_args(cmd_rw)

  # --- Command: CHECK ---
  cmd_check = subparsers.add_parser("check", help="Report files that would be rewritten")
  cmd_check.add_argument("path", type=Path, help="Input source file or directory")
  _add_package_args(cmd_check)

  args = parser.parse_args(argv)
  set_verbose(args.verbose)
  shape = ImportShape(args.shape) if args.shape else None

  if args.command == "rewrite":
    return commands.handle_rewrite(args.path, args.out, args.packages, shape)

  elif args.command == "check":
    return commands.handle_check(args.path, args.packages, shape)

  return 0


if __name__ == "__main__":
  sys.exit(main())
