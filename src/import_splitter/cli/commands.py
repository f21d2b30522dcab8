"""
CLI Command Handlers.

Implements the ``rewrite`` and ``check`` commands. Both:
1. Load the matcher configuration (pyproject.toml + ``--package`` keys).
2. Run the `SplitEngine` over a file or every ``*.py`` file of a directory.
3. Report per-file outcomes and a batch summary.
"""

from pathlib import Path
from typing import Dict, List, Optional

from rich.table import Table

from import_splitter.config import MatcherConfigError, SplitterConfig
from import_splitter.core.conversion_result import ConversionResult
from import_splitter.core.engine import SplitEngine
from import_splitter.enums import ImportShape
from import_splitter.utils.console import console, log_error, log_info, log_success, log_warning


def _build_engine(input_path: Path, packages: List[str], shape: Optional[ImportShape]) -> Optional[SplitEngine]:
  """
  Loads configuration near ``input_path`` and builds the engine.

  Returns:
      Optional[SplitEngine]: None if the configuration is unusable (already logged).
  """
  search_path = input_path if input_path.is_dir() else input_path.parent
  try:
    config = SplitterConfig.load(search_path=search_path, packages=packages, shape=shape)
    if not config.packages:
      log_error("No packages configured. Use --package or [tool.import_splitter.packages] in pyproject.toml.")
      return None
    engine = SplitEngine(config.matchers())
  except MatcherConfigError as e:
    log_error(f"Invalid configuration: {e}")
    return None

  log_info(f"Splitting imports of: {', '.join(m.key for m in engine.matchers)}")
  return engine


def _collect_files(input_path: Path) -> List[Path]:
  if input_path.is_file():
    return [input_path]
  return sorted(input_path.rglob("*.py"))


def _run_file(engine: SplitEngine, input_path: Path) -> ConversionResult:
  """
  Reads and processes a single file.

  Args:
      engine: The configured engine.
      input_path: Source file path.

  Returns:
      ConversionResult: Result object containing status and code.
  """
  try:
    with open(input_path, "rt", encoding="utf-8") as f:
      code = f.read()
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {e}")
    return ConversionResult(success=False, errors=[str(e)])

  try:
    result = engine.run(code, filename=str(input_path))
  except MatcherConfigError as e:
    log_error(f"Failed to rewrite {input_path}: {e}")
    return ConversionResult(source=code, success=False, errors=[str(e)])

  if not result.success:
    for error in result.errors:
      log_error(error)
  return result


def _write_output(output_path: Path, code: str) -> None:
  output_path.parent.mkdir(parents=True, exist_ok=True)
  with open(output_path, "wt", encoding="utf-8") as f:
    f.write(code)


def handle_rewrite(
  input_path: Path,
  output_path: Optional[Path],
  packages: List[str],
  shape: Optional[ImportShape] = None,
) -> int:
  """
  Handles the 'rewrite' command execution.

  A single file is printed to stdout unless ``output_path`` is given. A
  directory is mirrored into ``output_path``, or rewritten in place.

  Args:
      input_path: Path to the source file or directory.
      output_path: Where rewritten code should be saved.
      packages: Package keys given on the command line.
      shape: Import shape for the command line package keys.

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  engine = _build_engine(input_path, packages, shape)
  if engine is None:
    return 1

  if input_path.is_file():
    result = _run_file(engine, input_path)
    if not result.success:
      return 1
    if output_path:
      _write_output(output_path, result.code)
      log_success(f"Rewritten: [path]{input_path}[/path] -> [path]{output_path}[/path]")
    else:
      print(result.code, end="")
    return 0

  files = _collect_files(input_path)
  if not files:
    log_warning(f"No .py files found in {input_path}")
    return 0

  log_info(f"Processing {len(files)} files from {input_path}...")
  batch_results: Dict[str, ConversionResult] = {}

  for src_file in files:
    rel_path = src_file.relative_to(input_path)
    result = _run_file(engine, src_file)
    batch_results[str(rel_path)] = result
    if not result.success:
      continue

    if output_path:
      _write_output(output_path / rel_path, result.code)
    elif result.changed:
      _write_output(src_file, result.code)

  _print_batch_summary(batch_results)
  return 0 if all(r.success for r in batch_results.values()) else 1


def handle_check(input_path: Path, packages: List[str], shape: Optional[ImportShape] = None) -> int:
  """
  Handles the 'check' command execution.

  Args:
      input_path: Path to the source file or directory.
      packages: Package keys given on the command line.
      shape: Import shape for the command line package keys.

  Returns:
      int: 0 if nothing would change, 1 otherwise (or on failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  engine = _build_engine(input_path, packages, shape)
  if engine is None:
    return 1

  batch_results: Dict[str, ConversionResult] = {}
  for src_file in _collect_files(input_path):
    result = _run_file(engine, src_file)
    batch_results[str(src_file)] = result
    if result.changed:
      log_warning(f"Would rewrite [path]{src_file}[/path] ({', '.join(result.rewritten_paths)})")

  _print_batch_summary(batch_results)
  pending = any(r.changed or not r.success for r in batch_results.values())
  return 1 if pending else 0


def _print_batch_summary(results: Dict[str, ConversionResult]) -> None:
  """
  Renders a summary table of the batch to the console.

  Args:
      results: Dictionary mapping filenames to results.
  """
  total = len(results)
  changed = sum(1 for r in results.values() if r.changed)
  failures = sum(1 for r in results.values() if not r.success)

  if failures == 0 and changed == 0:
    log_success(f"Batch Complete: {total} files, nothing to split.")
    return

  table = Table(title="Import Split Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Details")

  for filename, res in results.items():
    if not res.success:
      table.add_row(filename, "❌ Failed", "; ".join(res.errors) or "Unknown Error")
    elif res.changed:
      table.add_row(filename, "✂️ Split", ", ".join(res.rewritten_paths))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {changed} Split, {failures} Failed, {total - changed - failures} Unchanged.")
