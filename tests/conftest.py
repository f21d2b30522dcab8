"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Shared matcher configurations for the lodash scenarios.
- Console isolation so log capture in one test does not leak into another.
"""

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

# Add src to path so we can import 'import_splitter' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from import_splitter import ImportShape, ImportTarget, SplitEngine  # noqa: E402
from import_splitter.utils.console import reset_console  # noqa: E402


def _lodash_options(shape: ImportShape) -> dict:
  return {
    "lodash": {
      "write_identifier": lambda prop: f"__{prop}",
      "write_path": lambda prop: ImportTarget(path=f"lodash.{prop}", shape=shape),
    }
  }


@pytest.fixture
def named_engine() -> SplitEngine:
  """Engine for key 'lodash' with the named shape and '__' identifiers."""
  return SplitEngine(_lodash_options(ImportShape.NAMED))


@pytest.fixture
def default_engine() -> SplitEngine:
  """Engine for key 'lodash' with the default shape and '__' identifiers."""
  return SplitEngine(_lodash_options(ImportShape.DEFAULT))


@pytest.fixture
def rewrite() -> Callable[[SplitEngine, str], str]:
  """Runs an engine over dedented source and returns the generated code."""

  def _rewrite(engine: SplitEngine, code: str) -> str:
    result = engine.run(textwrap.dedent(code))
    assert result.success, result.errors
    return result.code

  return _rewrite


@pytest.fixture(autouse=True)
def isolate_console():
  """Ensures console is reset to stdout after every test."""
  yield
  reset_console()
