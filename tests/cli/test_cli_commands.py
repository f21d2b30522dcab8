"""
Tests for the 'rewrite' and 'check' command handlers on real files.
"""

import io

import pytest
from rich.console import Console

from import_splitter.cli.commands import handle_check, handle_rewrite
from import_splitter.enums import ImportShape
from import_splitter.utils.console import set_console

SOURCE = "import lodash as _\n\nx = _.add(1, _.subtract(2, 3))\n"
EXPECTED = (
  "from lodash.add import add as __lodash_add\n"
  "from lodash.subtract import subtract as __lodash_subtract\n"
  "\n"
  "x = __lodash_add(1, __lodash_subtract(2, 3))\n"
)


@pytest.fixture(autouse=True)
def quiet_console():
  """Keeps log output out of captured stdout."""
  set_console(Console(file=io.StringIO()))


def _project(tmp_path, toml: str = "[project]\nname = 'demo'\n"):
  (tmp_path / "pyproject.toml").write_text(toml, encoding="utf-8")
  src = tmp_path / "src"
  (src / "pkg").mkdir(parents=True)
  (src / "pkg" / "a.py").write_text(SOURCE, encoding="utf-8")
  (src / "pkg" / "b.py").write_text("import os\n", encoding="utf-8")
  return src


def test_rewrite_single_file_to_stdout(tmp_path, capsys):
  src = _project(tmp_path)
  assert handle_rewrite(src / "pkg" / "a.py", None, ["lodash"]) == 0
  assert capsys.readouterr().out == EXPECTED


def test_rewrite_single_file_to_out(tmp_path):
  src = _project(tmp_path)
  out = tmp_path / "out" / "a.py"
  assert handle_rewrite(src / "pkg" / "a.py", out, ["lodash"], ImportShape.NAMED) == 0
  assert out.read_text(encoding="utf-8") == EXPECTED


def test_rewrite_directory_in_place(tmp_path):
  src = _project(tmp_path)
  assert handle_rewrite(src, None, ["lodash"]) == 0
  assert (src / "pkg" / "a.py").read_text(encoding="utf-8") == EXPECTED
  assert (src / "pkg" / "b.py").read_text(encoding="utf-8") == "import os\n"


def test_rewrite_directory_to_out(tmp_path):
  src = _project(tmp_path)
  out = tmp_path / "out"
  assert handle_rewrite(src, out, ["lodash"]) == 0
  assert (out / "pkg" / "a.py").read_text(encoding="utf-8") == EXPECTED
  assert (out / "pkg" / "b.py").read_text(encoding="utf-8") == "import os\n"
  assert (src / "pkg" / "a.py").read_text(encoding="utf-8") == SOURCE


def test_rewrite_uses_pyproject_packages(tmp_path, capsys):
  src = _project(
    tmp_path,
    '[tool.import_splitter.packages.lodash]\nidentifier = "__{member}"\nshape = "default"\n',
  )
  assert handle_rewrite(src / "pkg" / "a.py", None, []) == 0
  assert capsys.readouterr().out.startswith("from lodash import add as __add\n")


def test_rewrite_reports_syntax_errors(tmp_path):
  src = _project(tmp_path)
  (src / "pkg" / "broken.py").write_text("def (:\n", encoding="utf-8")
  assert handle_rewrite(src, None, ["lodash"]) == 1
  # Valid files are still processed
  assert (src / "pkg" / "a.py").read_text(encoding="utf-8") == EXPECTED


def test_rewrite_requires_packages(tmp_path):
  src = _project(tmp_path)
  assert handle_rewrite(src, None, []) == 1


def test_rewrite_missing_input(tmp_path):
  assert handle_rewrite(tmp_path / "missing.py", None, ["lodash"]) == 1


def test_check_reports_pending_changes(tmp_path):
  src = _project(tmp_path)
  assert handle_check(src, ["lodash"]) == 1
  # check never writes
  assert (src / "pkg" / "a.py").read_text(encoding="utf-8") == SOURCE


def test_check_clean_tree(tmp_path):
  src = _project(tmp_path)
  (src / "pkg" / "a.py").write_text(EXPECTED, encoding="utf-8")
  assert handle_check(src, ["lodash"]) == 0
