"""
Tests for Centralized Logging Utility and Injection Mechanics.

Verifies:
1. Singleton Proxy correctness.
2. Injection capabilities (`set_console`).
3. Standard logging wrappers and verbosity switching.
"""

import logging

from rich.console import Console

from import_splitter.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  set_console,
  set_verbose,
)


def test_console_singleton_proxy():
  assert callable(console.print)
  assert hasattr(console, "export_text")
  assert isinstance(console.backend, Console)


def test_custom_console_injection():
  capture_console = Console(record=True, width=200)
  set_console(capture_console)

  log_info("Captured Log")
  log_success("Split done")
  log_error("Broken file")

  output = capture_console.export_text()
  assert "Captured Log" in output
  assert "Split done" in output
  assert "Broken file" in output


def test_verbose_toggles_debug():
  capture_console = Console(record=True, width=200)
  set_console(capture_console)

  logging.getLogger("import_splitter.core.rewriter").debug("hidden detail")
  set_verbose(True)
  logging.getLogger("import_splitter.core.rewriter").debug("visible detail")
  set_verbose(False)

  output = capture_console.export_text()
  assert "hidden detail" not in output
  assert "visible detail" in output
