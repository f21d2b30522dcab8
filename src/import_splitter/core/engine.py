"""
Orchestration Engine for Import Splitting.

This module provides the `SplitEngine`, the driver running the two rewriting
phases over one source unit:

1.  **Parsing**: source text into a LibCST tree.
2.  **Usage Collection**: ``alias.member`` accesses become plain names and the
    binding table is filled (`UsageCollector`).
3.  **Import Rewriting**: matched imports are expanded into per-member imports
    (`ImportRewriter`).
4.  **Printing**: the tree back to source text.

Each call to `transform` or `run` uses fresh collector and rewriter state, so
one engine can process any number of source units.
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

import libcst as cst

from import_splitter.config import Matcher, OptionsInput, normalize_matchers
from import_splitter.core.collector import UsageCollector
from import_splitter.core.conversion_result import ConversionResult
from import_splitter.core.rewriter import ImportRewriter

logger = logging.getLogger(__name__)


class SplitEngine:
  """
  The main processing unit.

  Holds the normalized, read-only matchers; all per-unit state lives in the
  passes created for each call.
  """

  def __init__(self, matchers: Union[OptionsInput, Sequence[Matcher]]):
    """
    Initializes the Engine.

    Args:
        matchers: Raw options (key -> options mapping, or ordered pairs) or
            already normalized matchers. Normalization happens here, once.

    Raises:
        MatcherConfigError: If the options are invalid.
    """
    self.matchers = normalize_matchers(matchers)

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Args:
        code (str): Python source code.

    Returns:
        cst.Module: The parsed syntax tree.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def to_source(self, tree: cst.Module) -> str:
    return tree.code

  def transform(self, tree: cst.Module) -> cst.Module:
    """
    Runs the Usage Collector followed by the Import Rewriter.

    Args:
        tree: The parsed module. It is not mutated.

    Returns:
        cst.Module: The rewritten module.
    """
    return self._split(tree)[0]

  def _split(self, tree: cst.Module) -> Tuple[cst.Module, List[str]]:
    collector = UsageCollector(self.matchers)
    collected = collector.collect(tree)
    if not len(collector.table):
      return collected, []

    rewriter = ImportRewriter(collector.table)
    return collected.visit(rewriter), rewriter.rewritten_paths

  def run(self, code: str, filename: Optional[str] = None) -> ConversionResult:
    """
    Processes one source unit end to end.

    Syntax errors are reported in the result; errors raised by matcher
    functions propagate to the caller.

    Args:
        code (str): Python source code.
        filename (Optional[str]): Used in log and error messages.

    Returns:
        ConversionResult: The generated code and status.
    """
    label = filename or "<string>"
    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      logger.debug(f"Parse failure in {label}: {e}")
      return ConversionResult(code=code, source=code, success=False, errors=[f"{label}: {e}"])

    new_tree, rewritten = self._split(tree)
    result = ConversionResult(code=self.to_source(new_tree), source=code, rewritten_paths=rewritten)
    if result.rewritten_paths:
      logger.debug(f"{label}: split {', '.join(result.rewritten_paths)}")
    return result
