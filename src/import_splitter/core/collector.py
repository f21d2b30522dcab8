"""
Usage Collector.

Runs two passes over a parsed module:

1.  **Scanning** (``ImportScanner``): finds import statements governed by a
    matcher and records, per module path, the whole-package alias and the
    explicit named specifiers.
2.  **Usage rewriting** (``UsageCollector``): replaces every ``alias.member``
    access rooted at a tracked alias with a plain name, recording members that
    no named specifier covers as usages.

The binding table is complete before the second pass starts, so accesses that
appear above their import (e.g. inside a function defined earlier) still
resolve.
"""

import logging
from typing import Dict, Sequence

import libcst as cst

from import_splitter.config import Matcher
from import_splitter.core.bindings import BindingTable, NamedSpecifier
from import_splitter.core.matching import (
  find_matcher,
  from_import_path,
  get_full_name,
  package_binding,
  specifier_names,
)

logger = logging.getLogger(__name__)


class ImportScanner(cst.CSTVisitor):
  """
  Populates a ``BindingTable`` from matched import statements.
  """

  def __init__(self, matchers: Sequence[Matcher], table: BindingTable):
    self.matchers = matchers
    self.table = table
    self._depth = 0
    self._entry_counts: Dict[str, int] = {}

  def visit_IndentedBlock(self, node: cst.IndentedBlock) -> None:
    self._depth += 1

  def leave_IndentedBlock(self, original_node: cst.IndentedBlock) -> None:
    self._depth -= 1

  def visit_SimpleStatementSuite(self, node: cst.SimpleStatementSuite) -> None:
    self._depth += 1

  def leave_SimpleStatementSuite(self, original_node: cst.SimpleStatementSuite) -> None:
    self._depth -= 1

  def visit_Import(self, node: cst.Import) -> bool:
    """
    Handles ``import X [as Y], ...`` entry by entry.

    Every whole-package entry is numbered per path, matched or not, so the
    rewriter can find the usage anchor by counting the same entries.
    """
    for alias in node.names:
      binding = package_binding(alias)
      if binding is None:
        continue

      module_path = get_full_name(alias.name)
      ordinal = self._entry_counts.get(module_path, 0)
      self._entry_counts[module_path] = ordinal + 1

      matcher = find_matcher(self.matchers, module_path, node)
      if matcher is None:
        continue

      self.table.open(module_path, matcher)
      self.table.bind_alias(module_path, binding, ordinal=ordinal, depth=self._depth)
      logger.debug(f"Tracking '{binding}' as whole-package alias of '{module_path}' ({matcher.key})")

    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    """
    Handles ``from X import a, b as c``.
    """
    module_path = from_import_path(node)
    if module_path is None:
      return False

    matcher = find_matcher(self.matchers, module_path, node)
    if matcher is None:
      return False

    self.table.open(module_path, matcher)
    specifiers = [NamedSpecifier(*specifier_names(alias)) for alias in node.names]
    self.table.add_specifiers(module_path, specifiers)
    logger.debug(f"Tracking {len(specifiers)} named import(s) from '{module_path}' ({matcher.key})")

    return False


class UsageCollector(cst.CSTTransformer):
  """
  Rewrites member accesses on tracked aliases and records usages.

  Usage:
      collector = UsageCollector(matchers)
      tree = collector.collect(tree)
      collector.table  # populated binding records
  """

  def __init__(self, matchers: Sequence[Matcher]):
    """
    Args:
        matchers: Normalized matchers, in configuration order.
    """
    self.matchers = matchers
    self.table = BindingTable()

  def collect(self, tree: cst.Module) -> cst.Module:
    """
    Scans imports, then rewrites accesses.

    Args:
        tree: The parsed module. It is not mutated.

    Returns:
        cst.Module: The module with member accesses rewritten.
    """
    tree.visit(ImportScanner(self.matchers, self.table))
    if not len(self.table):
      return tree
    return tree.visit(self)

  def visit_Import(self, node: cst.Import) -> bool:
    # Dotted module names inside imports are paths, not member accesses.
    return False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> bool:
    return False

  def leave_Attribute(self, original_node: cst.Attribute, updated_node: cst.Attribute) -> cst.BaseExpression:
    """
    Replaces ``alias.member`` with the name the member will be bound to.

    Args:
        original_node: The node before transformation.
        updated_node: The node after children were transformed.

    Returns:
        cst.BaseExpression: A ``Name`` for tracked accesses, else ``updated_node``.
    """
    if not isinstance(updated_node.value, cst.Name):
      return updated_node

    record = self.table.record_for_alias(updated_node.value.value)
    if record is None:
      return updated_node

    member = updated_node.attr.value
    specifier = record.find_specifier(member)
    if specifier is not None:
      local_name = specifier.local_name
    else:
      if record.add_usage(member):
        logger.debug(f"Usage '{member}' recorded for '{record.module_path}'")
      local_name = record.matcher.identifier_for(member)

    return cst.Name(local_name, lpar=updated_node.lpar, rpar=updated_node.rpar)
