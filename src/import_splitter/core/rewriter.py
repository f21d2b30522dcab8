"""
Import Rewriter.

Expands every matched import statement into per-member import statements.

Several statements may import the same module path (they share one binding
record). Each statement emits its own share where it stands:

*   ``from X import a, b as c`` emits one statement per specifier it lists,
    declaration order.
*   ``import X [as Y]`` emits one statement per recorded usage,
    first-occurrence order. Usages are emitted once, at the shallowest such
    entry for the path (the first one on ties); other entries are removed.

Within one block, a specifier already emitted for the path is not emitted
again.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

import libcst as cst

from import_splitter.config import Matcher
from import_splitter.core.bindings import BindingRecord, BindingTable, NamedSpecifier
from import_splitter.core.matching import from_import_path, get_full_name, package_binding, specifier_names
from import_splitter.core.shapes import build_import

logger = logging.getLogger(__name__)


def usage_statements(record: BindingRecord) -> List[cst.BaseSmallStatement]:
  """
  Builds one import per recorded usage of ``record``.

  Args:
      record: A fully collected binding record.

  Returns:
      List[cst.BaseSmallStatement]: Statements in first-occurrence order. May be empty.
  """
  matcher = record.matcher
  return [build_import(matcher.target_for(member), member, matcher.identifier_for(member)) for member in record.usages]


def specifier_statements(matcher: Matcher, specifiers: Sequence[NamedSpecifier]) -> List[cst.BaseSmallStatement]:
  """
  Builds one import per named specifier, keeping the specifier's local name.
  """
  return [build_import(matcher.target_for(s.member), s.member, s.local_name) for s in specifiers]


class ImportRewriter(cst.CSTTransformer):
  """
  Replaces matched import statements using the collected binding table.

  The rewriter trusts the module paths recorded by the collector and does not
  re-run matcher predicates.
  """

  def __init__(self, table: BindingTable):
    self.table = table
    self.rewritten_paths: List[str] = []
    self._entry_counts: Dict[str, int] = {}
    self._blocks: List[int] = [0]
    self._next_block = 1
    self._emitted: Set[Tuple[int, str, NamedSpecifier]] = set()

  def visit_IndentedBlock(self, node: cst.IndentedBlock) -> None:
    self._enter_block()

  def leave_IndentedBlock(self, original_node: cst.IndentedBlock, updated_node: cst.IndentedBlock) -> cst.IndentedBlock:
    self._blocks.pop()
    return updated_node

  def visit_SimpleStatementSuite(self, node: cst.SimpleStatementSuite) -> None:
    self._enter_block()

  def leave_SimpleStatementLine(
    self, original_node: cst.SimpleStatementLine, updated_node: cst.SimpleStatementLine
  ) -> Union[cst.SimpleStatementLine, cst.FlattenSentinel, cst.RemovalSentinel]:
    """
    Fans a statement line out into one line per resulting statement.
    """
    statements = self._expand_body(updated_node.body)
    if statements is None:
      return updated_node
    if not statements:
      return cst.RemoveFromParent()

    lines = []
    last = len(statements) - 1
    for idx, stmt in enumerate(statements):
      line = cst.SimpleStatementLine(body=[stmt])
      if idx == 0:
        line = line.with_changes(leading_lines=updated_node.leading_lines)
      if idx == last:
        line = line.with_changes(trailing_whitespace=updated_node.trailing_whitespace)
      lines.append(line)

    return cst.FlattenSentinel(lines)

  def leave_SimpleStatementSuite(
    self, original_node: cst.SimpleStatementSuite, updated_node: cst.SimpleStatementSuite
  ) -> cst.SimpleStatementSuite:
    """
    Handles one-line suites such as ``if TYPE_CHECKING: import lodash as _``.
    """
    statements = self._expand_body(updated_node.body)
    self._blocks.pop()
    if statements is None:
      return updated_node
    return updated_node.with_changes(body=statements or [cst.Pass()])

  def _enter_block(self) -> None:
    self._blocks.append(self._next_block)
    self._next_block += 1

  def _expand_body(self, body: Sequence[cst.BaseSmallStatement]) -> Optional[List[cst.BaseSmallStatement]]:
    """
    Expands the small statements of a line or suite.

    Returns:
        Optional[List]: None if nothing matched, else the new statement list
        (semicolons reset so the printer places them).
    """
    result: List[cst.BaseSmallStatement] = []
    changed = False

    for small in body:
      expanded = self._expand(small)
      if expanded is None:
        result.append(small)
      else:
        changed = True
        result.extend(expanded)

    if not changed:
      return None
    return [stmt.with_changes(semicolon=cst.MaybeSentinel.DEFAULT) for stmt in result]

  def _expand(self, node: cst.BaseSmallStatement) -> Optional[List[cst.BaseSmallStatement]]:
    if isinstance(node, cst.ImportFrom):
      module_path = from_import_path(node)
      if module_path is None or not self.table.has(module_path):
        return None
      specifiers = [NamedSpecifier(*specifier_names(alias)) for alias in node.names]
      return self._specifier_share(self.table.get(module_path), specifiers)

    if isinstance(node, cst.Import):
      return self._expand_import(node)

    return None

  def _expand_import(self, node: cst.Import) -> Optional[List[cst.BaseSmallStatement]]:
    """
    Expands matched entries of ``import A, B as b, ...``.

    Unmatched entries stay in residual ``import`` statements, keeping their
    position relative to the expanded entries.
    """
    result: List[cst.BaseSmallStatement] = []
    kept: List[cst.ImportAlias] = []
    matched = False

    for alias in node.names:
      if package_binding(alias) is None:
        kept.append(alias)
        continue

      module_path = get_full_name(alias.name)
      ordinal = self._entry_counts.get(module_path, 0)
      self._entry_counts[module_path] = ordinal + 1
      if not self.table.has(module_path):
        kept.append(alias)
        continue

      matched = True
      if kept:
        result.append(_residual_import(node, kept))
        kept = []
      result.extend(self._usage_share(self.table.get(module_path), ordinal))

    if not matched:
      return None
    if kept:
      result.append(_residual_import(node, kept))
    return result

  def _usage_share(self, record: BindingRecord, ordinal: int) -> List[cst.BaseSmallStatement]:
    self._mark(record.module_path)
    if ordinal != record.usage_anchor:
      return []
    statements = usage_statements(record)
    logger.debug(f"Emitted {len(statements)} usage import(s) for '{record.module_path}'")
    return statements

  def _specifier_share(
    self, record: BindingRecord, specifiers: Sequence[NamedSpecifier]
  ) -> List[cst.BaseSmallStatement]:
    self._mark(record.module_path)
    block = self._blocks[-1]
    fresh = []
    for specifier in specifiers:
      key = (block, record.module_path, specifier)
      if key in self._emitted:
        continue
      self._emitted.add(key)
      fresh.append(specifier)
    logger.debug(f"Emitted {len(fresh)} named import(s) for '{record.module_path}'")
    return specifier_statements(record.matcher, fresh)

  def _mark(self, module_path: str) -> None:
    if module_path not in self.rewritten_paths:
      self.rewritten_paths.append(module_path)


def _residual_import(node: cst.Import, aliases: List[cst.ImportAlias]) -> cst.Import:
  aliases = list(aliases)
  aliases[-1] = aliases[-1].with_changes(comma=cst.MaybeSentinel.DEFAULT)
  return node.with_changes(names=aliases)
