"""
Binding Records.

Per-module-path bookkeeping shared by the Usage Collector and the Import
Rewriter. A ``BindingTable`` lives for exactly one run over one source unit.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from import_splitter.config import Matcher


@dataclass(frozen=True)
class NamedSpecifier:
  """
  One entry of ``from <path> import <member> [as <alias>]``.
  """

  member: str
  alias: Optional[str] = None

  @property
  def local_name(self) -> str:
    """The name bound in the importing module."""
    return self.alias or self.member


@dataclass
class BindingRecord:
  """
  Tracking state for one matched module path.

  Attributes:
      module_path: Literal dotted path of the matched import(s).
      matcher: The matcher that claimed the path.
      local_alias: Last whole-package alias written for the path.
      named_specifiers: Explicit from-import entries, declaration order.
      usages: Members accessed through a whole-package alias and not covered
          by a named specifier, first-occurrence order, no duplicates.
      usage_anchor: Ordinal (among ``import <path> [as ...]`` entries of the
          path, source order) of the entry where usage imports are emitted.
      anchor_depth: Block nesting depth of that entry; 0 is module level.
  """

  module_path: str
  matcher: Matcher
  local_alias: Optional[str] = None
  named_specifiers: List[NamedSpecifier] = field(default_factory=list)
  usages: List[str] = field(default_factory=list)
  usage_anchor: Optional[int] = None
  anchor_depth: Optional[int] = None

  def find_specifier(self, member: str) -> Optional[NamedSpecifier]:
    """
    Looks up an explicit specifier by its *imported* member name.

    Args:
        member: The accessed member name.

    Returns:
        Optional[NamedSpecifier]: The first specifier importing ``member``.
    """
    for specifier in self.named_specifiers:
      if specifier.member == member:
        return specifier
    return None

  def add_usage(self, member: str) -> bool:
    """
    Records a member usage once.

    Returns:
        bool: True if the member was newly recorded.
    """
    if member in self.usages:
      return False
    self.usages.append(member)
    return True


class BindingTable:
  """
  Binding records keyed by module path, plus the alias -> module path index.
  """

  def __init__(self) -> None:
    self._records: Dict[str, BindingRecord] = {}
    self._alias_index: Dict[str, str] = {}

  def open(self, module_path: str, matcher: Matcher) -> BindingRecord:
    """
    Returns the record for ``module_path``, creating it on first sight.

    Later statements for the same path merge into the existing record; the
    matcher that claimed the path first is kept.
    """
    record = self._records.get(module_path)
    if record is None:
      record = BindingRecord(module_path=module_path, matcher=matcher)
      self._records[module_path] = record
    return record

  def bind_alias(self, module_path: str, alias: str, ordinal: Optional[int] = None, depth: int = 0) -> None:
    """
    Records a whole-package alias for ``module_path``.

    Args:
        module_path: The tracked path.
        alias: The bound local name.
        ordinal: Position of the entry among ``import <path>`` entries of the
            same path. When given, the shallowest entry (first on ties)
            becomes the usage anchor.
        depth: Block nesting depth of the entry.
    """
    record = self._records[module_path]
    record.local_alias = alias
    self._alias_index[alias] = module_path
    if ordinal is not None and (record.anchor_depth is None or depth < record.anchor_depth):
      record.usage_anchor = ordinal
      record.anchor_depth = depth

  def add_specifiers(self, module_path: str, specifiers: List[NamedSpecifier]) -> None:
    """
    Appends specifiers, skipping (member, alias) pairs already recorded.
    """
    recorded = self._records[module_path].named_specifiers
    for specifier in specifiers:
      if specifier not in recorded:
        recorded.append(specifier)

  def has(self, module_path: str) -> bool:
    return module_path in self._records

  def get(self, module_path: str) -> Optional[BindingRecord]:
    return self._records.get(module_path)

  def is_alias(self, name: str) -> bool:
    return name in self._alias_index

  def record_for_alias(self, alias: str) -> Optional[BindingRecord]:
    module_path = self._alias_index.get(alias)
    if module_path is None:
      return None
    return self._records[module_path]

  def __iter__(self) -> Iterator[BindingRecord]:
    return iter(self._records.values())

  def __len__(self) -> int:
    return len(self._records)
