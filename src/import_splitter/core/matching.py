"""
Import Matching Logic.

Shared helpers deciding which import statements a matcher governs. Both the
Usage Collector and the Import Rewriter go through these functions, so the two
passes agree on what counts as a tracked import.
"""

import re
from typing import Optional, Sequence, Tuple, Union

import libcst as cst

from import_splitter.config import Matcher, PathMatcher


def get_full_name(node: Union[cst.Name, cst.Attribute]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the dotted name.

  Returns:
    str: The dotted path (e.g. "lodash.fp"), or an empty string if the node is
    not a plain Name/Attribute chain.

  Example:
    >>> get_full_name(cst.Attribute(value=cst.Name("lodash"), attr=cst.Name("fp")))
    'lodash.fp'
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    base = get_full_name(node.value)
    return f"{base}.{node.attr.value}" if base else ""
  return ""


def from_import_path(node: cst.ImportFrom) -> Optional[str]:
  """
  Module path of a ``from X import ...`` statement eligible for splitting.

  Relative imports and star imports bind nothing the engine can track.

  Args:
      node: The ImportFrom statement.

  Returns:
      Optional[str]: The dotted module path, or None if the statement is not eligible.
  """
  if node.relative or node.module is None:
    return None
  if isinstance(node.names, cst.ImportStar):
    return None
  return get_full_name(node.module) or None


def package_binding(alias: cst.ImportAlias) -> Optional[str]:
  """
  Local name standing for the whole package in an ``import X [as Y]`` entry.

  ``import a.b`` without ``as`` binds ``a`` rather than the imported package,
  so it has no whole-package binding.

  Args:
      alias: One entry of an Import statement.

  Returns:
      Optional[str]: ``Y`` for ``import X as Y``, ``X`` for ``import X``, else None.
  """
  if alias.asname is not None:
    target = alias.asname.name
    return target.value if isinstance(target, cst.Name) else None
  if isinstance(alias.name, cst.Name):
    return alias.name.value
  return None


def specifier_names(alias: cst.ImportAlias) -> Tuple[str, Optional[str]]:
  """
  Imported member name and optional local alias of a from-import entry.

  Returns:
      Tuple[str, Optional[str]]: ``(member, alias_or_None)``.
  """
  member = get_full_name(alias.name)
  local = None
  if alias.asname is not None and isinstance(alias.asname.name, cst.Name):
    local = alias.asname.name.value
  return member, local


def is_match(matcher: PathMatcher, path: str, node: cst.CSTNode) -> bool:
  """
  Tests a module path against a pattern (``re.search``) or predicate.

  Predicate exceptions are not caught.
  """
  if isinstance(matcher, re.Pattern):
    return matcher.search(path) is not None
  return bool(matcher(path, node))


def find_matcher(matchers: Sequence[Matcher], path: str, node: cst.CSTNode) -> Optional[Matcher]:
  """
  Returns the first matcher accepting the import, in configuration order.

  Args:
      matchers: Normalized matchers.
      path: Dotted module path of the import.
      node: The Import/ImportFrom statement, handed to predicate matchers.

  Returns:
      Optional[Matcher]: The winning matcher, or None.
  """
  for matcher in matchers:
    if is_match(matcher.match, path, node):
      return matcher
  return None
