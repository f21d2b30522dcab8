"""
Import Shape Synthesis.

Builds the per-member import statements emitted by the Import Rewriter. The
shape of each statement is decided by the destination's ``ImportShape``:

- ``NAMED``: ``from <path> import <member> [as <local>]``
- ``NAMESPACE``: ``import <path> [as <local>]``
- ``DEFAULT``: ``from <parent> import <leaf> [as <local>]``, binding the object
  the path itself names (``import <path> [as <local>]`` for a top-level path).
"""

from typing import Optional, Union

import libcst as cst

from import_splitter.config import ImportTarget
from import_splitter.enums import ImportShape


def create_dotted_name(name_str: str) -> Union[cst.Name, cst.Attribute]:
  """
  Creates a CST node structure for a dotted path string.

  Args:
      name_str (str): Dot-separated path (e.g. "lodash.add").

  Returns:
      Union[cst.Name, cst.Attribute]: The constructed AST node.
  """
  parts = name_str.split(".")
  node = cst.Name(parts[0])
  for part in parts[1:]:
    node = cst.Attribute(value=node, attr=cst.Name(part))
  return node


def _as_name(local: str, bound: str) -> Optional[cst.AsName]:
  if local == bound:
    return None
  return cst.AsName(name=cst.Name(local))


def build_import(target: ImportTarget, member: str, local: str) -> cst.BaseSmallStatement:
  """
  Synthesizes one import statement binding ``local``.

  Args:
      target: Destination path and shape.
      member: The original member name (imported name for the named shape).
      local: The local identifier the statement must bind.

  Returns:
      cst.BaseSmallStatement: An ``Import`` or ``ImportFrom`` node.
  """
  if target.shape == ImportShape.NAMED:
    return cst.ImportFrom(
      module=create_dotted_name(target.path),
      names=[cst.ImportAlias(name=cst.Name(member), asname=_as_name(local, member))],
    )

  if target.shape == ImportShape.DEFAULT and "." in target.path:
    parent, leaf = target.path.rsplit(".", 1)
    return cst.ImportFrom(
      module=create_dotted_name(parent),
      names=[cst.ImportAlias(name=cst.Name(leaf), asname=_as_name(local, leaf))],
    )

  return cst.Import(names=[cst.ImportAlias(name=create_dotted_name(target.path), asname=_as_name(local, target.path))])
