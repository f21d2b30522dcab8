"""
Enumerations for import-splitter.

This module defines the standard enumerations used across the codebase to
describe the shape of synthesized import statements.
"""

from enum import Enum


class ImportShape(str, Enum):
  """
  Form taken by a synthesized per-member import statement.

  Exactly one shape applies to a destination, which removes the ambiguity of
  carrying separate "named" and "star" flags.
  """

  DEFAULT = "default"  # from <parent> import <leaf> as <local>
  NAMED = "named"  # from <path> import <member> as <local>
  NAMESPACE = "namespace"  # import <path> as <local>
