"""
Data structures representing the output of the splitting pipeline.

This module defines the `ConversionResult` Pydantic model, which encapsulates
the generated code, any errors encountered, and the module paths that were
split into per-member imports.
"""

from typing import List

from pydantic import BaseModel, Field


class ConversionResult(BaseModel):
  """
  Container for the results of processing one source unit.
  """

  code: str = Field(default="", description="The generated source code.")
  source: str = Field(default="", description="The original source code.")
  errors: List[str] = Field(default_factory=list, description="List of error messages encountered.")
  success: bool = Field(
    default=True,
    description="True if the source could be parsed and rewritten.",
  )
  rewritten_paths: List[str] = Field(
    default_factory=list, description="Module paths whose imports were split, in source order."
  )

  @property
  def changed(self) -> bool:
    """True if the generated code differs from the source."""
    return self.success and self.code != self.source
