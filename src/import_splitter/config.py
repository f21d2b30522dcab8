"""
Matcher Configuration.

Defines the options a caller supplies per tracked package key, the normalized
``Matcher`` value objects the engine consumes, and the loader reading
``[tool.import_splitter]`` tables from ``pyproject.toml``.

Normalization happens once, before any traversal. Caller-supplied option
objects are never mutated; a fresh tuple of frozen ``Matcher`` objects is
built instead. The tuple keeps configuration order, which is the tie-break
when several matchers accept the same import (first match wins).
"""

import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import libcst as cst
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from import_splitter.enums import ImportShape

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

logger = logging.getLogger(__name__)

MatchPredicate = Callable[[str, cst.CSTNode], bool]
PathMatcher = Union["re.Pattern[str]", MatchPredicate]

_SHAPE_FLAGS = {
  "is_named": ImportShape.NAMED,
  "isNamed": ImportShape.NAMED,
  "is_star": ImportShape.NAMESPACE,
  "isStar": ImportShape.NAMESPACE,
}


class MatcherConfigError(ValueError):
  """
  Raised when matcher options are invalid or produce an invalid destination.
  """


@dataclass(frozen=True)
class ImportTarget:
  """
  Destination of a single member: the module path and the import shape.
  """

  path: str
  shape: ImportShape = ImportShape.NAMED

  @classmethod
  def coerce(cls, value: Any) -> "ImportTarget":
    """
    Builds a target from the value returned by a ``write_path`` function.

    Accepts an ``ImportTarget``, a bare module path (named shape), or a mapping
    with a ``path`` key plus either ``shape`` or one of the boolean flags
    ``is_named`` / ``is_star`` (camelCase spellings are accepted too).

    Args:
        value: The raw destination description.

    Returns:
        ImportTarget: The normalized destination.

    Raises:
        MatcherConfigError: If the value cannot describe a single destination.
    """
    if isinstance(value, ImportTarget):
      return value
    if isinstance(value, str):
      return cls(path=value)
    if not isinstance(value, Mapping):
      raise MatcherConfigError(f"Cannot build an import target from {value!r}")

    path = value.get("path")
    if not isinstance(path, str) or not path:
      raise MatcherConfigError(f"Import target requires a non-empty 'path': {value!r}")

    if "shape" in value:
      try:
        return cls(path=path, shape=ImportShape(value["shape"]))
      except ValueError:
        raise MatcherConfigError(f"Unknown import shape: {value['shape']!r}")

    flagged = {shape for flag, shape in _SHAPE_FLAGS.items() if value.get(flag)}
    if len(flagged) > 1:
      raise MatcherConfigError(f"Import target for '{path}' is both named and namespace.")
    if flagged:
      return cls(path=path, shape=flagged.pop())

    # Flags present but all false select the plain default form.
    if any(flag in value for flag in _SHAPE_FLAGS):
      return cls(path=path, shape=ImportShape.DEFAULT)
    return cls(path=path)


class MatcherOptions(BaseModel):
  """
  Caller-supplied options for one tracked package key.
  """

  model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True, extra="forbid")

  match: Any = Field(None, description="Regex (string or compiled) or predicate over (path, import node).")
  write_identifier: Optional[Callable[[str], str]] = Field(
    None, description="Maps a member name to the synthesized local identifier."
  )
  write_path: Optional[Callable[[str], Any]] = Field(
    None, description="Maps a member name to its destination (ImportTarget, path string or mapping)."
  )
  identifier: Optional[str] = Field(None, description="Identifier template using {key} and {member}.")
  path: Optional[str] = Field(None, description="Module path template using {key} and {member}.")
  shape: ImportShape = Field(ImportShape.NAMED, description="Shape used together with the path template.")

  @field_validator("match")
  @classmethod
  def validate_match(cls, v: Any) -> Any:
    """
    Compiles string patterns and checks that other values are usable matchers.

    Args:
        v: The raw ``match`` option.

    Returns:
        The compiled pattern, the predicate, or None.

    Raises:
        ValueError: If the pattern is invalid or the value is neither pattern nor callable.
    """
    if v is None or isinstance(v, re.Pattern) or callable(v):
      return v
    if isinstance(v, str):
      try:
        return re.compile(v)
      except re.error as e:
        raise ValueError(f"Invalid match pattern {v!r}: {e}")
    raise ValueError(f"'match' must be a pattern or a callable, got {type(v).__name__}")

  @field_validator("identifier", "path")
  @classmethod
  def validate_template(cls, v: Optional[str]) -> Optional[str]:
    if v is None:
      return v
    try:
      v.format(key="key", member="member")
    except (KeyError, IndexError, ValueError) as e:
      raise ValueError(f"Invalid template {v!r}: only {{key}} and {{member}} are available ({e})")
    return v

  @model_validator(mode="after")
  def check_exclusive(self) -> "MatcherOptions":
    if self.write_identifier is not None and self.identifier is not None:
      raise ValueError("Specify either 'write_identifier' or 'identifier', not both.")
    if self.write_path is not None and self.path is not None:
      raise ValueError("Specify either 'write_path' or 'path', not both.")
    return self


@dataclass(frozen=True)
class Matcher:
  """
  Normalized, read-only matcher for one tracked package key.

  Attributes:
      key: The package key the matcher was configured under.
      match: Compiled pattern or predicate selecting import statements.
      write_identifier: Member name -> synthesized local identifier.
      write_path: Member name -> raw destination (see ``ImportTarget.coerce``).
  """

  key: str
  match: PathMatcher
  write_identifier: Callable[[str], str]
  write_path: Callable[[str], Any]

  def identifier_for(self, member: str) -> str:
    return self.write_identifier(member)

  def target_for(self, member: str) -> ImportTarget:
    return ImportTarget.coerce(self.write_path(member))


def default_identifier(key: str, member: str) -> str:
  """
  Default local identifier for a synthesized member binding.

  Args:
      key: The package key (dots are folded into underscores).
      member: The accessed member name.

  Returns:
      str: ``__<key>_<member>``.
  """
  return f"__{key.replace('.', '_')}_{member}"


def _build_matcher(key: str, options: MatcherOptions) -> Matcher:
  match = options.match
  if match is None:
    match = re.compile(f"^{re.escape(key)}$")

  if options.write_identifier is not None:
    write_identifier = options.write_identifier
  elif options.identifier is not None:
    write_identifier = lambda member, _t=options.identifier: _t.format(key=key, member=member)  # noqa: E731
  else:
    write_identifier = lambda member: default_identifier(key, member)  # noqa: E731

  if options.write_path is not None:
    write_path = options.write_path
  elif options.path is not None:
    write_path = lambda member, _t=options.path, _s=options.shape: ImportTarget(  # noqa: E731
      path=_t.format(key=key, member=member), shape=_s
    )
  else:
    write_path = lambda member, _s=options.shape: ImportTarget(path=f"{key}.{member}", shape=_s)  # noqa: E731

  return Matcher(key=key, match=match, write_identifier=write_identifier, write_path=write_path)


def _coerce_options(key: str, raw: Any) -> MatcherOptions:
  if isinstance(raw, MatcherOptions):
    return raw
  if raw is None:
    return MatcherOptions()
  if isinstance(raw, Mapping):
    try:
      return MatcherOptions(**raw)
    except ValidationError as e:
      raise MatcherConfigError(f"Invalid options for '{key}': {e}")
  raise MatcherConfigError(f"Options for '{key}' must be a mapping or MatcherOptions, got {type(raw).__name__}")


OptionsInput = Union[Mapping[str, Any], Iterable[Union[Matcher, Tuple[str, Any]]]]


def normalize_matchers(options: OptionsInput) -> Tuple[Matcher, ...]:
  """
  Normalizes caller options into an ordered tuple of matchers.

  Args:
      options: Either a mapping of key -> options (insertion order is kept) or
          an ordered sequence of ``(key, options)`` pairs and/or ``Matcher``
          objects. Options may be ``MatcherOptions``, a plain mapping, or None.

  Returns:
      Tuple[Matcher, ...]: Matchers in configuration order.

  Raises:
      MatcherConfigError: If any entry is invalid or a key is repeated.
  """
  items = list(options.items()) if isinstance(options, Mapping) else list(options)

  matchers: List[Matcher] = []
  seen = set()
  for item in items:
    if isinstance(item, Matcher):
      matcher = item
    else:
      key, raw = item
      if not isinstance(key, str) or not key:
        raise MatcherConfigError(f"Package key must be a non-empty string, got {key!r}")
      matcher = _build_matcher(key, _coerce_options(key, raw))

    if matcher.key in seen:
      raise MatcherConfigError(f"Duplicate package key: '{matcher.key}'")
    seen.add(matcher.key)
    matchers.append(matcher)

  return tuple(matchers)


class SplitterConfig(BaseModel):
  """
  Project-level configuration, typically read from ``pyproject.toml``.

  Example:

  .. code-block:: toml

      [tool.import_splitter.packages.lodash]
      identifier = "__{member}"
      path = "lodash.{member}"
      shape = "default"
  """

  model_config = ConfigDict(arbitrary_types_allowed=True)

  packages: Dict[str, MatcherOptions] = Field(default_factory=dict, description="Tracked package key -> options.")

  def matchers(self) -> Tuple[Matcher, ...]:
    return normalize_matchers(self.packages)

  @classmethod
  def load(
    cls,
    search_path: Optional[Path] = None,
    packages: Optional[List[str]] = None,
    shape: Optional[ImportShape] = None,
  ) -> "SplitterConfig":
    """
    Loads configuration from pyproject.toml and merges CLI package keys.

    Keys given on the command line that the TOML does not define are added
    with default options (and ``shape`` when provided). Keys defined in TOML
    keep their TOML options.

    Args:
        search_path (Optional[Path]): Directory to start searching for TOML config.
        packages (Optional[List[str]]): Extra package keys from the CLI.
        shape (Optional[ImportShape]): Shape for the CLI package keys.

    Returns:
        SplitterConfig: The resolved configuration.

    Raises:
        MatcherConfigError: If the TOML options are invalid.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)
    if toml_dir:
      logger.debug(f"Loaded configuration from {toml_dir / 'pyproject.toml'}")

    raw_packages: Dict[str, Any] = dict(toml_config.get("packages", {}))
    for key in packages or []:
      if key not in raw_packages:
        raw_packages[key] = {"shape": shape} if shape else {}

    try:
      return cls(packages=raw_packages)
    except ValidationError as e:
      raise MatcherConfigError(f"Invalid import_splitter configuration: {e}")


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except tomllib.TOMLDecodeError as e:
        logger.warning(f"Ignoring unreadable {toml_path}: {e}")
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("import_splitter", {}), parent

  return {}, None
