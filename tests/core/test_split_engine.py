"""
End-to-end tests for the SplitEngine.

Covers the lodash scenarios (key 'lodash', identifiers '__<member>', paths
'lodash.<member>') and the engine-level properties:
- non-matching imports and already split code are left unchanged,
- a member is either a usage or a named specifier, never both,
- parse errors are reported, matcher errors propagate.
"""

import pytest

import import_splitter as isp
from import_splitter import ImportShape, ImportTarget, MatcherConfigError, SplitEngine
from import_splitter.core.collector import UsageCollector


def test_namespace_import_named_shape(named_engine, rewrite):
  code = rewrite(
    named_engine,
    """
    import lodash as _

    def total(a: int) -> int:
      return _.add(a, _.subtract(5, 10))
    """,
  )
  assert code == (
    "\n"
    "from lodash.add import add as __add\n"
    "from lodash.subtract import subtract as __subtract\n"
    "\n"
    "def total(a: int) -> int:\n"
    "  return __add(a, __subtract(5, 10))\n"
  )


def test_namespace_import_default_shape(default_engine, rewrite):
  code = rewrite(
    default_engine,
    """
    import lodash as _

    def total(a: int) -> int:
      return _.add(a, _.subtract(5, 10))
    """,
  )
  assert code == (
    "\n"
    "from lodash import add as __add\n"
    "from lodash import subtract as __subtract\n"
    "\n"
    "def total(a: int) -> int:\n"
    "  return __add(a, __subtract(5, 10))\n"
  )


def test_named_imports_split_per_member(default_engine, rewrite):
  code = rewrite(
    default_engine,
    """
    from lodash import add, subtract

    def total(a: int) -> int:
      return add(a, subtract(5, 10))
    """,
  )
  assert code == (
    "\n"
    "from lodash import add\n"
    "from lodash import subtract\n"
    "\n"
    "def total(a: int) -> int:\n"
    "  return add(a, subtract(5, 10))\n"
  )


def test_package_alias_combined_with_named_import(named_engine, rewrite):
  code = rewrite(
    named_engine,
    """
    import lodash as _
    from lodash import add

    def total(a: int) -> int:
      return _.add(add(a, _.subtract(5, 10)), 5)
    """,
  )
  assert code == (
    "\n"
    "from lodash.subtract import subtract as __subtract\n"
    "from lodash.add import add\n"
    "\n"
    "def total(a: int) -> int:\n"
    "  return add(add(a, __subtract(5, 10)), 5)\n"
  )


@pytest.mark.parametrize(
  "engine_fixture, expected_imports",
  [
    (
      "default_engine",
      "from lodash import add as _add\nfrom lodash import subtract as _subtract\n",
    ),
    (
      "named_engine",
      "from lodash.add import add as _add\nfrom lodash.subtract import subtract as _subtract\n",
    ),
  ],
)
def test_aliased_named_imports_keep_local_names(engine_fixture, expected_imports, request, rewrite):
  engine = request.getfixturevalue(engine_fixture)
  code = rewrite(
    engine,
    """
    from lodash import add as _add, subtract as _subtract

    def total(a: int) -> int:
      return _add(a, _subtract(5, 10))
    """,
  )
  assert code == "\n" + expected_imports + "\ndef total(a: int) -> int:\n  return _add(a, _subtract(5, 10))\n"


def test_non_matching_imports_unchanged(named_engine):
  source = "import os\nimport numpy as np\nfrom typing import List\n\nx = np.array(os.listdir('.'))\n"
  result = named_engine.run(source)
  assert result.code == source
  assert not result.changed
  assert result.rewritten_paths == []


def test_already_split_code_round_trips(named_engine):
  source = "from lodash.add import add\nfrom lodash.subtract import subtract\n\ny = add(1, subtract(2, 3))\n"
  result = named_engine.run(source)
  assert result.code == source
  assert not result.changed


def test_usage_and_specifier_partition(named_engine):
  tree = named_engine.parse("import lodash as _\nfrom lodash import add, map as m\n_.add(_.map(_.zip(xs)), _.zip(ys))\n")
  collector = UsageCollector(named_engine.matchers)
  collector.collect(tree)
  record = collector.table.get("lodash")

  specified = {s.member for s in record.named_specifiers}
  assert record.usages == ["zip"]
  assert specified == {"add", "map"}
  assert not specified & set(record.usages)


def test_default_options():
  code = isp.split_imports("import lodash\nlodash.chunk(xs, 2)\n", {"lodash": {}})
  assert code == "from lodash.chunk import chunk as __lodash_chunk\n__lodash_chunk(xs, 2)\n"


def test_template_options():
  options = {"lodash": isp.MatcherOptions(identifier="_{member}", path="lodash.fp.{member}", shape="namespace")}
  code = isp.split_imports("import lodash as _\n_.map(f, xs)\n", options)
  assert code == "import lodash.fp.map as _map\n_map(f, xs)\n"


def test_write_path_mapping_with_star_flag():
  options = {"lodash": {"write_path": lambda prop: {"path": f"lodash.{prop}", "isStar": True}}}
  code = isp.split_imports("import lodash as _\n_.add(1)\n", options)
  assert code == "import lodash.add as __lodash_add\n__lodash_add(1)\n"


def test_write_path_conflicting_flags_raise():
  options = {"lodash": {"write_path": lambda prop: {"path": prop, "is_named": True, "is_star": True}}}
  with pytest.raises(MatcherConfigError):
    SplitEngine(options).run("import lodash as _\n_.add(1)\n")


def test_write_identifier_error_propagates():
  def broken(prop):
    raise KeyError(prop)

  engine = SplitEngine({"lodash": {"write_identifier": broken}})
  with pytest.raises(KeyError):
    engine.run("import lodash as _\n_.add(1)\n")


def test_configuration_order_breaks_ties():
  engine = SplitEngine(
    [
      ("lo", {"match": r"^lo", "identifier": "lo_{member}"}),
      ("lodash", {"identifier": "dash_{member}"}),
    ]
  )
  result = engine.run("import lodash as _\n_.add(1)\n")
  assert result.code == "from lo.add import add as lo_add\nlo_add(1)\n"


def test_parse_error_reported(named_engine):
  result = named_engine.run("import lodash as\n", filename="broken.py")
  assert not result.success
  assert result.errors and result.errors[0].startswith("broken.py")
  assert not result.changed


def test_split_imports_raises_on_parse_error():
  with pytest.raises(ValueError, match="Import splitting failed"):
    isp.split_imports("def (:\n", {"lodash": {}})


def test_engine_reuse_is_independent(named_engine):
  first = named_engine.run("import lodash as _\n_.add(1)\n")
  second = named_engine.run("import lodash as _\n_.map(f)\n")

  assert first.rewritten_paths == ["lodash"]
  assert "add" not in second.code
  assert second.code == "from lodash.map import map as __map\n__map(f)\n"


def test_target_coercion_from_string():
  engine = SplitEngine({"lodash": {"write_path": lambda prop: f"lodash_es.{prop}"}})
  assert engine.run("import lodash as _\n_.add(1)\n").code == "from lodash_es.add import add as __lodash_add\n__lodash_add(1)\n"


def test_import_target_default_when_flags_false():
  assert ImportTarget.coerce({"path": "lodash.add", "isNamed": False}).shape == ImportShape.DEFAULT
