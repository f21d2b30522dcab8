"""
import-splitter Package.

A LibCST based rewriter turning whole-package imports into per-member imports:

.. code-block:: python

    import lodash as _
    total = _.add(a, _.subtract(5, 10))

becomes

.. code-block:: python

    from lodash.add import add as __lodash_add
    from lodash.subtract import subtract as __lodash_subtract
    total = __lodash_add(a, __lodash_subtract(5, 10))

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import import_splitter as isp
    print(isp.split_imports(code, {"lodash": {}}))

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from import_splitter import SplitEngine, MatcherOptions, ImportShape

    engine = SplitEngine({"lodash": MatcherOptions(identifier="__{member}", shape=ImportShape.DEFAULT)})
    res = engine.run(code)
    if res.success:
        print(res.code)
"""

from import_splitter.config import (
  ImportTarget,
  Matcher,
  MatcherConfigError,
  MatcherOptions,
  OptionsInput,
  SplitterConfig,
  normalize_matchers,
)
from import_splitter.core.conversion_result import ConversionResult
from import_splitter.core.engine import SplitEngine
from import_splitter.enums import ImportShape

__version__ = "0.1.0"


def split_imports(code: str, options: OptionsInput) -> str:
  """
  Rewrites whole-package imports of a source string into per-member imports.

  Args:
      code (str): Python source code.
      options: Matcher options, keyed by tracked package (see `MatcherOptions`).
          Order matters: the first matcher accepting an import wins.

  Returns:
      str: The rewritten source code.

  Raises:
      ValueError: If the source cannot be parsed.
      MatcherConfigError: If the options are invalid.
  """
  result = SplitEngine(options).run(code)
  if not result.success:
    raise ValueError("Import splitting failed:\n" + "\n".join(result.errors))
  return result.code


__all__ = [
  "ConversionResult",
  "ImportShape",
  "ImportTarget",
  "Matcher",
  "MatcherConfigError",
  "MatcherOptions",
  "SplitEngine",
  "SplitterConfig",
  "normalize_matchers",
  "split_imports",
  "__version__",
]
