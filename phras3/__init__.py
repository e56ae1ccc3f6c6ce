"""
phras3: a compiler for generative phrase grammars.

A grammar describes random text: named blocks hold alternatives,
interpolated strings splice references and literals together, and
variables let callers pin parts of the output.  The parser (outside this
package) hands over a tagged AST; phras3 compiles it into a graph of lazy
thunks that produce a fresh random string each time an exported entry
point is called.

The code is organised into several modules:

* ``ast`` – dataclasses for the grammar AST and the converter from the
  parser's nested-list output.
* ``compiler`` – tree reduction, metadata collection, import resolution,
  dependency ordering and program assembly.
* ``runtime`` – the thunk primitives, the per-generation context and the
  :class:`CompiledProgram` that callers keep around.
* ``codegen`` – renders a compiled grammar as a standalone Python module.
* ``cli`` – the ``phras3`` command line interface.
"""

import re
from pathlib import Path
from importlib import metadata as _metadata


def _local_version() -> str | None:
  root = Path(__file__).resolve().parents[1]
  pyproject = root / "pyproject.toml"
  if not pyproject.exists():
    return None
  try:
    text = pyproject.read_text(encoding="utf-8")
  except OSError:  # pragma: no cover - IO errors should not break imports
    return None
  match = re.search(r"^version\s*=\s*\"([^\"]+)\"", text, flags=re.MULTILINE)
  if match:
    return match.group(1)
  return None


try:  # pragma: no cover - metadata fallback for editable installs
    __version__ = _metadata.version("phras3")
except _metadata.PackageNotFoundError:  # pragma: no cover - source tree
  __version__ = _local_version() or "0.1.0"
else:  # pragma: no cover - version override for in-repo runs
  __version__ = _local_version() or __version__

from phras3.compiler import compile_file, compile_grammar  # noqa: E402
from phras3.config import CompilerSettings  # noqa: E402
from phras3.runtime import CompiledProgram, EntryPoint  # noqa: E402

__all__ = [
    "__version__",
    "compile_grammar",
    "compile_file",
    "CompilerSettings",
    "CompiledProgram",
    "EntryPoint",
]
