"""Render a compiled grammar as a standalone Python module."""

from __future__ import annotations

import logging
import textwrap
from os import PathLike
from pathlib import Path
from typing import List, Optional

from phras3.compiler.builder import ProgramLayout
from phras3.runtime.program import CompiledProgram
from phras3.runtime.thunks import (
    Call,
    Choice,
    Concat,
    Literal,
    Recursive,
    Ref,
    Thunk,
    Transform,
    VarRef,
    Weighted,
)

logger = logging.getLogger(__name__)

_HEADER = '''
"""Generated by phras3{origin}. Do not edit by hand."""

from phras3.compiler.imports import resolve_imports
from phras3.runtime import CompiledProgram
from phras3.runtime import thunks as _t
'''

_FOOTER = '''
program = CompiledProgram(
    definitions=DEFINITIONS,
    exports=EXPORTS,
    imports=IMPORTS,
    variable_names=VARIABLE_NAMES,
    seed=SEED,
)
exports = program.exports
variable_names = program.variable_names
generate = program.generate
'''


def render_thunk(thunk: Thunk) -> str:
    """Python expression rebuilding ``thunk``; refs render as the target's name."""
    if isinstance(thunk, Literal):
        return f"_t.Literal({thunk.text!r})"
    if isinstance(thunk, Ref):
        return thunk.name
    if isinstance(thunk, Recursive):
        return f"_t.Recursive({thunk.name!r}, {thunk.probability!r})"
    if isinstance(thunk, Choice):
        return f"_t.choice([{', '.join(render_thunk(branch) for branch in thunk.branches)}])"
    if isinstance(thunk, Concat):
        return f"_t.concat([{', '.join(render_thunk(part) for part in thunk.parts)}])"
    if isinstance(thunk, Weighted):
        return f"_t.Weighted({render_thunk(thunk.inner)}, {thunk.weight!r})"
    if isinstance(thunk, VarRef):
        return f"_t.VarRef({thunk.name!r}, {render_thunk(thunk.fallback)})"
    if isinstance(thunk, Call):
        args = "".join(f"{render_thunk(arg)}, " for arg in thunk.args)
        return f"_t.Call({thunk.function!r}, ({args}))"
    if isinstance(thunk, Transform):
        return f"_t.Transform({render_thunk(thunk.source)}, {thunk.function!r})"
    raise TypeError(f"Cannot render thunk of type {type(thunk).__name__}")


def _render_imports(layout: ProgramLayout) -> List[str]:
    if not layout.imports:
        return ["IMPORTS = {}"]
    pairs = ", ".join(f"({file!r}, {alias!r})" for file, alias in layout.imports)
    return [
        "IMPORTS = resolve_imports(",
        f"    [{pairs}],",
        f"    base_path={layout.base_path!r},",
        f"    search_paths={list(layout.search_paths)!r},",
        ")",
    ]


def generate_module_source(program: CompiledProgram, *, origin: Optional[str] = None) -> str:
    """Return Python source that rebuilds ``program`` when imported.

    Definitions are assigned in dependency order so each one can embed
    the objects it refers to directly.

    Raises:
        ValueError: If ``program`` was not produced by the compiler
    """
    layout = program.layout
    if not isinstance(layout, ProgramLayout):
        raise ValueError("program carries no compilation layout; compile it with phras3.compiler")

    header = _HEADER.format(origin=f" from {origin}" if origin else "")
    lines: List[str] = [textwrap.dedent(header).strip(), "", ""]
    lines.extend(_render_imports(layout))
    lines.append(f"SEED = {layout.seed!r}")
    lines.append(f"VARIABLE_NAMES = {list(layout.variable_names)!r}")
    lines.append("")

    for name in layout.order:
        lines.append(f"{name} = {render_thunk(layout.definitions[name])}")
    lines.append("")

    lines.append("DEFINITIONS = {")
    lines.extend(f"    {name!r}: {name}," for name in layout.order)
    lines.append("}")
    lines.append("EXPORTS = {")
    lines.extend(f"    {key!r}: {render_thunk(value)}," for key, value in layout.exports.items())
    lines.append("}")

    body = "\n".join(lines)
    return f"{body}\n{textwrap.dedent(_FOOTER)}"


def write_module(
    program: CompiledProgram,
    path: str | PathLike[str],
    *,
    origin: Optional[str] = None,
) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(generate_module_source(program, origin=origin), encoding="utf-8")
    logger.info("Wrote generated module %s", target)
    return target


__all__ = ["render_thunk", "generate_module_source", "write_module"]
