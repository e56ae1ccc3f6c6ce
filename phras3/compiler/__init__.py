"""
Grammar compiler for phras3.

The pipeline runs strictly forward:

* ``reducer`` walks the grammar AST once and produces reduced nodes that
  carry thunk expressions and generated identifiers.
* ``collector`` gathers definitions, exports, imports and variable names.
* ``imports`` loads imported function modules.
* ``builder`` validates references, orders definitions with the
  ``ordering`` utility and links them into a :class:`CompiledProgram`.

Usage:
------
    from phras3.compiler import compile_file

    program = compile_file("names.json")
    print(program.generate("name"))
    print(program.exports["name"]({"surname": "Smith"}))
"""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path
from typing import Any, Optional, Sequence

from phras3.ast.nodes import GrammarNode
from phras3.ast.raw import load_grammar_file, nodes_from_raw
from phras3.config import CompilerSettings
from phras3.runtime.program import CompiledProgram

from .builder import ProgramLayout, build_layout, build_program
from .collector import CollectedMetadata, MetadataCollector, collect_metadata
from .imports import resolve_imports
from .naming import generated_identifier
from .ordering import DependencyGraph, topological_sort
from .reducer import ReducedNode, TreeReducer, reduce_tree

logger = logging.getLogger(__name__)


def _as_nodes(nodes: Sequence[Any]) -> Sequence[GrammarNode]:
    if all(isinstance(node, GrammarNode) for node in nodes):
        return nodes
    return nodes_from_raw(nodes)


def compile_grammar(
    nodes: Sequence[Any],
    *,
    settings: Optional[CompilerSettings] = None,
    base_path: Optional[str | PathLike[str]] = None,
) -> CompiledProgram:
    """Compile grammar nodes (or raw parser output) into a runnable program.

    Args:
        nodes: Grammar AST nodes, or the parser's nested-list output
        settings: Compiler options; defaults apply when omitted
        base_path: Directory that relative import paths resolve against

    Raises:
        UnresolvedImportError: If an imported module cannot be loaded
        UnresolvedReferenceError: If a reference names nothing
        DuplicateDefinitionError: If one identifier gets two different values
        CyclicDependencyError: If distinct blocks embed each other
    """
    settings = settings or CompilerSettings()
    grammar = _as_nodes(list(nodes))
    reduced = TreeReducer(recursion_probability=settings.recursion_probability).reduce(grammar)
    metadata = collect_metadata(reduced, strict=settings.strict_definitions)
    base = str(Path(base_path).resolve()) if base_path is not None else None
    imports = resolve_imports(metadata.imports, base_path=base, search_paths=settings.import_paths)
    layout = build_layout(
        metadata,
        imports,
        base_path=base,
        search_paths=settings.import_paths,
        seed=settings.seed,
    )
    return build_program(layout, imports)


def compile_file(
    path: str | PathLike[str],
    *,
    settings: Optional[CompilerSettings] = None,
) -> CompiledProgram:
    """Compile parser output stored as JSON; imports resolve next to the file."""
    source = Path(path)
    logger.debug("Compiling %s", source)
    return compile_grammar(load_grammar_file(source), settings=settings, base_path=source.parent)


__all__ = [
    "compile_grammar",
    "compile_file",
    "TreeReducer",
    "ReducedNode",
    "reduce_tree",
    "MetadataCollector",
    "CollectedMetadata",
    "collect_metadata",
    "resolve_imports",
    "DependencyGraph",
    "topological_sort",
    "ProgramLayout",
    "build_layout",
    "build_program",
    "generated_identifier",
]
