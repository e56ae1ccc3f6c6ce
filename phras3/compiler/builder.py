"""Program assembly: collected metadata to a linked :class:`CompiledProgram`.

Definitions are checked for unresolved references, ordered so that every
definition follows the definitions it embeds, and then linked bottom-up:
each ``Ref`` placeholder is replaced by the already-built target thunk.
Self references were wrapped in ``Recursive`` by the reducer and stay
name-based, so they never form an edge here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from phras3.errors import UnresolvedReferenceError
from phras3.runtime.program import CompiledProgram
from phras3.runtime.thunks import (
    Call,
    Choice,
    Concat,
    Literal,
    Ref,
    Thunk,
    Transform,
    VarRef,
    Weighted,
)

from .collector import CollectedMetadata
from .ordering import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass
class ProgramLayout:
    """Unlinked compilation output, in dependency order.

    Textual backends render from this; the runtime uses the linked form.
    """

    order: List[str] = field(default_factory=list)
    definitions: Dict[str, Thunk] = field(default_factory=dict)
    exports: Dict[str, Thunk] = field(default_factory=dict)
    imports: List[Tuple[str, str]] = field(default_factory=list)
    variable_names: List[str] = field(default_factory=list)
    base_path: Optional[str] = None
    search_paths: List[str] = field(default_factory=list)
    seed: Optional[int] = None


def rebuild(thunk: Thunk, fn: Callable[[Thunk], Thunk]) -> Thunk:
    """Copy ``thunk`` with ``fn`` applied to each direct child."""
    if isinstance(thunk, Choice):
        return Choice(tuple(fn(branch) for branch in thunk.branches))
    if isinstance(thunk, Concat):
        return Concat(tuple(fn(part) for part in thunk.parts))
    if isinstance(thunk, Weighted):
        return Weighted(fn(thunk.inner), thunk.weight)
    if isinstance(thunk, VarRef):
        return VarRef(thunk.name, fn(thunk.fallback))
    if isinstance(thunk, Call):
        return Call(thunk.function, tuple(fn(arg) for arg in thunk.args))
    if isinstance(thunk, Transform):
        return Transform(fn(thunk.source), thunk.function)
    return thunk


def _relax_variable_fallbacks(thunk: Thunk, definitions: Mapping[str, Thunk]) -> Thunk:
    def visit(node: Thunk) -> Thunk:
        if (
            isinstance(node, VarRef)
            and isinstance(node.fallback, Ref)
            and node.fallback.name not in definitions
        ):
            logger.warning(
                "Variable '%s' has no default block; it generates nothing unless overridden",
                node.name,
            )
            return VarRef(node.name, Literal(""))
        return rebuild(node, visit)

    return visit(thunk)


def _check_references(
    owner: str,
    thunk: Thunk,
    definitions: Mapping[str, Thunk],
    imports: Mapping[str, Any],
) -> None:
    for node in thunk.walk():
        if isinstance(node, Ref) and node.name not in definitions:
            raise UnresolvedReferenceError(
                f"'{owner}' refers to undefined block '{node.name}'",
            )
        if isinstance(node, (Call, Transform)) and node.function not in imports:
            raise UnresolvedReferenceError(
                f"'{owner}' uses unknown imported function '{node.function}'",
                hint="Check the import alias and that the module exposes the function",
            )
        if isinstance(node, Call) and not callable(imports[node.function]):
            raise UnresolvedReferenceError(
                f"'{owner}' calls '{node.function}', which is a rule list, not a function",
                hint="Apply rule lists with a transform instead of a call",
            )


def dependency_graph(definitions: Mapping[str, Thunk]) -> DependencyGraph:
    graph = DependencyGraph(nodes=definitions)
    for name, thunk in definitions.items():
        for node in thunk.walk():
            if isinstance(node, Ref):
                graph.add_edge(name, node.name)
    return graph


def link(layout: ProgramLayout) -> Tuple[Dict[str, Thunk], Dict[str, Thunk]]:
    """Materialise definitions bottom-up, replacing refs with their targets."""
    linked: Dict[str, Thunk] = {}

    def resolve(node: Thunk) -> Thunk:
        if isinstance(node, Ref):
            return linked[node.name]
        return rebuild(node, resolve)

    for name in layout.order:
        linked[name] = resolve(layout.definitions[name])
    exports = {key: resolve(value) for key, value in layout.exports.items()}
    return linked, exports


def build_layout(
    metadata: CollectedMetadata,
    imports: Mapping[str, Any],
    *,
    base_path: Optional[str] = None,
    search_paths: Optional[List[str]] = None,
    seed: Optional[int] = None,
) -> ProgramLayout:
    """Validate and order collected definitions.

    Raises:
        UnresolvedReferenceError: If a reference names nothing
        CyclicDependencyError: If distinct definitions embed each other
    """
    names = set(metadata.definitions)
    definitions: Dict[str, Thunk] = {
        name: _relax_variable_fallbacks(node.value, names)
        for name, node in metadata.definitions.items()
    }
    exports: Dict[str, Thunk] = {}
    for key, reference in metadata.exports:
        if key in exports:
            logger.warning("Export '%s' declared more than once; keeping the later one", key)
        exports[key] = _relax_variable_fallbacks(reference, names)

    for name, thunk in definitions.items():
        _check_references(name, thunk, definitions, imports)
    for key, thunk in exports.items():
        _check_references(f"export {key}", thunk, definitions, imports)

    order = dependency_graph(definitions).sort()
    logger.debug("Definition order: %s", ", ".join(order))
    return ProgramLayout(
        order=order,
        definitions={name: definitions[name] for name in order},
        exports=exports,
        imports=list(metadata.imports),
        variable_names=sorted(metadata.variable_names),
        base_path=base_path,
        search_paths=list(search_paths or []),
        seed=seed,
    )


def build_program(layout: ProgramLayout, imports: Mapping[str, Any]) -> CompiledProgram:
    definitions, exports = link(layout)
    program = CompiledProgram(
        definitions=definitions,
        exports=exports,
        imports=imports,
        variable_names=layout.variable_names,
        seed=layout.seed,
        layout=layout,
    )
    logger.info(
        "Compiled %d definition(s), %d export(s), %d variable(s)",
        len(definitions),
        len(exports),
        len(layout.variable_names),
    )
    return program


__all__ = [
    "ProgramLayout",
    "rebuild",
    "dependency_graph",
    "link",
    "build_layout",
    "build_program",
]
