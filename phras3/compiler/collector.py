"""Metadata collection over a reduced tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

from phras3.errors import DuplicateDefinitionError
from phras3.runtime.thunks import Thunk

from .reducer import ReducedNode

logger = logging.getLogger(__name__)


@dataclass
class CollectedMetadata:
    """Tables gathered from one reduced tree.

    Attributes:
        definitions: Generated identifier to the reduced node defining it
        exports: ``(key, reference)`` pairs in source order
        imports: ``(file, alias)`` pairs in source order
        variable_names: Names referenced through ``$`` identifiers
    """

    definitions: Dict[str, ReducedNode] = field(default_factory=dict)
    exports: List[Tuple[str, Thunk]] = field(default_factory=list)
    imports: List[Tuple[str, str]] = field(default_factory=list)
    variable_names: Set[str] = field(default_factory=set)


class MetadataCollector:
    """Walks reduced nodes and fills a :class:`CollectedMetadata`.

    With ``strict`` set, registering a different value under an already
    defined identifier raises :class:`DuplicateDefinitionError`; otherwise
    the later definition wins and a warning is logged.
    """

    def __init__(self, *, strict: bool = True) -> None:
        self.strict = strict
        self.metadata = CollectedMetadata()

    def collect(self, nodes: Sequence[ReducedNode]) -> CollectedMetadata:
        for node in nodes:
            self._visit(node)
        return self.metadata

    def _visit(self, node: ReducedNode) -> None:
        if node.is_meta:
            self._visit_meta(node)
            return
        for child in node.children:
            self._visit(child)
        if node.variable:
            self.metadata.variable_names.add(node.variable)
        if node.is_definition:
            self._register(node)

    def _visit_meta(self, node: ReducedNode) -> None:
        if node.import_file is not None:
            self.metadata.imports.append((node.import_file, node.import_alias))
        elif node.export_key is not None:
            # Only the exported value itself is walked, so inline blocks register.
            value = node.children[0]
            self._visit(value)
            self.metadata.exports.append((node.export_key, value.reference))

    def _register(self, node: ReducedNode) -> None:
        existing = self.metadata.definitions.get(node.name)
        if existing is not None and existing.value != node.value:
            if self.strict:
                raise DuplicateDefinitionError(
                    f"'{node.name}' is defined twice with different contents",
                    node_tag=node.kind,
                    hint="Rename one of the blocks; names derive from their enclosing scopes",
                )
            logger.warning("Definition '%s' redefined; keeping the later one", node.name)
        self.metadata.definitions[node.name] = node


def collect_metadata(nodes: Sequence[ReducedNode], *, strict: bool = True) -> CollectedMetadata:
    return MetadataCollector(strict=strict).collect(nodes)


__all__ = ["CollectedMetadata", "MetadataCollector", "collect_metadata"]
