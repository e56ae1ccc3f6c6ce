"""Topological ordering of named definitions."""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, List, Sequence, Set, Tuple, TypeVar

from phras3.errors import CyclicDependencyError

T = TypeVar("T", bound=Hashable)


class DependencyGraph:
    """Directed graph where an edge ``(a, b)`` means *a depends on b*."""

    def __init__(self, edges: Iterable[Tuple[T, T]] = (), nodes: Iterable[T] = ()) -> None:
        self._afters: Dict[T, List[T]] = {}
        for node in nodes:
            self.add_node(node)
        for dependent, dependency in edges:
            self.add_edge(dependent, dependency)

    def add_node(self, node: T) -> None:
        self._afters.setdefault(node, [])

    def add_edge(self, dependent: T, dependency: T) -> None:
        self.add_node(dependent)
        self.add_node(dependency)
        if dependency not in self._afters[dependent]:
            self._afters[dependent].append(dependency)

    def dependencies(self, node: T) -> Sequence[T]:
        return tuple(self._afters.get(node, ()))

    def sort(self) -> List[T]:
        """Return every node with its dependencies before it.

        Raises:
            CyclicDependencyError: If any closed chain exists
        """
        visited: Set[T] = set()
        result: List[T] = []
        for node in self._afters:
            self._visit(node, visited, [], result)
        return result

    def _visit(self, node: T, visited: Set[T], ancestors: List[T], result: List[T]) -> None:
        """DFS visit with cycle detection."""
        if node in visited:
            return
        ancestors.append(node)
        for dependency in self._afters[node]:
            if dependency in ancestors:
                raise CyclicDependencyError(
                    f"closed chain : {dependency} is in {node}",
                    hint=" -> ".join(str(item) for item in ancestors + [dependency]),
                )
            self._visit(dependency, visited, ancestors, result)
        ancestors.pop()
        visited.add(node)
        result.append(node)


def topological_sort(edges: Iterable[Tuple[T, T]], nodes: Iterable[T] = ()) -> List[T]:
    """Order ``nodes`` and every edge endpoint so dependencies come first.

    >>> topological_sort([("sentence", "noun"), ("noun", "letter")])
    ['letter', 'noun', 'sentence']
    """
    return DependencyGraph(edges, nodes).sort()


__all__ = ["DependencyGraph", "topological_sort"]
