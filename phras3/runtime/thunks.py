"""Lazy thunk primitives.

A thunk is a deferred, repeatable computation producing a string.  Thunks
are built once per definition when a program is assembled and forced any
number of times afterwards; only a choice's candidate pool is memoized,
never a result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .context import GenerationContext
from .transforms import apply_rules, normalize_rules


class Thunk:
    """Base class for all thunks."""

    def force(self, ctx: GenerationContext) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def children(self) -> Tuple["Thunk", ...]:
        return ()

    def walk(self) -> Iterator["Thunk"]:
        """Yield this thunk and its descendants, depth first."""
        stack: List[Thunk] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children()))


@dataclass(eq=True)
class Literal(Thunk):
    text: str

    def force(self, ctx: GenerationContext) -> str:
        return self.text


EMPTY = Literal("")


@dataclass(eq=True)
class Weighted(Thunk):
    """Marks ``inner`` as occupying ``weight`` slots of a choice pool."""

    inner: Thunk
    weight: int = 1

    def force(self, ctx: GenerationContext) -> str:
        return self.inner.force(ctx)

    def children(self) -> Tuple[Thunk, ...]:
        return (self.inner,)


@dataclass(eq=True)
class Choice(Thunk):
    branches: Tuple[Thunk, ...]
    _pool: Optional[List[Thunk]] = field(default=None, init=False, compare=False, repr=False)

    def candidates(self) -> List[Thunk]:
        """Flattened candidate pool, computed on first use."""
        if self._pool is None:
            pool: List[Thunk] = []
            for branch in self.branches:
                if isinstance(branch, Weighted):
                    pool.extend([branch.inner] * branch.weight)
                else:
                    pool.append(branch)
            self._pool = pool
        return self._pool

    def force(self, ctx: GenerationContext) -> str:
        pool = self.candidates()
        if not pool:
            return ""
        return ctx.rng.choice(pool).force(ctx)

    def children(self) -> Tuple[Thunk, ...]:
        return self.branches


@dataclass(eq=True)
class Concat(Thunk):
    parts: Tuple[Thunk, ...]

    def force(self, ctx: GenerationContext) -> str:
        return "".join(part.force(ctx) for part in self.parts)

    def children(self) -> Tuple[Thunk, ...]:
        return self.parts


@dataclass(eq=True)
class Ref(Thunk):
    """Reference to a named definition.

    Linking replaces refs with the target thunk itself; an unlinked ref
    resolves through the context.
    """

    name: str

    def force(self, ctx: GenerationContext) -> str:
        return ctx.definitions[self.name].force(ctx)


@dataclass(eq=True)
class Recursive(Thunk):
    """Self reference that expands again with ``probability`` and is empty otherwise."""

    name: str
    probability: float = 0.5

    def force(self, ctx: GenerationContext) -> str:
        if ctx.rng.random() < self.probability:
            return ctx.definitions[self.name].force(ctx)
        return ""


@dataclass(eq=True)
class VarRef(Thunk):
    name: str
    fallback: Thunk

    def force(self, ctx: GenerationContext) -> str:
        value = ctx.override(self.name)
        if value is not None:
            return value
        return self.fallback.force(ctx)

    def children(self) -> Tuple[Thunk, ...]:
        return (self.fallback,)


@dataclass(eq=True)
class Call(Thunk):
    """Invokes the imported function ``function`` with forced arguments."""

    function: str
    args: Tuple[Thunk, ...] = ()

    def force(self, ctx: GenerationContext) -> str:
        values = [arg.force(ctx) for arg in self.args]
        return str(ctx.imports[self.function](*values))

    def children(self) -> Tuple[Thunk, ...]:
        return self.args


@dataclass(eq=True)
class Transform(Thunk):
    """Runs the forced ``source`` through the imported rule-set ``function``."""

    source: Thunk
    function: str

    def force(self, ctx: GenerationContext) -> str:
        rules = normalize_rules(ctx.imports[self.function])
        return apply_rules(self.source.force(ctx), rules)

    def children(self) -> Tuple[Thunk, ...]:
        return (self.source,)


def choice(branches) -> Choice:
    return Choice(tuple(branches))


def concat(parts) -> Concat:
    return Concat(tuple(parts))


__all__ = [
    "Thunk",
    "Literal",
    "EMPTY",
    "Weighted",
    "Choice",
    "Concat",
    "Ref",
    "Recursive",
    "VarRef",
    "Call",
    "Transform",
    "choice",
    "concat",
]
