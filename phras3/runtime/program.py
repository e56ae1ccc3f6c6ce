"""Compiled program and its entry points."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Iterable, List, Mapping, Optional

from phras3.errors import InvalidEntryPointError, InvalidVariableError

from .context import GenerationContext
from .thunks import Thunk

logger = logging.getLogger(__name__)


class EntryPoint:
    """Callable generating a fresh result for one exported grammar entry."""

    def __init__(self, program: "CompiledProgram", key: str, root: Thunk) -> None:
        self.program = program
        self.key = key
        self.root = root

    def __call__(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> str:
        ctx = self.program.context(overrides, rng=rng)
        return str(self.root.force(ctx))

    def __repr__(self) -> str:
        return f"EntryPoint({self.key!r})"


class CompiledProgram:
    """Durable result of a compilation, reused across generation calls.

    Attributes:
        definitions: Generated identifier to linked thunk, dependencies first
        exports: Export key to :class:`EntryPoint`
        imports: Qualified identifier to imported callable or rule-set
        variable_names: Overridable variable names, sorted
        layout: Unlinked compilation output, kept for textual backends
    """

    def __init__(
        self,
        *,
        definitions: Mapping[str, Thunk],
        exports: Mapping[str, Thunk],
        imports: Optional[Mapping[str, Any]] = None,
        variable_names: Iterable[str] = (),
        seed: Optional[int] = None,
        layout: Any = None,
    ) -> None:
        self.definitions: Dict[str, Thunk] = dict(definitions)
        self.imports: Dict[str, Any] = dict(imports or {})
        self.variable_names: List[str] = sorted(set(variable_names))
        self.layout = layout
        self._rng = random.Random(seed)
        self.exports: Dict[str, EntryPoint] = {
            key: EntryPoint(self, key, root) for key, root in exports.items()
        }

    @property
    def variables(self) -> Dict[str, Optional[str]]:
        """Declared variables, all unset until a caller passes overrides."""
        return {name: None for name in self.variable_names}

    def context(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> GenerationContext:
        return GenerationContext(
            overrides=dict(overrides or {}),
            rng=rng or self._rng,
            definitions=self.definitions,
            imports=self.imports,
        )

    def validate_overrides(self, overrides: Mapping[str, str]) -> None:
        known = set(self.variable_names)
        for name in overrides:
            if name not in known:
                raise InvalidVariableError(
                    f"Invalid variable: {name}",
                    hint=f"Known variables: {', '.join(self.variable_names) or '(none)'}",
                )

    def entry_point(self, name: str) -> EntryPoint:
        try:
            return self.exports[name]
        except KeyError:
            raise InvalidEntryPointError(
                f"Invalid generator: {name}",
                hint=f"Exported generators: {', '.join(sorted(self.exports)) or '(none)'}",
            ) from None

    def generate(
        self,
        name: str,
        overrides: Optional[Mapping[str, str]] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> str:
        return self.entry_point(name)(overrides, rng=rng)

    def __repr__(self) -> str:
        return (
            f"CompiledProgram(exports={sorted(self.exports)!r}, "
            f"definitions={len(self.definitions)}, variables={self.variable_names!r})"
        )


__all__ = ["EntryPoint", "CompiledProgram"]
