"""Per-generation evaluation context."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional

if TYPE_CHECKING:
    from .thunks import Thunk


@dataclass(frozen=True)
class GenerationContext:
    """Everything a thunk may consult while it is being forced.

    One context is built per entry-point invocation and threaded through
    every ``force`` call, so independent generation passes never share
    an override table.

    Attributes:
        overrides: Variable name to caller-supplied value
        rng: Random source used by choices and recursive references
        definitions: Linked definitions, used to resolve recursive references
        imports: Qualified identifier to imported callable or rule-set
    """

    overrides: Mapping[str, str] = field(default_factory=dict)
    rng: random.Random = field(default_factory=random.Random)
    definitions: Mapping[str, "Thunk"] = field(default_factory=dict)
    imports: Mapping[str, Any] = field(default_factory=dict)

    def override(self, name: str) -> Optional[str]:
        value = self.overrides.get(name)
        if value is None or value == "":
            return None
        return str(value)


__all__ = ["GenerationContext"]
