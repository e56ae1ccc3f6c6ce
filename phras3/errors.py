"""Unified error model for phras3."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple


@dataclass
class ErrorContext:
    node_tag: Optional[str] = None
    scope: Tuple[str, ...] = field(default_factory=tuple)

    def describe(self) -> str:
        parts = []
        if self.node_tag:
            parts.append(f"node '{self.node_tag}'")
        if self.scope:
            parts.append(f"in scope {'.'.join(self.scope)}")
        return " ".join(parts) if parts else "unknown context"


class P3Error(Exception):
    """Base class for all compiler/runtime errors surfaced to users."""

    code: Optional[str] = None
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        node_tag: Optional[str] = None,
        scope: Optional[Sequence[str]] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = ErrorContext(node_tag=node_tag, scope=tuple(scope or ()))
        self.node_tag = node_tag
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        components = [self.message]
        meta_parts = []
        context_desc = self.context.describe()
        if context_desc != "unknown context":
            meta_parts.append(context_desc)
        if self.code:
            meta_parts.append(self.code)
        if meta_parts:
            components[-1] = f"{components[-1]} ({'; '.join(meta_parts)})"
        if self.hint:
            components.append(f"Hint: {self.hint}")
        return " ".join(part for part in components if part)


class MalformedNodeError(P3Error):
    """Raised when a grammar node's shape does not match its tag."""

    code = "P3_MALFORMED_NODE"


class UnresolvedImportError(P3Error):
    """Raised when an imported module cannot be loaded."""

    code = "P3_UNRESOLVED_IMPORT"


class InvalidTransformError(P3Error):
    """Raised when an imported rule-set contains an unusable rule."""

    code = "P3_INVALID_TRANSFORM"


class UnresolvedReferenceError(P3Error):
    """Raised when a reference names no definition or imported function."""

    code = "P3_UNRESOLVED_REFERENCE"


class DuplicateDefinitionError(P3Error):
    """Raised when one generated identifier receives two different values."""

    code = "P3_DUPLICATE_DEFINITION"


class CyclicDependencyError(P3Error):
    """Raised when definitions depend on each other in a closed chain."""

    code = "P3_CYCLIC_DEPENDENCY"


class InvalidVariableError(P3Error):
    """Raised when an override names a variable the grammar does not declare."""

    code = "P3_INVALID_VARIABLE"


class InvalidEntryPointError(P3Error):
    """Raised when a caller asks for an entry point the grammar does not export."""

    code = "P3_INVALID_ENTRY_POINT"


class ConfigError(P3Error):
    """Raised when workspace configuration is invalid."""

    code = "P3_CONFIG_ERROR"


__all__ = [
    "ErrorContext",
    "P3Error",
    "MalformedNodeError",
    "UnresolvedImportError",
    "InvalidTransformError",
    "UnresolvedReferenceError",
    "DuplicateDefinitionError",
    "CyclicDependencyError",
    "InvalidVariableError",
    "InvalidEntryPointError",
    "ConfigError",
]
