"""Grammar AST node definitions consumed by the phras3 compiler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Tuple


VARIABLE_SIGIL = "$"


@dataclass(frozen=True)
class GrammarNode:
    """Base class for all grammar nodes produced by the parser."""

    tag: ClassVar[str] = "node"


@dataclass(frozen=True)
class MetaImport(GrammarNode):
    """``import file as alias`` directive."""

    tag: ClassVar[str] = "meta_import"

    file: str
    alias: str


@dataclass(frozen=True)
class MetaExport(GrammarNode):
    """``export key value`` directive exposing an entry point."""

    tag: ClassVar[str] = "meta_export"

    key: GrammarNode
    value: GrammarNode


@dataclass(frozen=True)
class ScopeBlock(GrammarNode):
    tag: ClassVar[str] = "scope_block"

    name: str
    children: Tuple[GrammarNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ListBlock(GrammarNode):
    tag: ClassVar[str] = "list_block"

    name: Optional[str] = None
    children: Tuple[GrammarNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Identifier(GrammarNode):
    """Reference to a named block; ``$a.b`` marks an overridable variable."""

    tag: ClassVar[str] = "identifier"

    path: str

    @property
    def is_variable(self) -> bool:
        return self.path.startswith(VARIABLE_SIGIL)

    @property
    def name(self) -> str:
        return self.path[len(VARIABLE_SIGIL):] if self.is_variable else self.path

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.name.split("."))


@dataclass(frozen=True)
class InterpolatedString(GrammarNode):
    tag: ClassVar[str] = "interpolated_string"

    children: Tuple[GrammarNode, ...] = field(default_factory=tuple)
    weight: int = 1


@dataclass(frozen=True)
class Tag(GrammarNode):
    tag: ClassVar[str] = "tag"

    children: Tuple[GrammarNode, ...] = field(default_factory=tuple)
    quantifier: Optional[str] = None


@dataclass(frozen=True)
class TagChoice(GrammarNode):
    tag: ClassVar[str] = "tag_choice"

    left: Tuple[GrammarNode, ...] = field(default_factory=tuple)
    right: Tuple[GrammarNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TagConcat(GrammarNode):
    tag: ClassVar[str] = "tag_concat"

    left: Tuple[GrammarNode, ...] = field(default_factory=tuple)
    right: Tuple[GrammarNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Literal(GrammarNode):
    tag: ClassVar[str] = "literal"

    text: str


@dataclass(frozen=True)
class Transform(GrammarNode):
    """Applies an imported function or rule-set to ``args``."""

    tag: ClassVar[str] = "transform"

    args: GrammarNode
    function: GrammarNode


@dataclass(frozen=True)
class Call(GrammarNode):
    tag: ClassVar[str] = "call"

    function_path: str
    args: Tuple[GrammarNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Mapping(GrammarNode):
    """Structural placeholder; never contributes a generated value."""

    tag: ClassVar[str] = "mapping"

    entries: Tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MalformedNode(GrammarNode):
    """Parser output whose shape did not match its declared tag."""

    tag: ClassVar[str] = "malformed"

    raw_tag: str
    reason: str
    raw: Any = None


__all__ = [
    "VARIABLE_SIGIL",
    "GrammarNode",
    "MetaImport",
    "MetaExport",
    "ScopeBlock",
    "ListBlock",
    "Identifier",
    "InterpolatedString",
    "Tag",
    "TagChoice",
    "TagConcat",
    "Literal",
    "Transform",
    "Call",
    "Mapping",
    "MalformedNode",
]
