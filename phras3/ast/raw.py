"""Conversion of raw parser output into grammar AST nodes.

The grammar parser emits nested lists of the form ``[tag, identifier,
*args]``.  This module turns that structure (or the same structure read
from a JSON document) into the frozen dataclasses of
:mod:`phras3.ast.nodes`.  Conversion never raises on bad shapes: a node
that does not match its tag becomes a :class:`MalformedNode` so the
compiler can degrade it and keep going.
"""

from __future__ import annotations

import json
import logging
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Dict, List, Sequence, Tuple

from .nodes import (
    Call,
    GrammarNode,
    Identifier,
    InterpolatedString,
    ListBlock,
    Literal,
    MalformedNode,
    Mapping,
    MetaExport,
    MetaImport,
    ScopeBlock,
    Tag,
    TagChoice,
    TagConcat,
    Transform,
)

logger = logging.getLogger(__name__)


class _ShapeError(ValueError):
    """Internal signal that a raw node does not match its tag."""


def _expect_str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise _ShapeError(f"{what} must be a string, got {type(value).__name__}")
    return value


def _expect_list(value: Any, what: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise _ShapeError(f"{what} must be a list, got {type(value).__name__}")
    return list(value)


def _is_raw_node(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and bool(value) and isinstance(value[0], str)


def _arg(raw: Sequence[Any], index: int, what: str) -> Any:
    if len(raw) <= index:
        raise _ShapeError(f"missing {what}")
    return raw[index]


def _children(value: Any, what: str) -> Tuple[GrammarNode, ...]:
    # A lone node is accepted where a node list is expected.
    if _is_raw_node(value):
        return (node_from_raw(value),)
    return tuple(nodes_from_raw(_expect_list(value, what)))


def _name_of(value: Any, what: str) -> str:
    if isinstance(value, str):
        return value
    node = _expect_list(value, what)
    if len(node) < 2:
        raise _ShapeError(f"{what} is missing its name")
    return _expect_str(node[1], what)


def _meta_statement(raw: Sequence[Any]) -> GrammarNode:
    directive = _expect_str(_arg(raw, 1, "directive"), "directive")
    args = _expect_list(_arg(raw, 2, "directive arguments"), "directive arguments")
    if directive == "import":
        if len(args) < 2:
            raise _ShapeError("import needs a file and an alias")
        file = _expect_str(_expect_list(args[0], "import file")[1], "import file")
        alias = _expect_str(_expect_list(args[1], "import alias")[1], "import alias")
        return MetaImport(file=file, alias=alias)
    if directive == "export":
        if len(args) < 2:
            raise _ShapeError("export needs a key and a value")
        return MetaExport(key=node_from_raw(args[0]), value=node_from_raw(args[1]))
    raise _ShapeError(f"unknown directive {directive!r}")


def _scope_block(raw: Sequence[Any]) -> GrammarNode:
    name = _name_of(_arg(raw, 1, "block name"), "block name")
    return ScopeBlock(name=name, children=_children(raw[2] if len(raw) > 2 else [], "block children"))


def _list_block(raw: Sequence[Any]) -> GrammarNode:
    label = raw[1] if len(raw) > 1 else None
    name = _name_of(label, "list name") if label is not None else None
    return ListBlock(name=name, children=_children(raw[2] if len(raw) > 2 else [], "list children"))


def _identifier(raw: Sequence[Any]) -> GrammarNode:
    path = _expect_str(_arg(raw, 1, "identifier path"), "identifier path")
    if not path.lstrip("$"):
        raise _ShapeError("identifier path is empty")
    return Identifier(path=path)


def _interpolated_string(raw: Sequence[Any]) -> GrammarNode:
    children = _children(_arg(raw, 1, "string parts"), "string parts")
    weight = raw[2] if len(raw) > 2 and raw[2] is not None else 1
    if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
        raise _ShapeError(f"weight must be a positive integer, got {weight!r}")
    return InterpolatedString(children=children, weight=weight)


def _tag(raw: Sequence[Any]) -> GrammarNode:
    children = _children(_arg(raw, 1, "tag contents"), "tag contents")
    quantifier = raw[2] if len(raw) > 2 else None
    if quantifier is not None:
        quantifier = _expect_str(quantifier, "tag quantifier")
    return Tag(children=children, quantifier=quantifier)


def _binary(node_type: type) -> Callable[[Sequence[Any]], GrammarNode]:
    def convert(raw: Sequence[Any]) -> GrammarNode:
        left = _children(_arg(raw, 1, "left operand"), "left operand")
        right = _children(_arg(raw, 2, "right operand"), "right operand")
        return node_type(left=left, right=right)

    return convert


def _literal(raw: Sequence[Any]) -> GrammarNode:
    return Literal(text=_expect_str(_arg(raw, 1, "literal text"), "literal text"))


def _transform(raw: Sequence[Any]) -> GrammarNode:
    args = node_from_raw(_arg(raw, 1, "transform argument"))
    function = node_from_raw(_arg(raw, 2, "transform function"))
    return Transform(args=args, function=function)


def _call(raw: Sequence[Any]) -> GrammarNode:
    path = _name_of(_arg(raw, 1, "function path"), "function path")
    args = _children(raw[2] if len(raw) > 2 else [], "call arguments")
    return Call(function_path=path, args=args)


def _mapping(raw: Sequence[Any]) -> GrammarNode:
    return Mapping(entries=tuple(raw[1:]))


_CONVERTERS: Dict[str, Callable[[Sequence[Any]], GrammarNode]] = {
    "meta_statement": _meta_statement,
    "scope_block": _scope_block,
    "list_block": _list_block,
    "identifier": _identifier,
    "interpolated_string": _interpolated_string,
    "tag": _tag,
    "tag_choice": _binary(TagChoice),
    "tag_concat": _binary(TagConcat),
    "literal": _literal,
    "transform": _transform,
    "call": _call,
    "mapping": _mapping,
}


def node_from_raw(raw: Any) -> GrammarNode:
    """Convert one raw parser node, degrading bad shapes to :class:`MalformedNode`."""
    if not _is_raw_node(raw):
        return MalformedNode(raw_tag="?", reason="node is not a tagged list", raw=raw)
    tag = raw[0]
    converter = _CONVERTERS.get(tag)
    if converter is None:
        return MalformedNode(raw_tag=tag, reason=f"unknown node tag {tag!r}", raw=raw)
    try:
        return converter(raw)
    except (_ShapeError, IndexError, TypeError) as exc:
        logger.debug("Raw '%s' node has an unexpected shape: %s", tag, exc)
        return MalformedNode(raw_tag=tag, reason=str(exc), raw=raw)


def nodes_from_raw(data: Sequence[Any]) -> List[GrammarNode]:
    """Convert an ordered sequence of raw parser nodes."""
    return [node_from_raw(item) for item in data]


def load_grammar_file(path: str | PathLike[str]) -> List[GrammarNode]:
    """Read parser output stored as JSON and convert it to grammar nodes."""
    source = Path(path)
    data = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{source} does not contain a list of grammar nodes")
    return nodes_from_raw(data)


__all__ = ["node_from_raw", "nodes_from_raw", "load_grammar_file"]
