"""Tree reduction: grammar AST to reduced nodes carrying thunk expressions.

The reducer walks the AST once, threading the scope path of enclosing
named blocks.  Every grammar node yields exactly one :class:`ReducedNode`;
named blocks additionally own a generated identifier and become
definitions of the compiled program.

A node whose shape does not match its tag does not abort the compile: the
failure is logged with the node's tag and scope, and a neutral reduced
node (same tag, no value) takes its place so siblings still reduce.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from phras3.ast.nodes import (
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
from phras3.errors import MalformedNodeError
from phras3.runtime import thunks

from .naming import ScopePath, extend, generated_identifier

logger = logging.getLogger(__name__)

DEFAULT_RECURSION_PROBABILITY = 0.5

OPTIONAL_QUANTIFIER = "?"


@dataclass
class ReducedNode:
    """Intermediate node produced for every grammar node.

    Attributes:
        kind: Tag of the grammar node this was reduced from
        name: Generated identifier, set only for named blocks
        value: Thunk expression, ``None`` when the node contributes nothing
        children: Reduced children, in source order
        is_meta: Import/export directives; never part of a value
        variable: Variable name for ``$``-identifiers
        import_file: Module path of an import directive
        import_alias: Alias of an import directive
        export_key: Key of an export directive
        degraded: Set when the node replaced a malformed grammar node
    """

    kind: str
    name: Optional[str] = None
    value: Optional[thunks.Thunk] = None
    children: List["ReducedNode"] = field(default_factory=list)
    is_meta: bool = False
    variable: Optional[str] = None
    import_file: Optional[str] = None
    import_alias: Optional[str] = None
    export_key: Optional[str] = None
    degraded: bool = False

    @property
    def is_definition(self) -> bool:
        return not self.is_meta and self.name is not None and self.value is not None

    @property
    def reference(self) -> Optional[thunks.Thunk]:
        """Expression a parent uses to embed this node."""
        if self.is_definition:
            return thunks.Ref(self.name)
        return self.value


def _value_refs(children: Sequence[ReducedNode]) -> List[thunks.Thunk]:
    return [
        child.reference
        for child in children
        if not child.is_meta and child.reference is not None
    ]


def _compose_choice(children: Sequence[ReducedNode]) -> thunks.Thunk:
    refs = _value_refs(children)
    if not refs:
        return thunks.Literal("")
    if len(refs) == 1:
        # A weight only counts inside the pool it was written in.
        if isinstance(refs[0], thunks.Weighted):
            return refs[0].inner
        return refs[0]
    return thunks.choice(refs)


class TreeReducer:
    """Reduces grammar nodes under a scope path.

    Args:
        recursion_probability: Chance that a self reference expands again;
            must be below one so recursion terminates
    """

    def __init__(self, *, recursion_probability: float = DEFAULT_RECURSION_PROBABILITY) -> None:
        if not 0.0 <= recursion_probability < 1.0:
            raise ValueError(
                f"recursion_probability must be in [0, 1), got {recursion_probability!r}"
            )
        self.recursion_probability = recursion_probability
        self._handlers: Dict[type, Callable[[GrammarNode, ScopePath], ReducedNode]] = {
            MetaImport: self._reduce_import,
            MetaExport: self._reduce_export,
            ScopeBlock: self._reduce_scope_block,
            ListBlock: self._reduce_list_block,
            Identifier: self._reduce_identifier,
            InterpolatedString: self._reduce_interpolated_string,
            Tag: self._reduce_tag,
            TagChoice: self._reduce_tag_choice,
            TagConcat: self._reduce_tag_concat,
            Literal: self._reduce_literal,
            Transform: self._reduce_transform,
            Call: self._reduce_call,
            Mapping: self._reduce_mapping,
            MalformedNode: self._reduce_malformed,
        }

    def reduce(self, nodes: Sequence[GrammarNode], context: ScopePath = ()) -> List[ReducedNode]:
        context = tuple(context)
        return [self.reduce_node(node, context) for node in nodes]

    def reduce_node(self, node: GrammarNode, context: ScopePath) -> ReducedNode:
        tag = node.raw_tag if isinstance(node, MalformedNode) else getattr(node, "tag", type(node).__name__)
        handler = self._handlers.get(type(node))
        try:
            if handler is None:
                raise MalformedNodeError(
                    f"Unsupported grammar node {type(node).__name__}",
                    node_tag=tag,
                    scope=context,
                )
            return handler(node, context)
        except MalformedNodeError as exc:
            return self._degrade(tag, context, exc.message)
        except (TypeError, AttributeError, ValueError, IndexError, KeyError) as exc:
            # Hand-built dataclass nodes reach the handlers without shape checks.
            return self._degrade(tag, context, f"{type(exc).__name__}: {exc}")

    def _degrade(self, tag: str, context: ScopePath, reason: str) -> ReducedNode:
        logger.warning(
            "Error in '%s' handler at %s: %s",
            tag,
            ".".join(map(str, context)) or "<root>",
            reason,
        )
        return ReducedNode(kind=tag, degraded=True)

    # Meta directives

    def _reduce_import(self, node: MetaImport, context: ScopePath) -> ReducedNode:
        if not node.file or not node.alias:
            raise MalformedNodeError("import needs a file and an alias", node_tag=node.tag, scope=context)
        return ReducedNode(
            kind=node.tag,
            is_meta=True,
            import_file=node.file,
            import_alias=node.alias,
        )

    def _reduce_export(self, node: MetaExport, context: ScopePath) -> ReducedNode:
        if isinstance(node.key, Literal):
            key = node.key.text
        elif isinstance(node.key, Identifier):
            key = node.key.name
        else:
            raise MalformedNodeError(
                f"export key must be a literal or identifier, got {type(node.key).__name__}",
                node_tag=node.tag,
                scope=context,
            )
        if not key:
            raise MalformedNodeError("export key is empty", node_tag=node.tag, scope=context)
        # Exports live at the top level regardless of where they are written.
        value = self.reduce_node(node.value, ())
        if value.reference is None:
            raise MalformedNodeError(
                f"export '{key}' has no value", node_tag=node.tag, scope=context
            )
        return ReducedNode(kind=node.tag, is_meta=True, export_key=key, children=[value])

    # Blocks

    def _reduce_scope_block(self, node: ScopeBlock, context: ScopePath) -> ReducedNode:
        if not node.name:
            raise MalformedNodeError("scope block has no name", node_tag=node.tag, scope=context)
        full_context = extend(context, node.name)
        children = self.reduce(node.children, full_context)
        return ReducedNode(
            kind=node.tag,
            name=generated_identifier(full_context),
            value=_compose_choice(children),
            children=children,
        )

    def _reduce_list_block(self, node: ListBlock, context: ScopePath) -> ReducedNode:
        if node.name:
            full_context = extend(context, node.name)
            name: Optional[str] = generated_identifier(full_context)
        else:
            # Anonymous lists are inlined into the enclosing expression.
            full_context = context
            name = None
        children = self.reduce(node.children, full_context)
        return ReducedNode(
            kind=node.tag,
            name=name,
            value=_compose_choice(children),
            children=children,
        )

    # Values

    def _reduce_identifier(self, node: Identifier, context: ScopePath) -> ReducedNode:
        if not node.name or not all(node.segments):
            raise MalformedNodeError(f"invalid identifier {node.path!r}", node_tag=node.tag, scope=context)
        target = generated_identifier(node.segments)
        enclosing = generated_identifier(context) if context else None
        if target == enclosing:
            ref: thunks.Thunk = thunks.Recursive(target, self.recursion_probability)
        else:
            ref = thunks.Ref(target)
        if node.is_variable:
            return ReducedNode(kind=node.tag, value=thunks.VarRef(node.name, ref), variable=node.name)
        return ReducedNode(kind=node.tag, value=ref)

    def _reduce_interpolated_string(self, node: InterpolatedString, context: ScopePath) -> ReducedNode:
        weight = node.weight
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 1:
            raise MalformedNodeError(f"invalid weight {weight!r}", node_tag=node.tag, scope=context)
        children = self.reduce(node.children, context)
        value: thunks.Thunk = thunks.concat(_value_refs(children))
        if weight > 1:
            value = thunks.Weighted(value, weight)
        return ReducedNode(kind=node.tag, value=value, children=children)

    def _reduce_tag(self, node: Tag, context: ScopePath) -> ReducedNode:
        if node.quantifier not in (None, "", OPTIONAL_QUANTIFIER):
            raise MalformedNodeError(
                f"unsupported quantifier {node.quantifier!r}", node_tag=node.tag, scope=context
            )
        children = self.reduce(node.children, context)
        refs = _value_refs(children)
        if len(refs) == 1:
            value = refs[0]
        else:
            value = thunks.concat(refs)
        if node.quantifier == OPTIONAL_QUANTIFIER:
            value = thunks.choice([value, thunks.Literal("")])
        return ReducedNode(kind=node.tag, value=value, children=children)

    def _reduce_tag_choice(self, node: TagChoice, context: ScopePath) -> ReducedNode:
        children = self.reduce(node.left, context) + self.reduce(node.right, context)
        return ReducedNode(kind=node.tag, value=thunks.choice(_value_refs(children)), children=children)

    def _reduce_tag_concat(self, node: TagConcat, context: ScopePath) -> ReducedNode:
        children = self.reduce(node.left, context) + self.reduce(node.right, context)
        return ReducedNode(kind=node.tag, value=thunks.concat(_value_refs(children)), children=children)

    def _reduce_literal(self, node: Literal, context: ScopePath) -> ReducedNode:
        if not isinstance(node.text, str):
            raise MalformedNodeError("literal text must be a string", node_tag=node.tag, scope=context)
        return ReducedNode(kind=node.tag, value=thunks.Literal(node.text))

    def _reduce_transform(self, node: Transform, context: ScopePath) -> ReducedNode:
        args = self.reduce([node.args], context)
        function = self.reduce([node.function], context)
        target = node.function
        if not isinstance(target, Identifier) or target.is_variable:
            raise MalformedNodeError(
                "transform function must name an imported function", node_tag=node.tag, scope=context
            )
        source = args[0].reference
        if source is None:
            raise MalformedNodeError("transform argument has no value", node_tag=node.tag, scope=context)
        return ReducedNode(
            kind=node.tag,
            value=thunks.Transform(source, generated_identifier(target.segments)),
            children=args + function,
        )

    def _reduce_call(self, node: Call, context: ScopePath) -> ReducedNode:
        segments = node.function_path.split(".") if node.function_path else []
        if not segments or not all(segments):
            raise MalformedNodeError(
                f"invalid function path {node.function_path!r}", node_tag=node.tag, scope=context
            )
        children = self.reduce(node.args, context)
        value = thunks.Call(generated_identifier(segments), tuple(_value_refs(children)))
        return ReducedNode(kind=node.tag, value=value, children=children)

    def _reduce_mapping(self, node: Mapping, context: ScopePath) -> ReducedNode:
        return ReducedNode(kind=node.tag)

    def _reduce_malformed(self, node: MalformedNode, context: ScopePath) -> ReducedNode:
        raise MalformedNodeError(
            f"Malformed '{node.raw_tag}' node: {node.reason}",
            node_tag=node.raw_tag,
            scope=context,
        )


def reduce_tree(
    nodes: Sequence[GrammarNode],
    context: ScopePath = (),
    *,
    recursion_probability: float = DEFAULT_RECURSION_PROBABILITY,
) -> List[ReducedNode]:
    """Reduce ``nodes`` under ``context`` with a fresh :class:`TreeReducer`."""
    return TreeReducer(recursion_probability=recursion_probability).reduce(nodes, context)


__all__ = [
    "DEFAULT_RECURSION_PROBABILITY",
    "ReducedNode",
    "TreeReducer",
    "reduce_tree",
]
