"""Grammar AST consumed by the phras3 compiler.

The parser for the concrete grammar syntax lives outside this package;
it hands over an ordered sequence of tagged nodes which
:mod:`phras3.ast.raw` turns into the dataclasses defined in
:mod:`phras3.ast.nodes`.
"""

from .nodes import (
    VARIABLE_SIGIL,
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
from .raw import load_grammar_file, node_from_raw, nodes_from_raw

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
    "node_from_raw",
    "nodes_from_raw",
    "load_grammar_file",
]
