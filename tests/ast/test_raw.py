"""
Tests for converting parser output into grammar AST nodes.
"""

import pytest

from phras3.ast import (
    Call,
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
    load_grammar_file,
    node_from_raw,
    nodes_from_raw,
)


class TestNodeFromRaw:
    """Test node_from_raw() for each supported tag."""

    def test_literal(self, raw):
        """Test a literal keeps its text."""
        assert node_from_raw(raw.literal("hello")) == Literal(text="hello")

    def test_plain_identifier(self, raw):
        """Test a dotted identifier exposes its segments."""
        node = node_from_raw(raw.ident("names.first"))
        assert isinstance(node, Identifier)
        assert not node.is_variable
        assert node.name == "names.first"
        assert node.segments == ("names", "first")

    def test_variable_identifier(self, raw):
        """Test the $ sigil marks a variable and is stripped from its name."""
        node = node_from_raw(raw.ident("$surname"))
        assert node.is_variable
        assert node.name == "surname"
        assert node.segments == ("surname",)

    def test_scope_block(self, raw):
        """Test a scope block carries its name and converted children."""
        node = node_from_raw(raw.block("greeting", raw.literal("hi"), raw.literal("hey")))
        assert isinstance(node, ScopeBlock)
        assert node.name == "greeting"
        assert node.children == (Literal("hi"), Literal("hey"))

    def test_anonymous_list_block(self, raw):
        """Test a list block without a label has no name."""
        node = node_from_raw(raw.options(None, raw.literal("a")))
        assert isinstance(node, ListBlock)
        assert node.name is None
        assert node.children == (Literal("a"),)

    def test_interpolated_string_weight(self, raw):
        """Test an explicit weight is preserved and defaults to one."""
        weighted = node_from_raw(raw.string(raw.literal("x"), weight=4))
        plain = node_from_raw(raw.string(raw.literal("x")))
        assert isinstance(weighted, InterpolatedString)
        assert weighted.weight == 4
        assert plain.weight == 1

    def test_tag_with_quantifier(self, raw):
        """Test an optional tag keeps its quantifier."""
        node = node_from_raw(raw.tag(raw.literal("very "), quantifier="?"))
        assert isinstance(node, Tag)
        assert node.quantifier == "?"

    def test_binary_combinators(self, raw):
        """Test tag_choice and tag_concat convert both operands."""
        choice = node_from_raw(raw.tag_choice([raw.literal("a")], [raw.literal("b")]))
        concat = node_from_raw(raw.tag_concat([raw.literal("a")], [raw.literal("b")]))
        assert choice == TagChoice(left=(Literal("a"),), right=(Literal("b"),))
        assert concat == TagConcat(left=(Literal("a"),), right=(Literal("b"),))

    def test_lone_node_accepted_as_children(self):
        """Test a single node where a list is expected is wrapped."""
        node = node_from_raw(["tag", ["literal", "solo"]])
        assert node.children == (Literal("solo"),)

    def test_transform_and_call(self, raw):
        """Test transform and call nodes."""
        transform = node_from_raw(raw.transform(raw.ident("noun"), "text.plural"))
        call = node_from_raw(raw.call("text.shout", raw.literal("a")))
        assert isinstance(transform, Transform)
        assert transform.function == Identifier("text.plural")
        assert isinstance(call, Call)
        assert call.function_path == "text.shout"
        assert call.args == (Literal("a"),)

    def test_meta_directives(self, raw):
        """Test import and export directives."""
        imported = node_from_raw(raw.import_("helpers.py", "h"))
        exported = node_from_raw(raw.export("name", raw.ident("name")))
        assert imported == MetaImport(file="helpers.py", alias="h")
        assert exported == MetaExport(key=Literal("name"), value=Identifier("name"))

    def test_mapping(self, raw):
        """Test mapping nodes are kept as placeholders."""
        assert isinstance(node_from_raw(raw.mapping("k", "v")), Mapping)


class TestMalformedInput:
    """Test that bad shapes degrade instead of raising."""

    def test_unknown_tag(self):
        node = node_from_raw(["sparkle", "x"])
        assert isinstance(node, MalformedNode)
        assert node.raw_tag == "sparkle"
        assert "unknown node tag" in node.reason

    def test_not_a_tagged_list(self):
        node = node_from_raw(42)
        assert isinstance(node, MalformedNode)
        assert node.raw_tag == "?"

    def test_missing_literal_text(self):
        node = node_from_raw(["literal"])
        assert isinstance(node, MalformedNode)
        assert node.raw_tag == "literal"

    def test_non_positive_weight(self, raw):
        node = node_from_raw(raw.string(raw.literal("x"), weight=0))
        assert isinstance(node, MalformedNode)
        assert node.raw_tag == "interpolated_string"
        assert "weight" in node.reason

    def test_import_missing_alias(self):
        node = node_from_raw(["meta_statement", "import", [["literal", "helpers.py"]]])
        assert isinstance(node, MalformedNode)
        assert node.raw_tag == "meta_statement"

    def test_malformed_child_keeps_siblings(self, raw):
        """Test a bad child does not affect its siblings."""
        node = node_from_raw(raw.block("b", raw.literal("a"), ["literal", 7], raw.literal("c")))
        assert isinstance(node, ScopeBlock)
        assert node.children[0] == Literal("a")
        assert isinstance(node.children[1], MalformedNode)
        assert node.children[2] == Literal("c")


class TestLoadGrammarFile:
    """Test load_grammar_file()."""

    def test_reads_json_document(self, raw, write_grammar):
        path = write_grammar([raw.block("a", raw.literal("x"))])
        nodes = load_grammar_file(path)
        assert nodes == nodes_from_raw([raw.block("a", raw.literal("x"))])

    def test_rejects_non_list_document(self, tmp_path):
        path = tmp_path / "grammar.json"
        path.write_text('{"not": "a grammar"}', encoding="utf-8")
        with pytest.raises(ValueError) as exc_info:
            load_grammar_file(path)
        assert "list of grammar nodes" in str(exc_info.value)
