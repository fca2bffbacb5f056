"""Tests for the namespace-agnostic XML node model."""

import pytest

from pptxjson.errors import XmlSyntaxError
from pptxjson.parser.xml_node import (
    XmlNode,
    find_child,
    find_children,
    find_node,
    find_nodes,
    find_path,
    get_attribute,
    get_text_content,
    parse_xml,
)
from pptxjson.tests.helpers import NS


SHAPE = f"""<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<p:sp {NS}>
    <p:nvSpPr><p:cNvPr id="4" name="Title 1"/></p:nvSpPr>
    <p:spPr>
        <a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>
    </p:spPr>
    <p:blipFill><a:blip r:embed="rId7"/></p:blipFill>
</p:sp>"""


class TestParseXml:
    """Tests for parse_xml."""

    def test_keeps_prefixes_on_names(self):
        root = parse_xml(SHAPE)

        assert root.name == "p:sp"
        assert root.local_name == "sp"
        assert find_node(root, "srgbClr").name == "a:srgbClr"

    def test_keeps_prefixes_on_attributes(self):
        blip = find_node(parse_xml(SHAPE), "blip")

        assert blip.attributes == {"r:embed": "rId7"}

    def test_namespace_declarations_are_not_attributes(self):
        root = parse_xml(SHAPE)

        assert root.attributes == {}

    def test_accepts_bytes_with_declaration(self):
        root = parse_xml(SHAPE.encode("utf-8"))

        assert root.local_name == "sp"

    def test_accepts_bom_prefixed_text(self):
        root = parse_xml("\ufeff" + SHAPE)

        assert root.local_name == "sp"

    def test_self_closing_cdata_and_entities(self):
        root = parse_xml("<root><empty/><data><![CDATA[a < b]]></data><t>Tom &amp; Jerry</t></root>")

        assert find_node(root, "empty").children == ()
        assert find_node(root, "data").text == "a < b"
        assert find_node(root, "t").text == "Tom & Jerry"

    def test_mixed_content_keeps_tails(self):
        root = parse_xml("<p>Hello <b>bold</b> world</p>")

        assert root.text == "Hello "
        assert root.children[0].tail == " world"

    def test_comments_dropped_but_text_kept(self):
        root = parse_xml("<a>x<b>y</b>z<!-- note -->w</a>")

        assert [child.local_name for child in root.children] == ["b"]
        assert get_text_content(root) == "xyzw"

    @pytest.mark.parametrize("source", ["", "   ", b""])
    def test_empty_input_raises(self, source):
        with pytest.raises(XmlSyntaxError):
            parse_xml(source)

    def test_malformed_input_reports_position(self):
        with pytest.raises(XmlSyntaxError) as exc_info:
            parse_xml("<root>\n  <open>\n</root>")

        error = exc_info.value
        assert error.line is not None
        assert error.column is not None
        assert f"line {error.line}, column {error.column}" in str(error)

    def test_deep_nesting_does_not_recurse(self):
        depth = 1500
        root = parse_xml("<n>" * depth + "leaf" + "</n>" * depth)

        node = root
        levels = 1
        while node.children:
            node = node.children[0]
            levels += 1
        assert levels == depth
        assert get_text_content(root) == "leaf"

    def test_nodes_are_immutable(self):
        root = parse_xml("<a/>")

        with pytest.raises(AttributeError):
            root.name = "b"


class TestQueries:
    """Tests for the lookup primitives."""

    @pytest.fixture
    def root(self) -> XmlNode:
        return parse_xml(SHAPE)

    def test_find_node_matches_local_name_regardless_of_prefix(self, root):
        assert get_attribute(find_node(root, "cNvPr"), "name") == "Title 1"

    def test_find_node_includes_root(self, root):
        assert find_node(root, "sp") is root

    def test_find_node_missing_returns_none(self, root):
        assert find_node(root, "graphicFrame") is None
        assert find_node(None, "sp") is None

    def test_find_nodes_in_document_order(self):
        root = parse_xml("<a><x i='1'><x i='2'/></x><y><x i='3'/></y></a>")

        assert [get_attribute(n, "i") for n in find_nodes(root, "x")] == ["1", "2", "3"]

    def test_find_child_only_looks_one_level_down(self, root):
        assert find_child(root, "spPr") is not None
        assert find_child(root, "solidFill") is None
        assert len(find_children(root, "nvSpPr")) == 1

    def test_find_path(self, root):
        assert find_path(root, "spPr", "solidFill", "srgbClr").attributes["val"] == "FF0000"
        assert find_path(root, "spPr", "ln") is None

    @pytest.mark.parametrize("name", ["r:embed", "embed"])
    def test_get_attribute_prefix_insensitive(self, root, name):
        assert get_attribute(find_node(root, "blip"), name) == "rId7"

    def test_get_attribute_default(self, root):
        assert get_attribute(root, "missing", "fallback") == "fallback"
        assert get_attribute(None, "x") is None

    def test_get_text_content_concatenates_descendants(self):
        root = parse_xml("<a:p xmlns:a='urn:a'><a:r><a:t>Hel</a:t></a:r><a:r><a:t>lo</a:t></a:r></a:p>")

        assert get_text_content(root) == "Hello"
