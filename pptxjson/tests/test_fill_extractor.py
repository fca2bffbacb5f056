"""Tests for DrawingML fill and color resolution."""

import pytest

from pptxjson.dsl.schema import ColorScheme, Theme
from pptxjson.parser.fill_extractor import NO_FILL, FillExtractor
from pptxjson.parser.xml_node import parse_xml


A_NS = 'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main"'


def fill(inner: str, tag: str = "a:solidFill"):
    return parse_xml(f"<{tag} {A_NS}>{inner}</{tag}>")


@pytest.fixture
def extractor() -> FillExtractor:
    return FillExtractor()


@pytest.fixture
def theme() -> Theme:
    return Theme(colors=ColorScheme(dk1="#112233", lt1="#FAFAFA", accent2="#00FF00"))


class TestSolidFill:
    """Tests for FillExtractor.get_solid_fill."""

    def test_srgb(self, extractor):
        assert extractor.get_solid_fill(fill('<a:srgbClr val="FF0000"/>')) == "rgba(255,0,0,1)"

    def test_scrgb_percent_channels(self, extractor):
        node = fill('<a:scrgbClr r="100000" g="50000" b="0"/>')
        assert extractor.get_solid_fill(node) == "rgba(255,128,0,1)"

    def test_hsl(self, extractor):
        node = fill('<a:hslClr hue="7200000" sat="100000" lum="50000"/>')
        assert extractor.get_solid_fill(node) == "rgba(0,255,0,1)"

    def test_preset(self, extractor):
        assert extractor.get_solid_fill(fill('<a:prstClr val="red"/>')) == "rgba(255,0,0,1)"

    def test_scheme_without_theme_uses_slot_default(self, extractor):
        assert extractor.get_solid_fill(fill('<a:schemeClr val="accent1"/>')) == "rgba(68,114,196,1)"

    def test_scheme_uses_theme(self, extractor, theme):
        assert extractor.get_solid_fill(fill('<a:schemeClr val="accent2"/>'), theme) == "rgba(0,255,0,1)"

    @pytest.mark.parametrize("alias, expected", [("tx1", "rgba(17,34,51,1)"), ("bg1", "rgba(250,250,250,1)")])
    def test_scheme_aliases(self, extractor, theme, alias, expected):
        assert extractor.get_solid_fill(fill(f'<a:schemeClr val="{alias}"/>'), theme) == expected

    def test_placeholder_color(self, extractor):
        node = fill('<a:schemeClr val="phClr"/>')

        assert extractor.get_solid_fill(node, placeholder_color="#0000FF") == "rgba(0,0,255,1)"
        assert extractor.get_solid_fill(node) == ""

    def test_system_color_last_value(self, extractor):
        node = fill('<a:sysClr val="windowText" lastClr="123456"/>')
        assert extractor.get_solid_fill(node) == "rgba(18,52,86,1)"

    def test_precedence_prefers_srgb(self, extractor):
        node = fill('<a:schemeClr val="accent1"/><a:srgbClr val="000000"/>')
        assert extractor.get_solid_fill(node) == "rgba(0,0,0,1)"

    def test_unresolvable_is_empty(self, extractor):
        assert extractor.get_solid_fill(fill("")) == ""
        assert extractor.get_solid_fill(fill('<a:srgbClr val="nothex"/>')) == ""
        assert extractor.get_solid_fill(None) == ""

    def test_alpha_modifier(self, extractor):
        node = fill('<a:srgbClr val="0000FF"><a:alpha val="50000"/></a:srgbClr>')
        assert extractor.get_solid_fill(node) == "rgba(0,0,255,0.5)"

    def test_modifiers_apply_in_document_order(self, extractor):
        tint_then_alpha = fill('<a:srgbClr val="000000"><a:tint val="40000"/><a:alpha val="25000"/></a:srgbClr>')
        assert extractor.get_solid_fill(tint_then_alpha) == "rgba(153,153,153,0.25)"

    def test_lum_mod_on_scheme_color(self, extractor):
        node = fill('<a:schemeClr val="bg1"><a:lumMod val="50000"/></a:schemeClr>')
        assert extractor.get_solid_fill(node) == "rgba(128,128,128,1)"


class TestFillColor:
    """Tests for FillExtractor.get_fill_color."""

    def test_no_fill_is_transparent(self, extractor):
        sp_pr = parse_xml(f"<p:spPr {A_NS} xmlns:p='urn:p'><a:noFill/></p:spPr>")
        assert extractor.get_fill_color(sp_pr) == NO_FILL

    def test_solid(self, extractor):
        sp_pr = parse_xml(f"<p:spPr {A_NS} xmlns:p='urn:p'><a:solidFill><a:srgbClr val='00FF00'/></a:solidFill></p:spPr>")
        assert extractor.get_fill_color(sp_pr) == "rgba(0,255,0,1)"

    def test_pattern_uses_foreground(self, extractor):
        sp_pr = parse_xml(
            f"<p:spPr {A_NS} xmlns:p='urn:p'><a:pattFill prst='pct5'>"
            "<a:fgClr><a:srgbClr val='0000FF'/></a:fgClr><a:bgClr><a:srgbClr val='FFFFFF'/></a:bgClr>"
            "</a:pattFill></p:spPr>"
        )
        assert extractor.get_fill_color(sp_pr) == "rgba(0,0,255,1)"

    def test_style_fill_ref(self, extractor):
        style = parse_xml(f"<p:style {A_NS} xmlns:p='urn:p'><a:fillRef idx='1'><a:schemeClr val='accent1'/></a:fillRef></p:style>")
        assert extractor.get_fill_color(None, None, style) == "rgba(68,114,196,1)"

    def test_style_fill_ref_zero_means_none(self, extractor):
        style = parse_xml(f"<p:style {A_NS} xmlns:p='urn:p'><a:fillRef idx='0'><a:schemeClr val='accent1'/></a:fillRef></p:style>")
        assert extractor.get_fill_color(None, None, style) == ""


class TestGradientFill:
    """Tests for FillExtractor.get_gradient_fill."""

    def test_stops_sorted_ascending(self, extractor):
        grad = fill(
            '<a:gsLst>'
            '<a:gs pos="100000"><a:srgbClr val="0000FF"/></a:gs>'
            '<a:gs pos="0"><a:srgbClr val="FF0000"/></a:gs>'
            '<a:gs pos="50000"><a:srgbClr val="00FF00"/></a:gs>'
            '</a:gsLst><a:lin ang="5400000" scaled="0"/>',
            tag="a:gradFill",
        )

        gradient = extractor.get_gradient_fill(grad)

        assert [stop.position for stop in gradient.stops] == [0, 0.5, 1]
        assert [stop.color for stop in gradient.stops] == [
            "rgba(255,0,0,1)",
            "rgba(0,255,0,1)",
            "rgba(0,0,255,1)",
        ]
        assert gradient.type == "linear"
        assert gradient.angle == 90.0

    def test_radial_when_path_present(self, extractor):
        grad = fill(
            '<a:gsLst><a:gs pos="0"><a:srgbClr val="FFFFFF"/></a:gs></a:gsLst><a:path path="circle"/>',
            tag="a:gradFill",
        )
        assert extractor.get_gradient_fill(grad).type == "radial"

    def test_positions_are_clamped(self, extractor):
        grad = fill('<a:gsLst><a:gs pos="150000"><a:srgbClr val="FFFFFF"/></a:gs></a:gsLst>', tag="a:gradFill")
        assert extractor.get_gradient_fill(grad).stops[0].position == 1.0

    def test_empty_gradient_is_none(self, extractor):
        assert extractor.get_gradient_fill(fill("<a:gsLst/>", tag="a:gradFill")) is None
        assert extractor.get_gradient_fill(None) is None
