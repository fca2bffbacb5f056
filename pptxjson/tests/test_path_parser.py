"""Tests for preset and custom geometry paths.

Custom geometry is read from ``<a:custGeom><a:pathLst>`` and scaled into the
200x200 viewBox.
"""

import pytest

from pptxjson.parser.path_parser import (
    RECT_PATH,
    PathParser,
    extract_adjustments,
    is_supported_preset,
    preset_path,
)
from pptxjson.parser.xml_node import parse_xml
from pptxjson.tests.helpers import NS


def cust_geom(*paths: str):
    return parse_xml(f"<a:custGeom {NS}><a:pathLst>{''.join(paths)}</a:pathLst></a:custGeom>")


class TestPathParser:
    """Tests for PathParser class."""

    @pytest.fixture
    def parser(self) -> PathParser:
        """Create a PathParser instance."""
        return PathParser()

    def test_lines_and_cubic_bezier(self, parser):
        geom = cust_geom(
            '<a:path w="1000000" h="500000">'
            '<a:moveTo><a:pt x="0" y="0"/></a:moveTo>'
            '<a:lnTo><a:pt x="1000000" y="0"/></a:lnTo>'
            "<a:cubicBezTo>"
            '<a:pt x="1100000" y="100000"/><a:pt x="1100000" y="400000"/><a:pt x="1000000" y="500000"/>'
            "</a:cubicBezTo>"
            "<a:close/>"
            "</a:path>"
        )

        assert parser.extract_svg_path(geom) == "M 0 0 L 200 0 C 220 40 220 160 200 200 Z"

    def test_quadratic_bezier(self, parser):
        geom = cust_geom(
            '<a:path w="100" h="100"><a:moveTo><a:pt x="0" y="100"/></a:moveTo>'
            '<a:quadBezTo><a:pt x="50" y="0"/><a:pt x="100" y="100"/></a:quadBezTo></a:path>'
        )

        assert parser.extract_svg_path(geom) == "M 0 200 Q 100 0 200 200"

    def test_arc_continues_from_current_point(self, parser):
        geom = cust_geom(
            '<a:path w="200" h="200"><a:moveTo><a:pt x="200" y="100"/></a:moveTo>'
            '<a:arcTo wR="100" hR="100" stAng="0" swAng="5400000"/></a:path>'
        )

        assert parser.extract_svg_path(geom) == "M 200 100 A 100 100 0 0 1 100 200"

    def test_degenerate_arc_is_dropped(self, parser):
        geom = cust_geom(
            '<a:path w="200" h="200"><a:moveTo><a:pt x="0" y="0"/></a:moveTo>'
            '<a:arcTo wR="0" hR="100" stAng="0" swAng="5400000"/></a:path>'
        )

        assert parser.extract_svg_path(geom) == "M 0 0"

    def test_path_without_size_uses_shape_extent(self, parser):
        geom = cust_geom('<a:path><a:moveTo><a:pt x="0" y="0"/></a:moveTo><a:lnTo><a:pt x="400" y="100"/></a:lnTo></a:path>')

        assert parser.extract_svg_path(geom, 400, 200) == "M 0 0 L 200 100"

    def test_multiple_paths_are_joined(self, parser):
        segment = '<a:path w="100" h="100"><a:moveTo><a:pt x="50" y="50"/></a:moveTo><a:close/></a:path>'

        assert parser.extract_svg_path(cust_geom(segment, segment)) == "M 100 100 Z M 100 100 Z"

    @pytest.mark.parametrize("xml", [f"<a:custGeom {NS}/>", f"<a:custGeom {NS}><a:pathLst/></a:custGeom>"])
    def test_empty_geometry(self, parser, xml):
        assert parser.extract_svg_path(parse_xml(xml)) is None

    def test_none(self, parser):
        assert parser.extract_svg_path(None) is None


class TestPresetPaths:
    """Tests for preset geometry lookup."""

    def test_rect(self):
        assert preset_path("rect") == RECT_PATH

    def test_unknown_preset_falls_back_to_rect(self):
        assert preset_path("cloudCallout") == RECT_PATH
        assert preset_path(None) == RECT_PATH
        assert not is_supported_preset("cloudCallout")

    def test_round_rect_uses_adjustment(self):
        path = preset_path("roundRect", {"adj": 0.25})

        assert path.startswith("M 50 0 L 150 0 Q 200 0 200 50")
        assert is_supported_preset("roundRect")

    def test_round_rect_without_radius_is_rect(self):
        assert preset_path("roundRect", {"adj": 0}) == RECT_PATH

    def test_extract_adjustments(self):
        prst_geom = parse_xml(
            f'<a:prstGeom {NS} prst="roundRect"><a:avLst>'
            '<a:gd name="adj" fmla="val 25000"/><a:gd name="adj2" fmla="*/ w 1 2"/>'
            "</a:avLst></a:prstGeom>"
        )

        assert extract_adjustments(prst_geom) == {"adj": 0.25}

    @pytest.mark.parametrize("prst", ["ellipse", "triangle", "star5", "pentagon", "rightArrow"])
    def test_presets_are_closed_paths(self, prst):
        path = preset_path(prst)

        assert path.startswith("M ")
        assert path.endswith("Z")
