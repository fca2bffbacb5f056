"""Filled or outlined autoshapes and freeforms."""

from typing import Optional

from pptxjson.dsl.schema import Element, ElementStyle, ShapeElement
from pptxjson.parser.context import ProcessingContext
from pptxjson.parser.fill_extractor import NO_FILL, FillExtractor
from pptxjson.parser.path_parser import (
    RECT_PATH,
    PathParser,
    extract_adjustments,
    is_supported_preset,
    preset_path,
)
from pptxjson.parser.processors.base import (
    LINE_PRESETS,
    ElementProcessor,
    extract_geometry,
    has_blip_fill,
    has_visible_geometry,
    is_text_box,
    preset_geometry,
    source_id,
    source_name,
)
from pptxjson.parser.processors.text import build_text_element
from pptxjson.parser.style_extractor import StyleExtractor
from pptxjson.parser.text_extractor import TextExtractor, has_text
from pptxjson.parser.units import parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_path, get_attribute


TEXT_ID_SUFFIX = "_text"


class ShapeProcessor(ElementProcessor):
    """Handles ``p:sp`` nodes with a visible fill or outline.

    When the shape also carries text, a second text element is emitted right
    after it, sharing its geometry, with id ``<shape id>_text``.
    """

    element_type = "shape"

    def __init__(
        self,
        fill_extractor: Optional[FillExtractor] = None,
        style_extractor: Optional[StyleExtractor] = None,
        text_extractor: Optional[TextExtractor] = None,
        path_parser: Optional[PathParser] = None,
    ):
        self.fill_extractor = fill_extractor or FillExtractor()
        self.style_extractor = style_extractor or StyleExtractor(self.fill_extractor)
        self.text_extractor = text_extractor or TextExtractor(self.fill_extractor)
        self.path_parser = path_parser or PathParser()

    def can_process(self, node: XmlNode) -> bool:
        if node.local_name != "sp" or has_blip_fill(node) or is_text_box(node):
            return False
        if preset_geometry(node) in LINE_PRESETS:
            return False
        return has_visible_geometry(node)

    def process(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        element_id = context.id_generator.generate(source_id(node), "shape")
        geometry = extract_geometry(node, context)
        sp_pr = find_child(node, "spPr")
        style = find_child(node, "style")
        theme = context.theme
        precision = context.options.precision

        shape_type, path, keypoints = self._extract_path(sp_pr)

        fill = self.fill_extractor.get_fill_color(sp_pr, theme, style)
        gradient = self.fill_extractor.get_gradient_fill(find_child(sp_pr, "gradFill"), theme)
        if gradient is None and not fill:
            fill = NO_FILL

        outline = self.style_extractor.extract_outline(sp_pr, theme, style, precision)
        shadow = self.style_extractor.extract_shadow(sp_pr, theme, precision)
        element_style = ElementStyle(outline=outline, shadow=shadow) if outline or shadow else None

        elements: list[Element] = [
            ShapeElement(
                id=element_id,
                name=source_name(node),
                position=geometry.position,
                size=geometry.size,
                rotation=geometry.rotation,
                flip=geometry.flip,
                style=element_style,
                shape_type=shape_type,
                path=path,
                fill="" if gradient is not None else fill,
                gradient=gradient,
                keypoints=keypoints,
            )
        ]
        context.debug(f"Shape element {element_id}", shape=shape_type, fill=fill)

        if has_text(find_child(node, "txBody")):
            text_id = context.id_generator.derive(element_id, TEXT_ID_SUFFIX)
            elements.append(
                build_text_element(node, context, text_id, geometry, self.text_extractor)
            )

        return elements

    def _extract_path(self, sp_pr: Optional[XmlNode]) -> tuple[str, str, list[float]]:
        """Return (shape type, viewBox path, keypoints) for the geometry."""
        prst_geom = find_child(sp_pr, "prstGeom")
        if prst_geom is not None:
            prst = get_attribute(prst_geom, "prst") or "rect"
            adjustments = extract_adjustments(prst_geom)
            keypoints = [adjustments["adj"]] if prst == "roundRect" and "adj" in adjustments else []
            shape_type = prst if is_supported_preset(prst) else "rect"
            return shape_type, preset_path(prst, adjustments), keypoints

        cust_geom = find_child(sp_pr, "custGeom")
        if cust_geom is not None:
            ext = find_path(sp_pr, "xfrm", "ext")
            path = self.path_parser.extract_svg_path(
                cust_geom,
                parse_number(get_attribute(ext, "cx")) or 0.0,
                parse_number(get_attribute(ext, "cy")) or 0.0,
            )
            if path:
                return "custom", path, []

        return "rect", RECT_PATH, []
