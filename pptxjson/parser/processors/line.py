"""Straight lines and connectors."""

from typing import Optional

from pptxjson.dsl.schema import Element, LineElement
from pptxjson.parser.context import ProcessingContext
from pptxjson.parser.processors.base import (
    LINE_PRESETS,
    ElementProcessor,
    extract_geometry,
    has_blip_fill,
    preset_geometry,
    source_id,
    source_name,
)
from pptxjson.parser.style_extractor import StyleExtractor
from pptxjson.parser.xml_node import XmlNode, find_child


DEFAULT_LINE_COLOR = "rgba(0,0,0,1)"


def connector_kind(prst: Optional[str]) -> str:
    if prst and prst.startswith("bentConnector"):
        return "bent"
    if prst and prst.startswith("curvedConnector"):
        return "curved"
    return "straight"


class LineProcessor(ElementProcessor):
    """Handles ``p:cxnSp`` connectors and ``p:sp`` line presets."""

    element_type = "line"

    def __init__(self, style_extractor: Optional[StyleExtractor] = None):
        self.style_extractor = style_extractor or StyleExtractor()

    def can_process(self, node: XmlNode) -> bool:
        if node.local_name == "cxnSp":
            return True
        return (
            node.local_name == "sp"
            and not has_blip_fill(node)
            and preset_geometry(node) in LINE_PRESETS
        )

    def process(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        element_id = context.id_generator.generate(source_id(node), "line")
        geometry = extract_geometry(node, context)
        sp_pr = find_child(node, "spPr")
        ln = find_child(sp_pr, "ln")

        outline = self.style_extractor.extract_outline(
            sp_pr, context.theme, find_child(node, "style"), context.options.precision
        )
        start_marker, end_marker = self.style_extractor.extract_line_ends(ln)

        return [
            LineElement(
                id=element_id,
                name=source_name(node),
                position=geometry.position,
                size=geometry.size,
                rotation=geometry.rotation,
                flip=geometry.flip,
                color=outline.color if outline else DEFAULT_LINE_COLOR,
                width=outline.width if outline else 1.0,
                dash=self.style_extractor.extract_dash(ln),
                start_marker=start_marker,
                end_marker=end_marker,
                connector=connector_kind(preset_geometry(node)),
            )
        ]
