"""Text boxes and unfilled text-bearing shapes."""

from typing import Optional

from pptxjson.dsl.schema import Element, TextElement
from pptxjson.parser import colors
from pptxjson.parser.context import ProcessingContext
from pptxjson.parser.fill_extractor import FillExtractor
from pptxjson.parser.processors.base import (
    LINE_PRESETS,
    ElementProcessor,
    Geometry,
    extract_geometry,
    has_blip_fill,
    has_visible_fill,
    has_visible_geometry,
    is_text_box,
    preset_geometry,
    source_id,
    source_name,
)
from pptxjson.parser.text_extractor import TextExtractor, has_text
from pptxjson.parser.xml_node import XmlNode, find_child


DEFAULT_TEXT_COLOR = "rgba(51,51,51,1)"


def build_text_element(
    node: XmlNode,
    context: ProcessingContext,
    element_id: str,
    geometry: Geometry,
    text_extractor: TextExtractor,
    fill: Optional[str] = None,
) -> TextElement:
    """Build the text element for a node's ``txBody``.

    Used both for stand-alone text boxes and for the text layer of a filled
    shape, which shares the shape's geometry.
    """
    tx_body = find_child(node, "txBody")
    style = find_child(node, "style")
    paragraphs = text_extractor.extract_paragraphs(
        tx_body, context.theme, style, context.relationships
    )
    body = text_extractor.extract_body_properties(tx_body)

    default_font = context.options.default_font
    if context.theme is not None:
        default_font = context.theme.fonts.minor_latin

    first_color = next(
        (run.color for p in paragraphs for run in p.runs if run.color), None
    )
    line_height = next((p.line_spacing for p in paragraphs if p.line_spacing), 1.0)

    return TextElement(
        id=element_id,
        name=source_name(node),
        position=geometry.position,
        size=geometry.size,
        rotation=geometry.rotation,
        flip=geometry.flip,
        paragraphs=paragraphs,
        content=text_extractor.render_html(paragraphs),
        default_font=default_font,
        default_color=first_color or DEFAULT_TEXT_COLOR,
        vertical=body["vertical"],
        vertical_align=body["vertical_align"],
        line_height=line_height,
        fill=fill,
    )


class TextProcessor(ElementProcessor):
    """Handles ``p:sp`` text boxes and text shapes with nothing visible to draw.

    A shape that carries text *and* a visible fill or outline belongs to
    ShapeProcessor, which emits the text as a separate overlaid element.
    """

    element_type = "text"

    def __init__(
        self,
        text_extractor: Optional[TextExtractor] = None,
        fill_extractor: Optional[FillExtractor] = None,
    ):
        self.fill_extractor = fill_extractor or FillExtractor()
        self.text_extractor = text_extractor or TextExtractor(self.fill_extractor)

    def can_process(self, node: XmlNode) -> bool:
        if node.local_name != "sp" or has_blip_fill(node):
            return False
        if preset_geometry(node) in LINE_PRESETS:
            return False
        if not has_text(find_child(node, "txBody")):
            return False
        return is_text_box(node) or not has_visible_geometry(node)

    def process(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        element_id = context.id_generator.generate(source_id(node), "text")
        geometry = extract_geometry(node, context)

        fill = None
        if has_visible_fill(node):
            color = self.fill_extractor.get_fill_color(
                find_child(node, "spPr"), context.theme, find_child(node, "style")
            )
            fill = color if color and not colors.is_transparent(color) else None

        context.debug(f"Text element {element_id}", position=geometry.position)
        return [build_text_element(node, context, element_id, geometry, self.text_extractor, fill)]
