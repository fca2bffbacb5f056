"""Pictures (``p:pic``) and image-filled shapes."""

from typing import Optional

from pptxjson.dsl.schema import Element, ElementStyle, ImageElement
from pptxjson.errors import ElementProcessingError
from pptxjson.parser.context import ProcessingContext
from pptxjson.parser.image_service import ImageService, encode_to_base64
from pptxjson.parser.processors.base import (
    ElementProcessor,
    extract_geometry,
    has_blip_fill,
    preset_geometry,
    source_id,
    source_name,
)
from pptxjson.parser.style_extractor import StyleExtractor
from pptxjson.parser.units import parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_node, get_attribute


class ImageProcessor(ElementProcessor):
    """Handles pictures and shapes whose fill is a blip."""

    element_type = "image"

    def __init__(
        self,
        image_service: Optional[ImageService] = None,
        style_extractor: Optional[StyleExtractor] = None,
    ):
        self.image_service = image_service or ImageService()
        self.style_extractor = style_extractor or StyleExtractor()

    def can_process(self, node: XmlNode) -> bool:
        if node.local_name == "pic":
            return True
        return node.local_name == "sp" and has_blip_fill(node)

    def process(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        blip = find_node(node, "blip")
        embed_id = get_attribute(blip, "r:embed")
        link_id = get_attribute(blip, "r:link")
        if not embed_id and not link_id:
            raise ElementProcessingError(
                "Picture has no embedded or linked image", element_id=source_id(node)
            )

        element_id = context.id_generator.generate(source_id(node), "image")
        geometry = extract_geometry(node, context)

        image_data = None
        if embed_id and context.options.extract_media:
            image_data = self.image_service.extract_image_data(embed_id, context)
        if image_data is not None:
            src = encode_to_base64(image_data)
        else:
            src = self.image_service.raw_target(embed_id or link_id, context)
            if embed_id and context.options.extract_media:
                context.warn(
                    f"Image {embed_id} could not be extracted, using its relationship target",
                    element_id=element_id,
                    level="info",
                )

        outline = self.style_extractor.extract_outline(
            find_child(node, "spPr"), context.theme, find_child(node, "style"), context.options.precision
        )

        return [
            ImageElement(
                id=element_id,
                name=source_name(node),
                position=geometry.position,
                size=geometry.size,
                rotation=geometry.rotation,
                flip=geometry.flip,
                style=ElementStyle(outline=outline) if outline else None,
                src=src,
                image=image_data,
                crop=self._extract_crop(node),
                fill_rect=self._extract_fill_rect(node),
                shape_type=preset_geometry(node) or "rect",
            )
        ]

    def _extract_crop(self, node: XmlNode) -> Optional[tuple[float, float, float, float]]:
        """``a:srcRect`` insets (1000ths of a percent) as percentages.

        XML structure example:
            <p:blipFill>
                <a:blip r:embed="rId2"/>
                <a:srcRect l="10000" t="0" r="5000" b="0"/>
            </p:blipFill>
        """
        return _insets(find_node(find_node(node, "blipFill"), "srcRect"))

    def _extract_fill_rect(self, node: XmlNode) -> Optional[tuple[float, float, float, float]]:
        """``a:stretch/a:fillRect`` insets as percentages of the frame.

        Negative insets place the image edge outside the frame.

        XML structure example:
            <p:blipFill>
                <a:blip r:embed="rId2"/>
                <a:stretch><a:fillRect l="-4881" t="0" r="-4881" b="0"/></a:stretch>
            </p:blipFill>
        """
        stretch = find_node(find_node(node, "blipFill"), "stretch")
        return _insets(find_child(stretch, "fillRect"))


def _insets(rect: Optional[XmlNode]) -> Optional[tuple[float, float, float, float]]:
    """l/t/r/b in 1000ths of a percent as percentages, None when all zero."""
    if rect is None:
        return None
    insets = tuple(
        round((parse_number(get_attribute(rect, side)) or 0.0) / 1000, 3)
        for side in ("l", "t", "r", "b")
    )
    return insets if any(insets) else None
