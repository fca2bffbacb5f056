"""Decode one slide part into a Slide.

Walks ``p:cSld/p:spTree`` in document order. Group shapes are flattened in
place: their transform is composed with any enclosing group's and installed
on the context while their children are processed, and each leaf element
produced directly inside the group then gets the group's scale, rotation
and flips applied exactly once.
"""

import logging
import re
from typing import Optional

from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from pptxjson.config import ParserOptions
from pptxjson.dsl.schema import (
    Background,
    Element,
    GradientBackground,
    ImageBackground,
    Relationship,
    Slide,
    SolidBackground,
    Theme,
)
from pptxjson.errors import SlideParseError, XmlSyntaxError
from pptxjson.parser.context import IdGenerator, ProcessingContext, WarningCollector
from pptxjson.parser.diagnostics import DiagnosticsSink, NullDiagnostics
from pptxjson.parser.fill_extractor import FillExtractor
from pptxjson.parser.group_transform import compose, extract_group_transform
from pptxjson.parser.image_service import ImageService, encode_to_base64
from pptxjson.parser.package import PptxPackage, resolve_target
from pptxjson.parser.processors import ElementProcessor, default_processors
from pptxjson.parser.processors.base import source_id
from pptxjson.parser.xml_node import (
    XmlNode,
    find_child,
    find_children,
    find_nodes,
    find_path,
    get_attribute,
)


logger = logging.getLogger(__name__)

_SLIDE_NUMBER = re.compile(r"slide(\d+)\.xml$", re.IGNORECASE)

# spTree children that describe the tree itself rather than drawable content
STRUCTURAL_NODES = {"nvGrpSpPr", "grpSpPr", "extLst"}


def slide_id_from_path(slide_path: str, default: str = "") -> str:
    """``/ppt/slides/slide12.xml`` -> ``"12"``."""
    match = _SLIDE_NUMBER.search(slide_path)
    return match.group(1) if match else default


class SlideParser:
    """Decodes slide parts using an ordered list of element processors."""

    def __init__(
        self,
        processors: Optional[list[ElementProcessor]] = None,
        image_service: Optional[ImageService] = None,
        fill_extractor: Optional[FillExtractor] = None,
    ):
        self.image_service = image_service or ImageService()
        self.processors = processors if processors is not None else default_processors(self.image_service)
        self.fill_extractor = fill_extractor or FillExtractor()

    def parse(
        self,
        package: PptxPackage,
        slide_path: str,
        slide_number: int,
        theme: Optional[Theme] = None,
        relationships: Optional[dict[str, Relationship]] = None,
        options: Optional[ParserOptions] = None,
        id_generator: Optional[IdGenerator] = None,
        warnings: Optional[WarningCollector] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> Slide:
        """Parse one slide.

        Args:
            package: The opened package.
            slide_path: Slide part name, e.g. ``/ppt/slides/slide1.xml``.
            slide_number: 1-based number in presentation order.
            theme: Presentation theme for color and font resolution.
            relationships: The slide's relationships; read from the package
                when omitted.
            options: Parser options.
            id_generator: Presentation-wide id generator.
            warnings: Collector receiving node-scoped warnings.
            diagnostics: Optional trace sink.

        Returns:
            The decoded Slide.

        Raises:
            SlideParseError: If the slide part is missing or malformed.
        """
        try:
            root = package.read_xml(slide_path)
        except XmlSyntaxError as e:
            raise SlideParseError(str(e), slide_number=slide_number) from e
        if root is None:
            raise SlideParseError(f"Slide part {slide_path} not found", slide_number=slide_number)

        context = ProcessingContext(
            package=package,
            slide_number=slide_number,
            slide_id=slide_id_from_path(slide_path, str(slide_number)),
            slide_part=slide_path,
            theme=theme,
            relationships=relationships if relationships is not None else package.relationships(slide_path),
            id_generator=id_generator if id_generator is not None else IdGenerator(),
            warnings=warnings if warnings is not None else WarningCollector(),
            options=options or ParserOptions(),
            diagnostics=diagnostics if diagnostics is not None else NullDiagnostics(),
        )

        c_sld = find_child(root, "cSld")
        background = self.extract_background(find_child(c_sld, "bg"), context)
        elements = self.process_tree(find_child(c_sld, "spTree"), context)
        notes = self.extract_notes(context) if context.options.include_notes else None

        context.debug(f"Slide {slide_number}: {len(elements)} elements")
        return Slide(
            id=context.slide_id,
            number=slide_number,
            elements=elements,
            background=background,
            notes=notes,
            hidden=get_attribute(root, "show") in ("0", "false"),
        )

    def process_tree(self, container: Optional[XmlNode], context: ProcessingContext) -> list[Element]:
        """Process a shape tree (or group) in document order."""
        elements: list[Element] = []
        if container is None:
            return elements

        for child in container.children:
            name = child.local_name
            if name in STRUCTURAL_NODES:
                continue
            if name == "grpSp":
                elements.extend(self._process_group(child, context))
            elif name == "AlternateContent":
                chosen = find_child(child, "Fallback") or find_child(child, "Choice")
                elements.extend(self.process_tree(chosen, context))
            else:
                elements.extend(self._process_node(child, context))
        return elements

    def _process_group(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        transform = compose(context.group_transform, extract_group_transform(node))
        context.debug(
            f"Group {source_id(node)}",
            scale=(transform.scale_x, transform.scale_y),
            offset=(transform.offset_x, transform.offset_y),
        )
        return self.process_tree(node, context.with_group_transform(transform))

    def _process_node(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        processor = next((p for p in self.processors if p.can_process(node)), None)
        if processor is None:
            context.debug(f"No processor for {node.name}", id=source_id(node))
            return []

        try:
            produced = processor.process(node, context)
        except Exception as e:
            element_id = getattr(e, "element_id", None) or source_id(node)
            label = f"{node.name} {element_id}" if element_id else node.name
            message = f"Skipped {label}: {e}"
            logger.warning(f"Slide {context.slide_number}: {message}")
            context.warn(message, element_id=element_id)
            return []

        transform = context.group_transform
        if transform is None:
            return produced
        precision = context.options.precision
        return [element.with_group_transform(transform, precision) for element in produced]

    def extract_background(
        self,
        bg: Optional[XmlNode],
        context: ProcessingContext,
    ) -> Optional[Background]:
        """Extract the slide background from ``p:bg``.

        XML structure example:
            <p:bg>
                <p:bgPr>
                    <a:solidFill><a:schemeClr val="bg1"/></a:solidFill>
                </p:bgPr>
            </p:bg>
        """
        if bg is None:
            return None
        theme = context.theme

        bg_pr = find_child(bg, "bgPr")
        if bg_pr is not None:
            solid = find_child(bg_pr, "solidFill")
            if solid is not None:
                color = self.fill_extractor.get_solid_fill(solid, theme)
                return SolidBackground(color=color) if color else None

            gradient = self.fill_extractor.get_gradient_fill(find_child(bg_pr, "gradFill"), theme)
            if gradient is not None:
                return GradientBackground(gradient=gradient)

            blip_fill = find_child(bg_pr, "blipFill")
            if blip_fill is not None:
                return self._image_background(blip_fill, context)
            return None

        bg_ref = find_child(bg, "bgRef")
        if bg_ref is not None:
            color = self.fill_extractor.get_solid_fill(bg_ref, theme)
            return SolidBackground(color=color) if color else None
        return None

    def _image_background(self, blip_fill: XmlNode, context: ProcessingContext) -> Optional[ImageBackground]:
        embed_id = get_attribute(find_child(blip_fill, "blip"), "r:embed")
        if not embed_id:
            return None

        image_data = None
        if context.options.extract_media:
            image_data = self.image_service.extract_image_data(embed_id, context)
        if image_data is not None:
            return ImageBackground(src=encode_to_base64(image_data), image=image_data)

        target = self.image_service.raw_target(embed_id, context)
        if context.options.extract_media:
            context.warn(
                f"Background image {embed_id} could not be extracted, using its relationship target",
                level="info",
            )
        return ImageBackground(src=target) if target else None

    def extract_notes(self, context: ProcessingContext) -> Optional[str]:
        """Speaker notes from the slide's notes part, body placeholder only."""
        notes_rel = next(
            (rel for rel in context.relationships.values() if rel.type == RT.NOTES_SLIDE),
            None,
        )
        if notes_rel is None or notes_rel.is_external:
            return None
        notes_part = resolve_target(context.slide_part, notes_rel.target)
        if notes_part is None:
            return None

        try:
            root = context.package.read_xml(notes_part)
        except XmlSyntaxError as e:
            context.warn(f"Notes part {notes_part} is malformed: {e}", level="info")
            return None
        if root is None:
            return None

        for sp in find_nodes(root, "sp"):
            ph = find_path(sp, "nvSpPr", "nvPr", "ph")
            if get_attribute(ph, "type") != "body":
                continue
            tx_body = find_child(sp, "txBody")
            paragraphs = ["".join(t.text for t in find_nodes(p, "t")) for p in find_children(tx_body, "p")]
            text = "\n".join(paragraphs).strip()
            return text or None
        return None
