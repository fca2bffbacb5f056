"""High-level PPTX decoding.

PresentationParser drives a whole decode: it opens the package, classifies
parts by content type, parses the theme and metadata, and hands each slide
to the SlideParser, isolating per-slide failures as warnings.
"""

import logging
import time
from collections import Counter
from pathlib import Path
from typing import BinaryIO, Optional, Union

from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from pptxjson.config import ParserOptions
from pptxjson.dsl.schema import (
    ParseResult,
    ParseStats,
    Presentation,
    PresentationMetadata,
    Slide,
    Theme,
)
from pptxjson.errors import PackageError, XmlSyntaxError
from pptxjson.parser.context import IdGenerator, WarningCollector
from pptxjson.parser.diagnostics import DiagnosticsSink, LoggingDiagnostics, NullDiagnostics
from pptxjson.parser.image_service import ImageService
from pptxjson.parser.package import PptxPackage
from pptxjson.parser.processors import default_processors
from pptxjson.parser.slide_parser import SlideParser
from pptxjson.parser.theme_parser import ThemeParser
from pptxjson.parser.units import emu_to_points, parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_node, get_attribute


logger = logging.getLogger(__name__)

DEFAULT_CORE_PROPERTIES_PART = "/docProps/core.xml"

# 10in x 5.625in (16:9), the PowerPoint default
DEFAULT_SLIDE_WIDTH_EMU = 12192000
DEFAULT_SLIDE_HEIGHT_EMU = 6858000


class PresentationParser:
    """Decodes PPTX packages into Presentation models."""

    def __init__(
        self,
        options: Optional[ParserOptions] = None,
        theme_parser: Optional[ThemeParser] = None,
        slide_parser: Optional[SlideParser] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> None:
        self.options = options or ParserOptions()
        self.theme_parser = theme_parser or ThemeParser()
        self.slide_parser = slide_parser or SlideParser()
        if diagnostics is None:
            diagnostics = LoggingDiagnostics() if self.options.debug else NullDiagnostics()
        self.diagnostics = diagnostics

    def read(self, source: Union[str, Path, BinaryIO]) -> ParseResult:
        """Decode a PPTX file from a path or binary file object."""
        if isinstance(source, (str, Path)):
            data = Path(source).read_bytes()
        else:
            data = source.read()
        return self.parse(data)

    def parse(self, data: bytes) -> ParseResult:
        """Decode a PPTX package.

        Args:
            data: Raw bytes of the .pptx file.

        Returns:
            ParseResult with the presentation, accumulated warnings and stats.

        Raises:
            PackageError: If the input is not a readable OOXML package.
            ThemeParseError: If the declared theme part cannot be read.
        """
        started = time.perf_counter()
        warnings = WarningCollector()
        id_generator = IdGenerator()

        with PptxPackage(data) as package:
            presentation_part = package.presentation_part()
            width, height = self._extract_slide_size(package, presentation_part)
            theme = self._extract_theme(package, presentation_part)
            metadata = self._extract_metadata(package, warnings)

            slides: list[Slide] = []
            slide_parts = sorted(
                package.parts_by_content_type(CT.PML_SLIDE),
                key=lambda part: (part.idx if part.idx is not None else 0, str(part)),
            )
            for number, slide_part in enumerate(slide_parts, start=1):
                slide = self._parse_slide(package, slide_part, number, theme, id_generator, warnings)
                if slide is None:
                    continue
                if slide.hidden and not self.options.include_hidden_slides:
                    warnings.add(f"Hidden slide {number} skipped", level="info", slide_number=number)
                    continue
                slides.append(slide)

        presentation = Presentation(
            metadata=metadata,
            width=width,
            height=height,
            slides=slides,
            theme=theme,
        )
        stats = self._build_stats(presentation, started, len(data))
        logger.info(
            f"Parsed {stats.total_slides} slides, {stats.total_elements} elements "
            f"in {stats.parse_time_ms:.1f} ms ({len(warnings)} warnings)"
        )
        return ParseResult(presentation=presentation, warnings=warnings.warnings, stats=stats)

    def _parse_slide(
        self,
        package: PptxPackage,
        slide_part: str,
        number: int,
        theme: Optional[Theme],
        id_generator: IdGenerator,
        warnings: WarningCollector,
    ) -> Optional[Slide]:
        """Parse one slide; any failure becomes a slide-scoped warning."""
        try:
            return self.slide_parser.parse(
                package,
                slide_part,
                number,
                theme=theme,
                relationships=package.relationships(slide_part),
                options=self.options,
                id_generator=id_generator,
                warnings=warnings,
                diagnostics=self.diagnostics,
            )
        except Exception as e:
            logger.warning(f"Slide {number} ({slide_part}) failed: {e}")
            warnings.add(f"Slide {number} could not be parsed: {e}", level="error", slide_number=number)
            return None

    def _extract_slide_size(self, package: PptxPackage, presentation_part: str) -> tuple[float, float]:
        try:
            root = package.read_xml(presentation_part)
        except XmlSyntaxError as e:
            raise PackageError(f"Presentation part is malformed: {e}") from e
        if root is None:
            raise PackageError(f"Presentation part {presentation_part} not found")

        sld_sz = find_child(root, "sldSz")
        cx = parse_number(get_attribute(sld_sz, "cx")) or DEFAULT_SLIDE_WIDTH_EMU
        cy = parse_number(get_attribute(sld_sz, "cy")) or DEFAULT_SLIDE_HEIGHT_EMU
        precision = self.options.precision
        return emu_to_points(cx, precision), emu_to_points(cy, precision)

    def _extract_theme(self, package: PptxPackage, presentation_part: str) -> Optional[Theme]:
        """Parse the presentation's theme, or None when the package declares none.

        The theme related to the presentation part wins, and a relationship whose
        target part is absent raises ThemeParseError. Otherwise the
        lowest-numbered theme part in the manifest is used.
        """
        related = package.related_part(presentation_part, RT.THEME)
        if related is not None:
            return self.theme_parser.parse(package, str(related))

        themes = sorted(
            package.parts_by_content_type(CT.OFC_THEME),
            key=lambda part: (part.idx if part.idx is not None else 0, str(part)),
        )
        if not themes:
            logger.debug("Package declares no theme part")
            return None
        return self.theme_parser.parse(package, str(themes[0]))

    def _extract_metadata(self, package: PptxPackage, warnings: WarningCollector) -> PresentationMetadata:
        """Read ``docProps/core.xml`` best-effort."""
        part = package.related_part("/", RT.CORE_PROPERTIES) or DEFAULT_CORE_PROPERTIES_PART
        try:
            root = package.read_xml(part)
        except XmlSyntaxError as e:
            warnings.add(f"Core properties unreadable: {e}", level="info")
            return PresentationMetadata()
        if root is None:
            return PresentationMetadata()

        def text(name: str) -> Optional[str]:
            node: Optional[XmlNode] = find_node(root, name)
            value = node.text.strip() if node is not None else ""
            return value or None

        return PresentationMetadata(
            title=text("title"),
            author=text("creator"),
            subject=text("subject"),
            keywords=text("keywords"),
            created=text("created"),
            modified=text("modified"),
        )

    def _build_stats(self, presentation: Presentation, started: float, file_size: int) -> ParseStats:
        counts = Counter(element.type for slide in presentation.slides for element in slide.elements)
        return ParseStats(
            total_slides=len(presentation.slides),
            total_elements=sum(counts.values()),
            element_counts=dict(counts),
            parse_time_ms=round((time.perf_counter() - started) * 1000, 2),
            file_size_bytes=file_size,
        )


def create_parser(options: Optional[ParserOptions] = None) -> PresentationParser:
    """Compose a fresh decoding engine.

    Every call builds new processors, services and parsers; nothing is shared
    between engines.
    """
    options = options or ParserOptions()
    image_service = ImageService(max_workers=options.image_workers)
    slide_parser = SlideParser(
        processors=default_processors(image_service),
        image_service=image_service,
    )
    return PresentationParser(options=options, theme_parser=ThemeParser(), slide_parser=slide_parser)


def parse_presentation(data: bytes, options: Optional[ParserOptions] = None) -> ParseResult:
    """Decode a PPTX package with a freshly created parser."""
    return create_parser(options).parse(data)
