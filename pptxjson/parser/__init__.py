"""PPTX Parser module - decodes PowerPoint packages into the presentation model.

This module provides extraction of PowerPoint content including:
- Namespace-agnostic XML trees for every package part
- Theme colors and fonts
- Nested group transforms flattened into slide space
- Shapes with preset and custom geometry paths
- Fill, outline and shadow styles
- Text content with run formatting and HTML rendering
- Embedded images as data URLs
"""

from pptxjson.parser.image_service import ImageService
from pptxjson.parser.package import PptxPackage
from pptxjson.parser.path_parser import PathParser
from pptxjson.parser.presentation_parser import (
    PresentationParser,
    create_parser,
    parse_presentation,
)
from pptxjson.parser.slide_parser import SlideParser
from pptxjson.parser.style_extractor import StyleExtractor
from pptxjson.parser.theme_parser import ThemeParser
from pptxjson.parser.xml_node import XmlNode, parse_xml

__all__ = [
    "ImageService",
    "PathParser",
    "PptxPackage",
    "PresentationParser",
    "SlideParser",
    "StyleExtractor",
    "ThemeParser",
    "XmlNode",
    "create_parser",
    "parse_presentation",
    "parse_xml",
]
