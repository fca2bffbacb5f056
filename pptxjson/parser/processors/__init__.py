"""Element processors, one per element kind.

Processors are consulted in priority order; the first whose ``can_process``
returns True handles the node.
"""

from typing import Optional

from pptxjson.parser.fill_extractor import FillExtractor
from pptxjson.parser.image_service import ImageService
from pptxjson.parser.processors.base import ElementProcessor
from pptxjson.parser.processors.image import ImageProcessor
from pptxjson.parser.processors.line import LineProcessor
from pptxjson.parser.processors.shape import ShapeProcessor
from pptxjson.parser.processors.text import TextProcessor
from pptxjson.parser.style_extractor import StyleExtractor
from pptxjson.parser.text_extractor import TextExtractor


def default_processors(image_service: Optional[ImageService] = None) -> list[ElementProcessor]:
    """Build the standard processors in priority order (image, line, text, shape)."""
    fill_extractor = FillExtractor()
    style_extractor = StyleExtractor(fill_extractor)
    text_extractor = TextExtractor(fill_extractor)
    return [
        ImageProcessor(image_service or ImageService(), style_extractor),
        LineProcessor(style_extractor),
        TextProcessor(text_extractor, fill_extractor),
        ShapeProcessor(fill_extractor, style_extractor, text_extractor),
    ]


__all__ = [
    "ElementProcessor",
    "ImageProcessor",
    "LineProcessor",
    "ShapeProcessor",
    "TextProcessor",
    "default_processors",
]
