"""Typed presentation model and its editor JSON serialization."""

from pptxjson.dsl.schema import (
    Element,
    ImageElement,
    LineElement,
    ParseResult,
    Presentation,
    ShapeElement,
    Slide,
    TextElement,
    Theme,
)
from pptxjson.dsl.serializer import to_json

__all__ = [
    "Element",
    "ImageElement",
    "LineElement",
    "ParseResult",
    "Presentation",
    "ShapeElement",
    "Slide",
    "TextElement",
    "Theme",
    "to_json",
]
