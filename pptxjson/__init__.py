"""pptxjson - decode PowerPoint packages into slide-editor JSON.

Example:
    from pptxjson import parse_presentation, to_json

    with open("deck.pptx", "rb") as f:
        result = parse_presentation(f.read())
    document = to_json(result)
"""

from pptxjson.config import ParserOptions, Settings, get_settings
from pptxjson.dsl.serializer import to_json
from pptxjson.errors import (
    PPTXParseError,
    PackageError,
    SlideParseError,
    ThemeParseError,
    XmlSyntaxError,
)
from pptxjson.parser.presentation_parser import (
    PresentationParser,
    create_parser,
    parse_presentation,
)

__version__ = "0.1.0"

__all__ = [
    "PPTXParseError",
    "PackageError",
    "ParserOptions",
    "PresentationParser",
    "Settings",
    "SlideParseError",
    "ThemeParseError",
    "XmlSyntaxError",
    "create_parser",
    "get_settings",
    "parse_presentation",
    "to_json",
]
