"""Error types raised by the decoding engine.

Fatal errors (unreadable package, unreadable theme) propagate to the caller.
Slide and element errors are caught inside the engine and converted into
warnings on the parse result.
"""

from typing import Any, Optional


class PPTXParseError(Exception):
    """Base class for all decoding errors."""

    code = "PARSE_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class XmlSyntaxError(PPTXParseError):
    """Raised when a part is not well-formed XML."""

    code = "XML_SYNTAX_ERROR"

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        if line is not None:
            message = f"{message} (line {line}, column {column or 0})"
        super().__init__(message, details)
        self.line = line
        self.column = column


class PackageError(PPTXParseError):
    """Raised when the input is not a readable OOXML package."""

    code = "PACKAGE_ERROR"


class ThemeParseError(PPTXParseError):
    """Raised when a declared theme part cannot be read."""

    code = "THEME_PARSE_ERROR"


class SlideParseError(PPTXParseError):
    """Raised when a single slide cannot be decoded."""

    code = "SLIDE_PARSE_ERROR"

    def __init__(
        self,
        message: str,
        slide_number: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.slide_number = slide_number


class ElementProcessingError(PPTXParseError):
    """Raised by a processor that cannot decode one shape tree node."""

    code = "ELEMENT_PROCESSING_ERROR"

    def __init__(
        self,
        message: str,
        element_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.element_id = element_id
