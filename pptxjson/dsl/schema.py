"""Pydantic v2 models for the decoded presentation.

This module defines the typed in-memory model produced by the decoding engine.
All lengths are in points (1 pt = 12700 EMU) and all colors are canonical
``rgba(r,g,b,a)`` strings unless otherwise specified.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def normalize_rotation(degrees: float) -> float:
    """Normalize a rotation angle to the range [0, 360)."""
    degrees = degrees % 360.0
    return 0.0 if degrees == 360.0 else degrees


class ImageFormat(str, Enum):
    """Raster formats recognised by magic-number detection."""

    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    WEBP = "webp"
    TIFF = "tiff"
    UNKNOWN = "unknown"


# ============================================================================
# Geometry Models
# ============================================================================


class Position(BaseModel):
    """Top-left corner in slide space, in points."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(default=0.0, description="Left edge in points")
    y: float = Field(default=0.0, description="Top edge in points")


class Size(BaseModel):
    """Element extent in points."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(default=0.0, description="Width in points")
    height: float = Field(default=0.0, description="Height in points")


class Flip(BaseModel):
    """Mirror flags."""

    model_config = ConfigDict(frozen=True)

    horizontal: bool = Field(default=False, description="Mirrored left-to-right")
    vertical: bool = Field(default=False, description="Mirrored top-to-bottom")


class GroupTransform(BaseModel):
    """Placement of a group's local coordinate space in its parent's space.

    Offsets are in EMUs. The group maps a raw child coordinate with
    ``(p - child_offset) * scale + offset``.
    """

    model_config = ConfigDict(frozen=True)

    scale_x: float = Field(default=1.0, description="Parent extent / child extent along X")
    scale_y: float = Field(default=1.0, description="Parent extent / child extent along Y")
    offset_x: float = Field(default=0.0, description="Group placement X in parent space")
    offset_y: float = Field(default=0.0, description="Group placement Y in parent space")
    child_offset_x: float = Field(default=0.0, description="Origin X of the group's local space")
    child_offset_y: float = Field(default=0.0, description="Origin Y of the group's local space")
    rotation: float = Field(default=0.0, description="Accumulated rotation in degrees")
    flip_h: bool = Field(default=False, description="Accumulated horizontal flip")
    flip_v: bool = Field(default=False, description="Accumulated vertical flip")

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Map a point from this group's local space into its parent's space."""
        return (
            (x - self.child_offset_x) * self.scale_x + self.offset_x,
            (y - self.child_offset_y) * self.scale_y + self.offset_y,
        )


# ============================================================================
# Theme Models
# ============================================================================


class ColorScheme(BaseModel):
    """The twelve theme color slots as hex strings."""

    model_config = ConfigDict(frozen=True)

    dk1: str = Field(default="#000000", description="Dark 1 (usually text)")
    lt1: str = Field(default="#FFFFFF", description="Light 1 (usually background)")
    dk2: str = Field(default="#666666", description="Dark 2")
    lt2: str = Field(default="#F2F2F2", description="Light 2")
    accent1: str = Field(default="#4472C4")
    accent2: str = Field(default="#ED7D31")
    accent3: str = Field(default="#A5A5A5")
    accent4: str = Field(default="#FFC000")
    accent5: str = Field(default="#5B9BD5")
    accent6: str = Field(default="#70AD47")
    hyperlink: str = Field(default="#0563C1")
    followed_hyperlink: str = Field(default="#954F72")

    def get(self, slot: str) -> Optional[str]:
        """Look up a slot by its OOXML or attribute name."""
        if slot == "hlink":
            slot = "hyperlink"
        elif slot == "folHlink":
            slot = "followed_hyperlink"
        return getattr(self, slot, None) if slot in type(self).model_fields else None


class FontScheme(BaseModel):
    """Major (heading) and minor (body) typefaces."""

    model_config = ConfigDict(frozen=True)

    major_latin: str = Field(default="Arial")
    major_east_asian: str = Field(default="Arial")
    major_complex_script: str = Field(default="Arial")
    minor_latin: str = Field(default="Arial")
    minor_east_asian: str = Field(default="Arial")
    minor_complex_script: str = Field(default="Arial")


class Theme(BaseModel):
    """Presentation theme shared by every slide."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="Office Theme")
    colors: ColorScheme = Field(default_factory=ColorScheme)
    fonts: FontScheme = Field(default_factory=FontScheme)


# ============================================================================
# Style Models
# ============================================================================


class Outline(BaseModel):
    """Stroke around a shape or image."""

    model_config = ConfigDict(frozen=True)

    color: str = Field(description="Stroke color (rgba)")
    width: float = Field(default=1.0, ge=0, description="Stroke width in points")
    style: Literal["solid", "dashed", "dotted"] = "solid"


class Shadow(BaseModel):
    """Outer drop shadow."""

    model_config = ConfigDict(frozen=True)

    h: float = Field(default=0.0, description="Horizontal offset in points")
    v: float = Field(default=0.0, description="Vertical offset in points")
    blur: float = Field(default=0.0, ge=0, description="Blur radius in points")
    color: str = Field(default="rgba(0,0,0,0.5)")


class ElementStyle(BaseModel):
    """Optional visual decoration shared by element kinds."""

    model_config = ConfigDict(frozen=True)

    outline: Optional[Outline] = None
    shadow: Optional[Shadow] = None
    opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class GradientStop(BaseModel):
    """One stop of a gradient."""

    model_config = ConfigDict(frozen=True)

    position: float = Field(ge=0.0, le=1.0, description="Stop position as a 0-1 fraction")
    color: str


class Gradient(BaseModel):
    """Linear or radial gradient with stops sorted by position."""

    model_config = ConfigDict(frozen=True)

    type: Literal["linear", "radial"] = "linear"
    angle: float = Field(default=0.0, description="Angle in degrees")
    stops: list[GradientStop] = Field(default_factory=list)


# ============================================================================
# Media Models
# ============================================================================


class ImageData(BaseModel):
    """Raw bytes of one embedded image plus what we learned about them."""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    format: ImageFormat = ImageFormat.UNKNOWN
    mime_type: str = "application/octet-stream"
    size: int = Field(ge=0, description="Byte length")
    hash: str = Field(description="Hex digest of the raw bytes")
    width: Optional[int] = Field(default=None, description="Pixel width when decodable")
    height: Optional[int] = Field(default=None, description="Pixel height when decodable")
    filename: Optional[str] = None


class ImageProcessResult(BaseModel):
    """Outcome of extracting one id in a batch."""

    model_config = ConfigDict(frozen=True)

    success: bool
    image_data: Optional[ImageData] = None
    data_url: Optional[str] = None
    error: Optional[str] = None


class Relationship(BaseModel):
    """One entry of a part's .rels file."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = ""
    target: str
    target_mode: str = "Internal"

    @property
    def is_external(self) -> bool:
        return self.target_mode == "External"


# ============================================================================
# Text Models
# ============================================================================


class TextRun(BaseModel):
    """A run of identically styled characters."""

    model_config = ConfigDict(frozen=True)

    text: str
    font_size: Optional[float] = Field(default=None, description="Size in points")
    font_family: Optional[str] = None
    color: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    baseline: Optional[Literal["superscript", "subscript"]] = None
    hyperlink: Optional[str] = None


class Paragraph(BaseModel):
    """A paragraph of runs."""

    model_config = ConfigDict(frozen=True)

    runs: list[TextRun] = Field(default_factory=list)
    alignment: Literal["left", "center", "right", "justify"] = "left"
    level: int = Field(default=0, ge=0, le=8)
    line_spacing: Optional[float] = Field(default=None, description="Multiple of single spacing")
    bullet: Optional[str] = None

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)


# ============================================================================
# Element Models
# ============================================================================


class ElementBase(BaseModel):
    """Geometry shared by every element kind."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    position: Position = Field(default_factory=Position)
    size: Size = Field(default_factory=Size)
    rotation: float = Field(default=0.0, description="Clockwise degrees")
    flip: Flip = Field(default_factory=Flip)
    style: Optional[ElementStyle] = None

    def with_group_transform(self, transform: GroupTransform, precision: int = 2) -> "ElementBase":
        """Return a copy with the group's scale, rotation and flips applied.

        Position is left alone: it was already mapped through the group's
        coordinate transform during extraction.
        """
        return self.model_copy(
            update={
                "size": Size(
                    width=round(self.size.width * transform.scale_x, precision),
                    height=round(self.size.height * transform.scale_y, precision),
                ),
                "rotation": normalize_rotation(self.rotation + transform.rotation),
                "flip": Flip(
                    horizontal=self.flip.horizontal != transform.flip_h,
                    vertical=self.flip.vertical != transform.flip_v,
                ),
            }
        )


class TextElement(ElementBase):
    """A text box, or the text layer of a filled shape."""

    type: Literal["text"] = "text"
    paragraphs: list[Paragraph] = Field(default_factory=list)
    content: str = Field(default="", description="Editor HTML rendering of the paragraphs")
    default_font: str = "Microsoft Yahei"
    default_color: str = "rgba(51,51,51,1)"
    vertical: bool = False
    vertical_align: Literal["top", "middle", "bottom"] = "top"
    line_height: float = 1.0
    fill: Optional[str] = None

    @property
    def text(self) -> str:
        return "\n".join(p.text for p in self.paragraphs)


class ShapeElement(ElementBase):
    """A preset or custom geometry shape with a fill."""

    type: Literal["shape"] = "shape"
    shape_type: str = "rect"
    path: str = "M 0 0 L 200 0 L 200 200 L 0 200 Z"
    fill: str = ""
    gradient: Optional[Gradient] = None
    keypoints: list[float] = Field(default_factory=list)


class ImageElement(ElementBase):
    """A picture or image-filled shape."""

    type: Literal["image"] = "image"
    src: str = ""
    image: Optional[ImageData] = None
    crop: Optional[tuple[float, float, float, float]] = Field(
        default=None, description="left, top, right, bottom insets as percentages"
    )
    fill_rect: Optional[tuple[float, float, float, float]] = Field(
        default=None,
        description="Stretch insets of the image within the frame, as percentages; negative extends past it",
    )
    shape_type: str = "rect"


class LineElement(ElementBase):
    """A straight line or connector."""

    type: Literal["line"] = "line"
    color: str = "rgba(0,0,0,1)"
    width: float = Field(default=1.0, ge=0, description="Stroke width in points")
    dash: Literal["solid", "dashed", "dotted"] = "solid"
    start_marker: str = ""
    end_marker: str = ""
    connector: Literal["straight", "bent", "curved"] = "straight"


Element = Annotated[
    Union[TextElement, ShapeElement, ImageElement, LineElement],
    Field(discriminator="type"),
]


# ============================================================================
# Slide & Presentation Models
# ============================================================================


class SolidBackground(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["solid"] = "solid"
    color: str


class GradientBackground(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["gradient"] = "gradient"
    gradient: Gradient


class ImageBackground(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    src: str
    image: Optional[ImageData] = None


Background = Annotated[
    Union[SolidBackground, GradientBackground, ImageBackground],
    Field(discriminator="type"),
]


class Slide(BaseModel):
    """One decoded slide."""

    model_config = ConfigDict(frozen=True)

    id: str
    number: int = Field(ge=1, description="1-based position in source order")
    elements: list[Element] = Field(default_factory=list)
    background: Optional[Background] = None
    notes: Optional[str] = None
    hidden: bool = False


class PresentationMetadata(BaseModel):
    """Core document properties."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None


class Presentation(BaseModel):
    """Root aggregate of a decoded package."""

    model_config = ConfigDict(frozen=True)

    metadata: PresentationMetadata = Field(default_factory=PresentationMetadata)
    width: float = Field(default=960.0, description="Slide width in points")
    height: float = Field(default=540.0, description="Slide height in points")
    slides: list[Slide] = Field(default_factory=list)
    theme: Optional[Theme] = None


class ParseWarning(BaseModel):
    """Something was skipped or degraded while decoding."""

    model_config = ConfigDict(frozen=True)

    level: Literal["info", "warning", "error"] = "warning"
    message: str
    slide_number: Optional[int] = None
    element_id: Optional[str] = None


class ParseStats(BaseModel):
    """Observational counters for one parse call."""

    model_config = ConfigDict(frozen=True)

    total_slides: int = 0
    total_elements: int = 0
    element_counts: dict[str, int] = Field(default_factory=dict)
    parse_time_ms: float = 0.0
    file_size_bytes: int = 0


class ParseResult(BaseModel):
    """Presentation plus everything that went wrong producing it."""

    model_config = ConfigDict(frozen=True)

    presentation: Presentation
    warnings: list[ParseWarning] = Field(default_factory=list)
    stats: ParseStats = Field(default_factory=ParseStats)

    @property
    def success(self) -> bool:
        return not any(w.level == "error" for w in self.warnings)

    def summary(self) -> dict[str, Any]:
        return {
            "slides": self.stats.total_slides,
            "elements": self.stats.total_elements,
            "warnings": len(self.warnings),
            "parse_time_ms": self.stats.parse_time_ms,
        }
