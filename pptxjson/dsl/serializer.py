"""Editor JSON serialization.

Turns a decoded Presentation into the plain-dict document consumed by the
slide editor: lengths in points, colors as canonical ``rgba()`` strings.
"""

from typing import Any, Optional, Union

from pptxjson.dsl.schema import (
    Background,
    ElementBase,
    ElementStyle,
    Gradient,
    ImageBackground,
    ImageElement,
    LineElement,
    ParseResult,
    Presentation,
    ShapeElement,
    Slide,
    SolidBackground,
    GradientBackground,
    TextElement,
    Theme,
)
from pptxjson.parser.colors import to_rgba
from pptxjson.parser.path_parser import VIEWBOX


DEFAULT_TITLE = "Presentation"
DEFAULT_FONT_NAME = "Microsoft Yahei"
DEFAULT_BACKGROUND_COLOR = "rgba(255,255,255,1)"
THEME_COLOR_SLOTS = (
    "dk1", "lt1", "dk2", "lt2",
    "accent1", "accent2", "accent3", "accent4", "accent5", "accent6",
)


def to_json(source: Union[ParseResult, Presentation]) -> dict[str, Any]:
    """Serialize a parse result (or bare presentation) to the editor document.

    Example:
        >>> result = parse_presentation(data)
        >>> doc = to_json(result)
        >>> doc["slides"][0]["elements"][0]["type"]
        'shape'
    """
    presentation = source.presentation if isinstance(source, ParseResult) else source
    return {
        "width": presentation.width,
        "height": presentation.height,
        "slides": [slide_to_json(slide) for slide in presentation.slides],
        "theme": theme_to_json(presentation.theme),
        "title": presentation.metadata.title or DEFAULT_TITLE,
    }


def theme_to_json(theme: Optional[Theme]) -> dict[str, Any]:
    theme = theme or Theme()
    font_name = theme.fonts.major_latin if theme.fonts.major_latin else DEFAULT_FONT_NAME
    return {
        "fontName": font_name,
        "themeColor": {slot: to_rgba(getattr(theme.colors, slot)) for slot in THEME_COLOR_SLOTS},
    }


def slide_to_json(slide: Slide) -> dict[str, Any]:
    return {
        "id": slide.id,
        "elements": [element_to_json(element) for element in slide.elements],
        "background": background_to_json(slide.background),
        "remark": slide.notes or "",
    }


def background_to_json(background: Optional[Background]) -> dict[str, Any]:
    if background is None:
        return {"type": "solid", "color": DEFAULT_BACKGROUND_COLOR}
    if isinstance(background, SolidBackground):
        return {"type": "solid", "color": background.color}
    if isinstance(background, GradientBackground):
        return {"type": "gradient", "gradient": gradient_to_json(background.gradient)}
    if isinstance(background, ImageBackground):
        return {"type": "image", "image": {"src": background.src, "size": "cover"}}
    raise TypeError(f"Unsupported background: {type(background).__name__}")


def gradient_to_json(gradient: Gradient) -> dict[str, Any]:
    return {
        "type": gradient.type,
        "rotate": gradient.angle,
        "colors": [{"pos": stop.position, "color": stop.color} for stop in gradient.stops],
    }


# ============================================================================
# Elements
# ============================================================================


def element_to_json(element: ElementBase) -> dict[str, Any]:
    """Dispatch on the element variant."""
    if isinstance(element, ShapeElement):
        return _shape_to_json(element)
    if isinstance(element, TextElement):
        return _text_to_json(element)
    if isinstance(element, ImageElement):
        return _image_to_json(element)
    if isinstance(element, LineElement):
        return _line_to_json(element)
    raise TypeError(f"Unsupported element: {type(element).__name__}")


def _box(element: ElementBase) -> dict[str, Any]:
    return {
        "type": element.type,
        "id": element.id,
        "left": element.position.x,
        "top": element.position.y,
        "width": element.size.width,
        "height": element.size.height,
        "rotate": element.rotation,
    }


def _flips(element: ElementBase) -> dict[str, bool]:
    flips = {}
    if element.flip.horizontal:
        flips["flipH"] = True
    if element.flip.vertical:
        flips["flipV"] = True
    return flips


def _decoration(style: Optional[ElementStyle]) -> dict[str, Any]:
    if style is None:
        return {}
    result: dict[str, Any] = {}
    if style.outline is not None:
        result["outline"] = {
            "color": style.outline.color,
            "width": style.outline.width,
            "style": style.outline.style,
        }
    if style.shadow is not None:
        result["shadow"] = style.shadow.model_dump()
    if style.opacity is not None:
        result["opacity"] = style.opacity
    return result


def _shape_to_json(shape: ShapeElement) -> dict[str, Any]:
    result = _box(shape)
    result.update(
        {
            "viewBox": [int(VIEWBOX), int(VIEWBOX)],
            "path": shape.path,
            "fixedRatio": False,
            "fill": shape.fill,
            "shape": shape.shape_type if shape.shape_type != "custom" else "rect",
            "enableShrink": True,
        }
    )
    if shape.gradient is not None:
        result["gradient"] = gradient_to_json(shape.gradient)
    if shape.keypoints:
        result["keypoints"] = list(shape.keypoints)
    result.update(_decoration(shape.style))
    result.update(_flips(shape))
    return result


def _text_to_json(text: TextElement) -> dict[str, Any]:
    result = _box(text)
    result.update(
        {
            "content": text.content,
            "defaultFontName": text.default_font,
            "defaultColor": text.default_color,
            "vertical": text.vertical,
            "valign": text.vertical_align,
            "lineHeight": text.line_height,
            "fit": "resize",
            "enableShrink": True,
        }
    )
    if text.fill:
        result["fill"] = text.fill
    result.update(_decoration(text.style))
    result.update(_flips(text))
    return result


def _image_to_json(image: ImageElement) -> dict[str, Any]:
    result = _box(image)
    result.update({"src": image.src, "fixedRatio": True, "enableShrink": True})
    if image.crop is not None:
        left, top, right, bottom = image.crop
        result["clip"] = {
            "shape": image.shape_type,
            "range": [[left, top], [round(100 - right, 3), round(100 - bottom, 3)]],
        }
    if image.fill_rect is not None:
        left, top, right, bottom = image.fill_rect
        result["stretch"] = {"fillRect": {"left": left, "top": top, "right": right, "bottom": bottom}}
    result.update(_decoration(image.style))
    result.update(_flips(image))
    return result


def line_endpoints(line: LineElement) -> tuple[list[float], list[float]]:
    """Start and end points relative to the line's top-left corner.

    The bounding box corners used depend on the flips: an unflipped line runs
    top-left to bottom-right.
    """
    width, height = line.size.width, line.size.height
    start_x, end_x = (width, 0.0) if line.flip.horizontal else (0.0, width)
    start_y, end_y = (height, 0.0) if line.flip.vertical else (0.0, height)
    return [start_x, start_y], [end_x, end_y]


def _line_to_json(line: LineElement) -> dict[str, Any]:
    start, end = line_endpoints(line)
    result = {
        "type": line.type,
        "id": line.id,
        "left": line.position.x,
        "top": line.position.y,
        "width": line.width,
        "start": start,
        "end": end,
        "style": line.dash,
        "color": line.color,
        "points": [line.start_marker, line.end_marker],
        "rotate": line.rotation,
    }
    # Elbow at the corner shared by the horizontal leg from start and the
    # vertical leg into end.
    elbow = [end[0], start[1]]
    if line.connector == "bent":
        result["broken"] = elbow
    elif line.connector == "curved":
        result["curve"] = elbow
    return result
