"""Color normalization and DrawingML color transforms.

Every function here is total: whatever it is given, it returns a canonical
``rgba(r,g,b,a)`` string (no spaces, integer channels, alpha in [0, 1] with
at most three decimals). Nothing in this module raises.
"""

import colorsys
import math
import re
from typing import Optional


RGBA = tuple[int, int, int, float]

OPAQUE_BLACK: RGBA = (0, 0, 0, 1.0)
TRANSPARENT: RGBA = (0, 0, 0, 0.0)

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_PATTERN = re.compile(r"^rgba?\(([^()]*)\)$", re.IGNORECASE)

# OOXML ST_PresetColorVal names
PRESET_COLORS = {
    "aliceBlue": "#F0F8FF",
    "antiqueWhite": "#FAEBD7",
    "aqua": "#00FFFF",
    "aquamarine": "#7FFFD4",
    "azure": "#F0FFFF",
    "beige": "#F5F5DC",
    "bisque": "#FFE4C4",
    "black": "#000000",
    "blanchedAlmond": "#FFEBCD",
    "blue": "#0000FF",
    "blueViolet": "#8A2BE2",
    "brown": "#A52A2A",
    "burlyWood": "#DEB887",
    "cadetBlue": "#5F9EA0",
    "chartreuse": "#7FFF00",
    "chocolate": "#D2691E",
    "coral": "#FF7F50",
    "cornflowerBlue": "#6495ED",
    "cornsilk": "#FFF8DC",
    "crimson": "#DC143C",
    "cyan": "#00FFFF",
    "dkBlue": "#00008B",
    "dkCyan": "#008B8B",
    "dkGoldenrod": "#B8860B",
    "dkGray": "#A9A9A9",
    "dkGreen": "#006400",
    "dkKhaki": "#BDB76B",
    "dkMagenta": "#8B008B",
    "dkOliveGreen": "#556B2F",
    "dkOrange": "#FF8C00",
    "dkOrchid": "#9932CC",
    "dkRed": "#8B0000",
    "dkSalmon": "#E9967A",
    "dkSeaGreen": "#8FBC8F",
    "dkSlateBlue": "#483D8B",
    "dkSlateGray": "#2F4F4F",
    "dkTurquoise": "#00CED1",
    "dkViolet": "#9400D3",
    "deepPink": "#FF1493",
    "deepSkyBlue": "#00BFFF",
    "dimGray": "#696969",
    "dodgerBlue": "#1E90FF",
    "firebrick": "#B22222",
    "floralWhite": "#FFFAF0",
    "forestGreen": "#228B22",
    "fuchsia": "#FF00FF",
    "gainsboro": "#DCDCDC",
    "ghostWhite": "#F8F8FF",
    "gold": "#FFD700",
    "goldenrod": "#DAA520",
    "gray": "#808080",
    "green": "#008000",
    "greenYellow": "#ADFF2F",
    "honeydew": "#F0FFF0",
    "hotPink": "#FF69B4",
    "indianRed": "#CD5C5C",
    "indigo": "#4B0082",
    "ivory": "#FFFFF0",
    "khaki": "#F0E68C",
    "lavender": "#E6E6FA",
    "lavenderBlush": "#FFF0F5",
    "lawnGreen": "#7CFC00",
    "lemonChiffon": "#FFFACD",
    "ltBlue": "#ADD8E6",
    "ltCoral": "#F08080",
    "ltCyan": "#E0FFFF",
    "ltGoldenrodYellow": "#FAFAD2",
    "ltGray": "#D3D3D3",
    "ltGreen": "#90EE90",
    "ltPink": "#FFB6C1",
    "ltSalmon": "#FFA07A",
    "ltSeaGreen": "#20B2AA",
    "ltSkyBlue": "#87CEFA",
    "ltSlateGray": "#778899",
    "ltSteelBlue": "#B0C4DE",
    "ltYellow": "#FFFFE0",
    "lime": "#00FF00",
    "limeGreen": "#32CD32",
    "linen": "#FAF0E6",
    "magenta": "#FF00FF",
    "maroon": "#800000",
    "medAquamarine": "#66CDAA",
    "medBlue": "#0000CD",
    "medOrchid": "#BA55D3",
    "medPurple": "#9370DB",
    "medSeaGreen": "#3CB371",
    "medSlateBlue": "#7B68EE",
    "medSpringGreen": "#00FA9A",
    "medTurquoise": "#48D1CC",
    "medVioletRed": "#C71585",
    "midnightBlue": "#191970",
    "mintCream": "#F5FFFA",
    "mistyRose": "#FFE4E1",
    "moccasin": "#FFE4B5",
    "navajoWhite": "#FFDEAD",
    "navy": "#000080",
    "oldLace": "#FDF5E6",
    "olive": "#808000",
    "oliveDrab": "#6B8E23",
    "orange": "#FFA500",
    "orangeRed": "#FF4500",
    "orchid": "#DA70D6",
    "paleGoldenrod": "#EEE8AA",
    "paleGreen": "#98FB98",
    "paleTurquoise": "#AFEEEE",
    "paleVioletRed": "#DB7093",
    "papayaWhip": "#FFEFD5",
    "peachPuff": "#FFDAB9",
    "peru": "#CD853F",
    "pink": "#FFC0CB",
    "plum": "#DDA0DD",
    "powderBlue": "#B0E0E6",
    "purple": "#800080",
    "red": "#FF0000",
    "rosyBrown": "#BC8F8F",
    "royalBlue": "#4169E1",
    "saddleBrown": "#8B4513",
    "salmon": "#FA8072",
    "sandyBrown": "#F4A460",
    "seaGreen": "#2E8B57",
    "seaShell": "#FFF5EE",
    "sienna": "#A0522D",
    "silver": "#C0C0C0",
    "skyBlue": "#87CEEB",
    "slateBlue": "#6A5ACD",
    "slateGray": "#708090",
    "snow": "#FFFAFA",
    "springGreen": "#00FF7F",
    "steelBlue": "#4682B4",
    "tan": "#D2B48C",
    "teal": "#008080",
    "thistle": "#D8BFD8",
    "tomato": "#FF6347",
    "turquoise": "#40E0D0",
    "violet": "#EE82EE",
    "wheat": "#F5DEB3",
    "white": "#FFFFFF",
    "whiteSmoke": "#F5F5F5",
    "yellow": "#FFFF00",
    "yellowGreen": "#9ACD32",
}

# OOXML ST_SystemColorVal names, used when a sysClr has no lastClr
SYSTEM_COLORS = {
    "windowText": "#000000",
    "window": "#FFFFFF",
    "highlight": "#0078D7",
    "highlightText": "#FFFFFF",
    "btnFace": "#F0F0F0",
    "btnText": "#000000",
    "3dDkShadow": "#696969",
    "3dLight": "#E3E3E3",
    "infoText": "#000000",
    "infoBk": "#FFFFE1",
    "grayText": "#6D6D6D",
    "menu": "#F0F0F0",
    "menuText": "#000000",
}


def _clamp_channel(value: float) -> int:
    return int(min(255, max(0, round(value))))


def _clamp_alpha(value: float) -> float:
    return min(1.0, max(0.0, value))


def _parse_component(text: str, full: float) -> Optional[float]:
    """Read one rgb() argument; a percentage is taken as a share of ``full``."""
    text = text.strip()
    percent = text.endswith("%")
    if percent:
        text = text[:-1]
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number * full / 100.0 if percent else number


def parse_color(value: Optional[str]) -> RGBA:
    """Parse any color string into an (r, g, b, a) tuple, never failing."""
    if not isinstance(value, str):
        return OPAQUE_BLACK
    text = value.strip()
    if not text:
        return OPAQUE_BLACK
    if text.lower() in ("none", "transparent"):
        return TRANSPARENT

    match = _HEX_PATTERN.match(text)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(c * 2 for c in digits)
        r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        alpha = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
        return (r, g, b, round(alpha, 3))

    match = _FUNC_PATTERN.match(text)
    if match:
        args = match.group(1).split(",")
        parts = [_parse_component(arg, 1.0 if index == 3 else 255.0) for index, arg in enumerate(args)]
        if len(parts) not in (3, 4) or any(p is None for p in parts):
            return OPAQUE_BLACK
        alpha = parts[3] if len(parts) == 4 else 1.0
        return (
            _clamp_channel(parts[0]),
            _clamp_channel(parts[1]),
            _clamp_channel(parts[2]),
            _clamp_alpha(alpha),
        )

    return OPAQUE_BLACK


def format_alpha(alpha: float) -> str:
    """Render alpha as ``1``, ``0`` or up to three trimmed decimals."""
    alpha = _clamp_alpha(alpha)
    text = f"{alpha:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def format_rgba(r: float, g: float, b: float, a: float = 1.0) -> str:
    """Format channels as a canonical rgba() string, clamping as needed."""
    return (
        f"rgba({_clamp_channel(r)},{_clamp_channel(g)},{_clamp_channel(b)},"
        f"{format_alpha(a)})"
    )


def to_rgba(value: Optional[str]) -> str:
    """Normalize any color string to canonical ``rgba(r,g,b,a)``.

    Args:
        value: Hex (``#RGB``, ``#RGBA``, ``#RRGGBB``, ``#RRGGBBAA``, with or without the
            hash), ``rgb()``, ``rgba()``, ``none``/``transparent``, or anything
            else.

    Returns:
        Canonical rgba string. Unparseable input yields opaque black.

    Examples:
        >>> to_rgba("#F00")
        'rgba(255,0,0,1)'
        >>> to_rgba("rgba(100,100,100)")
        'rgba(100,100,100,1)'
    """
    return format_rgba(*parse_color(value))


def to_hex(value: Optional[str]) -> str:
    """Render a color as ``#RRGGBB``, dropping alpha."""
    r, g, b, _ = parse_color(value)
    return f"#{r:02X}{g:02X}{b:02X}"


def hsl_to_rgb(h: float, s: float, l: float) -> tuple[int, int, int]:
    """Convert HSL to 0-255 RGB channels.

    Args:
        h: Hue in degrees (any value, wrapped to [0, 360)).
        s: Saturation as a fraction (clamped to [0, 1]).
        l: Lightness as a fraction (clamped to [0, 1]).
    """
    hue = (h % 360.0) / 360.0 if math.isfinite(h) else 0.0
    sat = min(1.0, max(0.0, s)) if math.isfinite(s) else 0.0
    lum = min(1.0, max(0.0, l)) if math.isfinite(l) else 0.0
    r, g, b = colorsys.hls_to_rgb(hue, lum, sat)
    return _clamp_channel(r * 255), _clamp_channel(g * 255), _clamp_channel(b * 255)


def _to_hls(color: str) -> tuple[float, float, float, float]:
    r, g, b, a = parse_color(color)
    h, l, s = colorsys.rgb_to_hls(r / 255.0, g / 255.0, b / 255.0)
    return h, l, s, a


def _from_hls(h: float, l: float, s: float, a: float) -> str:
    r, g, b = colorsys.hls_to_rgb(h % 1.0, min(1.0, max(0.0, l)), min(1.0, max(0.0, s)))
    return format_rgba(r * 255, g * 255, b * 255, a)


def _safe_factor(factor: float, default: float = 1.0) -> float:
    try:
        factor = float(factor)
    except (TypeError, ValueError):
        return default
    return factor if math.isfinite(factor) else default


def apply_tint(color: str, factor: float) -> str:
    """Blend toward white; ``factor`` is the share of the original color kept."""
    factor = min(1.0, max(0.0, _safe_factor(factor)))
    r, g, b, a = parse_color(color)
    return format_rgba(
        r + (255 - r) * (1 - factor),
        g + (255 - g) * (1 - factor),
        b + (255 - b) * (1 - factor),
        a,
    )


def apply_shade(color: str, factor: float) -> str:
    """Blend toward black; ``factor`` is the share of the original color kept."""
    factor = min(1.0, max(0.0, _safe_factor(factor)))
    r, g, b, a = parse_color(color)
    return format_rgba(r * factor, g * factor, b * factor, a)


def apply_alpha(color: str, factor: float) -> str:
    """Replace the alpha channel with ``factor``."""
    r, g, b, _ = parse_color(color)
    return format_rgba(r, g, b, _safe_factor(factor))


def apply_lum_mod(color: str, factor: float) -> str:
    """Multiply HSL lightness by ``factor``."""
    h, l, s, a = _to_hls(color)
    return _from_hls(h, l * _safe_factor(factor), s, a)


def apply_lum_off(color: str, offset: float) -> str:
    """Add ``offset`` to HSL lightness."""
    h, l, s, a = _to_hls(color)
    return _from_hls(h, l + _safe_factor(offset, 0.0), s, a)


def apply_sat_mod(color: str, factor: float) -> str:
    """Multiply HSL saturation by ``factor``."""
    h, l, s, a = _to_hls(color)
    return _from_hls(h, l, s * _safe_factor(factor), a)


def apply_hue_mod(color: str, factor: float) -> str:
    """Multiply hue by ``factor``."""
    h, l, s, a = _to_hls(color)
    return _from_hls(h * _safe_factor(factor), l, s, a)


def is_transparent(color: Optional[str]) -> bool:
    """True when the color has zero alpha."""
    return parse_color(color)[3] == 0.0
