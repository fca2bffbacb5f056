"""Extract outline, shadow and line-end styles from shape properties."""

import math
from typing import Optional

from pptxjson.dsl.schema import Outline, Shadow, Theme
from pptxjson.parser.fill_extractor import FillExtractor
from pptxjson.parser.units import angle_to_degrees, emu_to_points, parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_path, get_attribute


DEFAULT_SHADOW_COLOR = "rgba(0,0,0,0.5)"

# Map prstDash values to the editor's three stroke styles
DASH_STYLE_MAP = {
    "solid": "solid",
    "dot": "dotted",
    "sysDot": "dotted",
    "dash": "dashed",
    "lgDash": "dashed",
    "sysDash": "dashed",
    "dashDot": "dashed",
    "lgDashDot": "dashed",
    "lgDashDotDot": "dashed",
    "sysDashDot": "dashed",
    "sysDashDotDot": "dashed",
}

# Map headEnd/tailEnd types to line end markers
LINE_END_MAP = {
    "triangle": "arrow",
    "arrow": "arrow",
    "stealth": "arrow",
    "oval": "dot",
    "diamond": "dot",
}


class StyleExtractor:
    """Extracts stroke and effect styles from PPTX shape XML."""

    def __init__(self, fill_extractor: Optional[FillExtractor] = None):
        self.fill_extractor = fill_extractor or FillExtractor()

    def extract_outline(
        self,
        sp_pr: Optional[XmlNode],
        theme: Optional[Theme] = None,
        style: Optional[XmlNode] = None,
        precision: int = 2,
    ) -> Optional[Outline]:
        """Extract the stroke of a shape.

        Args:
            sp_pr: The shape's ``spPr`` node.
            theme: Theme for scheme color resolution.
            style: The shape's ``p:style`` node, consulted for ``lnRef``.
            precision: Decimal digits kept on the width.

        Returns:
            Outline, or None when the shape has no visible stroke.

        XML structure example:
            <a:ln w="12700">
                <a:solidFill><a:srgbClr val="FF0000"/></a:solidFill>
                <a:prstDash val="dash"/>
            </a:ln>
        """
        ln = find_child(sp_pr, "ln")
        if ln is not None and find_child(ln, "noFill") is not None:
            return None

        color = ""
        if ln is not None:
            color = self.fill_extractor.get_solid_fill(find_child(ln, "solidFill"), theme)
            if not color:
                gradient = self.fill_extractor.get_gradient_fill(find_child(ln, "gradFill"), theme)
                color = gradient.stops[0].color if gradient else ""

        ln_ref = find_child(style, "lnRef")
        if not color and ln_ref is not None and get_attribute(ln_ref, "idx", "0") != "0":
            color = self.fill_extractor.get_solid_fill(ln_ref, theme)

        if not color:
            return None

        width = emu_to_points(parse_number(get_attribute(ln, "w")) or 12700, precision)
        return Outline(color=color, width=width, style=self.extract_dash(ln))

    def extract_dash(self, ln: Optional[XmlNode]) -> str:
        dash = get_attribute(find_child(ln, "prstDash"), "val")
        return DASH_STYLE_MAP.get(dash or "solid", "solid")

    def extract_shadow(
        self,
        sp_pr: Optional[XmlNode],
        theme: Optional[Theme] = None,
        precision: int = 2,
    ) -> Optional[Shadow]:
        """Extract an outer shadow from ``spPr/effectLst/outerShdw``.

        Distance and direction are converted to horizontal/vertical offsets.

        XML structure example:
            <a:effectLst>
                <a:outerShdw blurRad="50800" dist="38100" dir="2700000">
                    <a:srgbClr val="000000"><a:alpha val="40000"/></a:srgbClr>
                </a:outerShdw>
            </a:effectLst>
        """
        shadow = find_path(sp_pr, "effectLst", "outerShdw")
        if shadow is None:
            return None

        distance = emu_to_points(parse_number(get_attribute(shadow, "dist")) or 0.0, 4)
        direction = math.radians(angle_to_degrees(get_attribute(shadow, "dir")))
        blur = emu_to_points(parse_number(get_attribute(shadow, "blurRad")) or 0.0, precision)
        color = self.fill_extractor.get_solid_fill(shadow, theme) or DEFAULT_SHADOW_COLOR

        return Shadow(
            h=round(distance * math.cos(direction), precision) + 0.0,
            v=round(distance * math.sin(direction), precision) + 0.0,
            blur=blur,
            color=color,
        )

    def extract_line_ends(self, ln: Optional[XmlNode]) -> tuple[str, str]:
        """Map ``headEnd``/``tailEnd`` to (start, end) markers."""
        head = get_attribute(find_child(ln, "headEnd"), "type") or "none"
        tail = get_attribute(find_child(ln, "tailEnd"), "type") or "none"
        return LINE_END_MAP.get(head, ""), LINE_END_MAP.get(tail, "")
