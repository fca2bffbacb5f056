"""Resolve DrawingML fill descriptions to canonical colors.

A color can be written six ways in DrawingML. FillExtractor resolves them in
a fixed precedence, applies any child color modifiers (tint, shade, alpha,
luminance and saturation tweaks), and always returns a canonical
``rgba(r,g,b,a)`` string or ``""`` when nothing is resolvable.
"""

from typing import Callable, Optional

from pptxjson.dsl.schema import ColorScheme, Gradient, GradientStop, Theme
from pptxjson.parser import colors
from pptxjson.parser.units import angle_to_degrees, parse_number, percentage_to_fraction
from pptxjson.parser.xml_node import XmlNode, find_child, find_children, get_attribute


# Resolution order for a fill's color child
COLOR_NODE_NAMES = ("srgbClr", "scrgbClr", "hslClr", "prstClr", "schemeClr", "sysClr")

# Text/background aliases used by shapes, mapped onto theme slots
SCHEME_ALIASES = {
    "tx1": "dk1",
    "tx2": "dk2",
    "bg1": "lt1",
    "bg2": "lt2",
}

_MODIFIERS: dict[str, Callable[[str, float], str]] = {
    "alpha": colors.apply_alpha,
    "lumMod": colors.apply_lum_mod,
    "lumOff": colors.apply_lum_off,
    "satMod": colors.apply_sat_mod,
    "hueMod": colors.apply_hue_mod,
    "tint": colors.apply_tint,
    "shade": colors.apply_shade,
}

NO_FILL = "rgba(0,0,0,0)"


class FillExtractor:
    """Extracts colors and gradients from fill XML nodes."""

    def get_solid_fill(
        self,
        fill_node: Optional[XmlNode],
        theme: Optional[Theme] = None,
        placeholder_color: Optional[str] = None,
    ) -> str:
        """Resolve the color held by a fill node.

        Args:
            fill_node: A ``solidFill`` (or any node holding a color child, such
                as ``gs`` or ``fillRef``), or the color node itself.
            theme: Theme used for ``schemeClr`` lookups; slot defaults apply
                when absent.
            placeholder_color: Color substituted for ``schemeClr val="phClr"``.

        Returns:
            Canonical rgba string, or ``""`` when no color is resolvable.

        XML structure example:
            <a:solidFill>
                <a:schemeClr val="accent1">
                    <a:lumMod val="75000"/>
                </a:schemeClr>
            </a:solidFill>
        """
        if fill_node is None:
            return ""

        if fill_node.local_name in COLOR_NODE_NAMES:
            candidates: tuple[XmlNode, ...] = (fill_node,)
        else:
            candidates = fill_node.children

        for kind in COLOR_NODE_NAMES:
            for node in candidates:
                if node.local_name != kind:
                    continue
                base = self._resolve_base_color(node, theme, placeholder_color)
                if base:
                    return self.apply_modifiers(base, node)
        return ""

    def get_fill_color(
        self,
        sp_pr: Optional[XmlNode],
        theme: Optional[Theme] = None,
        style: Optional[XmlNode] = None,
    ) -> str:
        """Resolve the solid fill of a shape's ``spPr``.

        Falls back to the shape style's ``fillRef`` when spPr declares no
        fill. ``noFill`` resolves to fully transparent.
        """
        if sp_pr is not None:
            if find_child(sp_pr, "noFill") is not None:
                return NO_FILL
            solid = find_child(sp_pr, "solidFill")
            if solid is not None:
                return self.get_solid_fill(solid, theme)
            if find_child(sp_pr, "gradFill") is not None:
                return ""
            pattern = find_child(sp_pr, "pattFill")
            if pattern is not None:
                return self.get_solid_fill(find_child(pattern, "fgClr"), theme)

        fill_ref = find_child(style, "fillRef")
        if fill_ref is not None and get_attribute(fill_ref, "idx", "0") != "0":
            return self.get_solid_fill(fill_ref, theme)
        return ""

    def get_gradient_fill(
        self,
        grad_fill: Optional[XmlNode],
        theme: Optional[Theme] = None,
    ) -> Optional[Gradient]:
        """Extract a gradient with its stops sorted ascending by position.

        XML structure example:
            <a:gradFill rotWithShape="1">
                <a:gsLst>
                    <a:gs pos="0"><a:srgbClr val="FFFFFF"/></a:gs>
                    <a:gs pos="100000"><a:schemeClr val="accent1"/></a:gs>
                </a:gsLst>
                <a:lin ang="5400000" scaled="0"/>
            </a:gradFill>
        """
        if grad_fill is None:
            return None

        stops: list[GradientStop] = []
        for gs in find_children(find_child(grad_fill, "gsLst"), "gs"):
            color = self.get_solid_fill(gs, theme)
            if not color:
                continue
            position = min(1.0, max(0.0, percentage_to_fraction(get_attribute(gs, "pos"))))
            stops.append(GradientStop(position=position, color=color))

        if not stops:
            return None

        stops.sort(key=lambda stop: stop.position)

        lin = find_child(grad_fill, "lin")
        gradient_type = "radial" if find_child(grad_fill, "path") is not None else "linear"
        angle = angle_to_degrees(get_attribute(lin, "ang")) if lin is not None else 0.0
        return Gradient(type=gradient_type, angle=angle, stops=stops)

    def apply_modifiers(self, color: str, color_node: XmlNode) -> str:
        """Apply a color node's modifier children in document order."""
        for child in color_node.children:
            modifier = _MODIFIERS.get(child.local_name)
            if modifier is None:
                continue
            value = get_attribute(child, "val")
            if value is None:
                continue
            color = modifier(color, percentage_to_fraction(value))
        return color

    def resolve_scheme_color(self, slot: str, theme: Optional[Theme] = None) -> Optional[str]:
        """Look up a scheme slot (aliases included) as a canonical color."""
        scheme = theme.colors if theme is not None else ColorScheme()
        hex_value = scheme.get(SCHEME_ALIASES.get(slot, slot))
        return colors.to_rgba(hex_value) if hex_value else None

    def _resolve_base_color(
        self,
        node: XmlNode,
        theme: Optional[Theme],
        placeholder_color: Optional[str],
    ) -> Optional[str]:
        """Resolve a color node before modifiers, or None."""
        kind = node.local_name
        val = get_attribute(node, "val")

        if kind == "srgbClr":
            return colors.to_rgba(f"#{val}") if val and _is_hex(val) else None

        if kind == "scrgbClr":
            channels = [
                percentage_to_fraction(get_attribute(node, name), default=0.0) * 255
                for name in ("r", "g", "b")
            ]
            return colors.format_rgba(*channels)

        if kind == "hslClr":
            hue = parse_number(get_attribute(node, "hue")) or 0.0
            r, g, b = colors.hsl_to_rgb(
                hue / 60000.0,
                percentage_to_fraction(get_attribute(node, "sat")),
                percentage_to_fraction(get_attribute(node, "lum")),
            )
            return colors.format_rgba(r, g, b)

        if kind == "prstClr":
            hex_value = colors.PRESET_COLORS.get(val or "")
            return colors.to_rgba(hex_value) if hex_value else None

        if kind == "schemeClr":
            if val == "phClr":
                return colors.to_rgba(placeholder_color) if placeholder_color else None
            return self.resolve_scheme_color(val or "", theme)

        if kind == "sysClr":
            last = get_attribute(node, "lastClr")
            if last and _is_hex(last):
                return colors.to_rgba(f"#{last}")
            hex_value = colors.SYSTEM_COLORS.get(val or "")
            return colors.to_rgba(hex_value) if hex_value else None

        return None


def _is_hex(value: str) -> bool:
    return len(value) in (3, 6, 8) and all(c in "0123456789abcdefABCDEF" for c in value)
