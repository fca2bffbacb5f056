"""SVG path data for shape geometry.

Preset geometries (``<a:prstGeom prst="...">``) and custom geometries
(``<a:custGeom><a:pathLst>``) are both expressed in a fixed 200x200 viewBox,
which the editor stretches to the element's size.
"""

import math
from typing import Optional

from pptxjson.parser.units import angle_to_degrees, parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_children, get_attribute


VIEWBOX = 200.0

RECT_PATH = "M 0 0 L 200 0 L 200 200 L 0 200 Z"


def _fmt(value: float) -> str:
    """Compact number: at most two decimals, no trailing zeros."""
    value = round(value, 2)
    if value == 0:
        value = 0.0
    return f"{value:g}"


def _polygon(points: list[tuple[float, float]]) -> str:
    head, *rest = points
    parts = [f"M {_fmt(head[0])} {_fmt(head[1])}"]
    parts.extend(f"L {_fmt(x)} {_fmt(y)}" for x, y in rest)
    parts.append("Z")
    return " ".join(parts)


def _regular_polygon(sides: int, inner_ratio: Optional[float] = None) -> str:
    """Polygon (or star, with ``inner_ratio``) inscribed in the viewBox, apex up."""
    radius = VIEWBOX / 2
    step = math.pi / sides if inner_ratio is not None else 2 * math.pi / sides
    count = sides * 2 if inner_ratio is not None else sides
    points = []
    for index in range(count):
        r = radius * inner_ratio if inner_ratio is not None and index % 2 else radius
        angle = -math.pi / 2 + index * step
        points.append((radius + r * math.cos(angle), radius + r * math.sin(angle)))
    return _polygon(points)


def _round_rect(adj: float) -> str:
    r = VIEWBOX * min(0.5, max(0.0, adj))
    if r == 0:
        return RECT_PATH
    far = VIEWBOX - r
    return (
        f"M {_fmt(r)} 0 L {_fmt(far)} 0 Q 200 0 200 {_fmt(r)} "
        f"L 200 {_fmt(far)} Q 200 200 {_fmt(far)} 200 "
        f"L {_fmt(r)} 200 Q 0 200 0 {_fmt(far)} "
        f"L 0 {_fmt(r)} Q 0 0 {_fmt(r)} 0 Z"
    )


PRESET_PATHS = {
    "rect": RECT_PATH,
    "ellipse": "M 100 0 A 100 100 0 1 1 100 200 A 100 100 0 1 1 100 0 Z",
    "triangle": "M 100 0 L 200 200 L 0 200 Z",
    "rtTriangle": "M 0 0 L 200 200 L 0 200 Z",
    "diamond": "M 100 0 L 200 100 L 100 200 L 0 100 Z",
    "parallelogram": "M 50 0 L 200 0 L 150 200 L 0 200 Z",
    "trapezoid": "M 50 0 L 150 0 L 200 200 L 0 200 Z",
    "pentagon": _regular_polygon(5),
    "hexagon": "M 50 0 L 150 0 L 200 100 L 150 200 L 50 200 L 0 100 Z",
    "octagon": "M 58.58 0 L 141.42 0 L 200 58.58 L 200 141.42 L 141.42 200 L 58.58 200 L 0 141.42 L 0 58.58 Z",
    "star5": _regular_polygon(5, inner_ratio=0.382),
    "rightArrow": "M 0 50 L 100 50 L 100 0 L 200 100 L 100 200 L 100 150 L 0 150 Z",
    "leftArrow": "M 200 50 L 100 50 L 100 0 L 0 100 L 100 200 L 100 150 L 200 150 Z",
    "upArrow": "M 50 200 L 50 100 L 0 100 L 100 0 L 200 100 L 150 100 L 150 200 Z",
    "downArrow": "M 50 0 L 50 100 L 0 100 L 100 200 L 200 100 L 150 100 L 150 0 Z",
    "chevron": "M 0 0 L 150 0 L 200 100 L 150 200 L 0 200 L 50 100 Z",
    "homePlate": "M 0 0 L 150 0 L 200 100 L 150 200 L 0 200 Z",
}

# roundRect corner radius when the shape declares no adjustment
DEFAULT_ROUND_RECT_ADJ = 0.16667


def preset_path(prst: Optional[str], adjustments: Optional[dict[str, float]] = None) -> str:
    """SVG path for a preset geometry; unknown presets fall back to a rect."""
    if prst == "roundRect":
        adj = (adjustments or {}).get("adj", DEFAULT_ROUND_RECT_ADJ)
        return _round_rect(adj)
    return PRESET_PATHS.get(prst or "", RECT_PATH)


def is_supported_preset(prst: Optional[str]) -> bool:
    return prst == "roundRect" or prst in PRESET_PATHS


def extract_adjustments(prst_geom: Optional[XmlNode]) -> dict[str, float]:
    """Read ``<a:avLst><a:gd name="adj" fmla="val 16667"/>`` as fractions."""
    values: dict[str, float] = {}
    for gd in find_children(find_child(prst_geom, "avLst"), "gd"):
        name = get_attribute(gd, "name")
        formula = (get_attribute(gd, "fmla") or "").split()
        if name and len(formula) == 2 and formula[0] == "val":
            number = parse_number(formula[1])
            if number is not None:
                values[name] = number / 100000.0
    return values


class PathParser:
    """Converts ``a:custGeom`` path lists to SVG path data."""

    def extract_svg_path(
        self,
        cust_geom: Optional[XmlNode],
        shape_width: float = 0.0,
        shape_height: float = 0.0,
    ) -> Optional[str]:
        """Convert every ``a:path`` in a custom geometry into one SVG path.

        Args:
            cust_geom: The ``<a:custGeom>`` node.
            shape_width: Shape width in EMUs, used when a path omits ``w``.
            shape_height: Shape height in EMUs, used when a path omits ``h``.

        Returns:
            Path data scaled to the 200x200 viewBox, or None when the
            geometry has no drawable commands.
        """
        path_lst = find_child(cust_geom, "pathLst")
        if path_lst is None:
            return None

        segments: list[str] = []
        for path_elem in find_children(path_lst, "path"):
            segments.extend(self._parse_path_element(path_elem, shape_width, shape_height))

        return " ".join(segments) if segments else None

    def _parse_path_element(
        self,
        path_elem: XmlNode,
        shape_width: float,
        shape_height: float,
    ) -> list[str]:
        """Parse a single <a:path> element into SVG commands."""
        path_width = parse_number(get_attribute(path_elem, "w")) or shape_width
        path_height = parse_number(get_attribute(path_elem, "h")) or shape_height

        scale_x = VIEWBOX / path_width if path_width > 0 else 1.0
        scale_y = VIEWBOX / path_height if path_height > 0 else 1.0

        commands: list[str] = []
        current = (0.0, 0.0)
        for child in path_elem.children:
            command, current = self._parse_command(child, scale_x, scale_y, current)
            if command:
                commands.append(command)
        return commands

    def _parse_command(
        self,
        elem: XmlNode,
        scale_x: float,
        scale_y: float,
        current: tuple[float, float],
    ) -> tuple[Optional[str], tuple[float, float]]:
        """Parse one path command, returning (svg, new current point)."""
        tag = elem.local_name
        points = [self._point(pt, scale_x, scale_y) for pt in find_children(elem, "pt")]

        if tag == "moveTo" and points:
            return f"M {_fmt(points[0][0])} {_fmt(points[0][1])}", points[0]
        elif tag == "lnTo" and points:
            return f"L {_fmt(points[0][0])} {_fmt(points[0][1])}", points[0]
        elif tag == "cubicBezTo" and len(points) >= 3:
            coords = " ".join(f"{_fmt(x)} {_fmt(y)}" for x, y in points[:3])
            return f"C {coords}", points[2]
        elif tag == "quadBezTo" and len(points) >= 2:
            coords = " ".join(f"{_fmt(x)} {_fmt(y)}" for x, y in points[:2])
            return f"Q {coords}", points[1]
        elif tag == "arcTo":
            return self._parse_arc_to(elem, scale_x, scale_y, current)
        elif tag == "close":
            return "Z", current

        return None, current

    def _point(self, pt: XmlNode, scale_x: float, scale_y: float) -> tuple[float, float]:
        return (
            (parse_number(get_attribute(pt, "x")) or 0.0) * scale_x,
            (parse_number(get_attribute(pt, "y")) or 0.0) * scale_y,
        )

    def _parse_arc_to(
        self,
        elem: XmlNode,
        scale_x: float,
        scale_y: float,
        current: tuple[float, float],
    ) -> tuple[Optional[str], tuple[float, float]]:
        """Convert an arc given by radii and angles into an SVG endpoint arc.

        XML structure:
        <a:arcTo wR="100000" hR="50000" stAng="0" swAng="5400000"/>

        The arc starts at the current point, which sits at ``stAng`` on the
        ellipse; the end point is found by sweeping ``swAng`` from there.
        """
        rx = (parse_number(get_attribute(elem, "wR")) or 0.0) * scale_x
        ry = (parse_number(get_attribute(elem, "hR")) or 0.0) * scale_y
        start = math.radians(angle_to_degrees(get_attribute(elem, "stAng")))
        swing_degrees = angle_to_degrees(get_attribute(elem, "swAng"))
        end = start + math.radians(swing_degrees)

        if rx <= 0 or ry <= 0 or swing_degrees == 0:
            return None, current

        center_x = current[0] - rx * math.cos(start)
        center_y = current[1] - ry * math.sin(start)
        end_point = (center_x + rx * math.cos(end), center_y + ry * math.sin(end))

        large_arc = 1 if abs(swing_degrees) > 180 else 0
        sweep = 1 if swing_degrees > 0 else 0
        command = (
            f"A {_fmt(rx)} {_fmt(ry)} 0 {large_arc} {sweep} "
            f"{_fmt(end_point[0])} {_fmt(end_point[1])}"
        )
        return command, end_point
