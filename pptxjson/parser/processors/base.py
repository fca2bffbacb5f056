"""Shared processor interface and shape-tree helpers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from pptxjson.dsl.schema import Element, Flip, Position, Size
from pptxjson.parser.context import ProcessingContext
from pptxjson.parser.units import angle_to_degrees, emu_to_points, parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_path, get_attribute


LINE_PRESETS = ("line", "straightConnector1")

FILL_NAMES = ("solidFill", "gradFill", "pattFill", "blipFill")


@dataclass(frozen=True)
class Geometry:
    """Placement of one node, position already mapped to slide space."""

    position: Position
    size: Size
    rotation: float
    flip: Flip


def extract_geometry(node: XmlNode, context: ProcessingContext) -> Geometry:
    """Read ``spPr/xfrm`` (or ``grpSpPr/xfrm``) and map it through the group transform.

    Size stays in the node's own (group-local) scale; the slide parser applies
    group scaling once the whole group has been processed.
    """
    xfrm = find_path(node, "spPr", "xfrm") or find_path(node, "grpSpPr", "xfrm")
    off = find_child(xfrm, "off")
    ext = find_child(xfrm, "ext")

    x = parse_number(get_attribute(off, "x")) or 0.0
    y = parse_number(get_attribute(off, "y")) or 0.0
    if context.group_transform is not None:
        x, y = context.group_transform.apply(x, y)

    precision = context.options.precision
    return Geometry(
        position=Position(x=emu_to_points(x, precision), y=emu_to_points(y, precision)),
        size=Size(
            width=emu_to_points(parse_number(get_attribute(ext, "cx")) or 0.0, precision),
            height=emu_to_points(parse_number(get_attribute(ext, "cy")) or 0.0, precision),
        ),
        rotation=angle_to_degrees(get_attribute(xfrm, "rot")) % 360.0,
        flip=Flip(
            horizontal=get_attribute(xfrm, "flipH") in ("1", "true"),
            vertical=get_attribute(xfrm, "flipV") in ("1", "true"),
        ),
    )


def non_visual_props(node: XmlNode) -> Optional[XmlNode]:
    """The node's ``cNvPr`` (inside nvSpPr, nvPicPr, nvCxnSpPr or nvGrpSpPr)."""
    for child in node.children:
        if child.local_name.startswith("nv"):
            return find_child(child, "cNvPr")
    return None


def source_id(node: XmlNode) -> Optional[str]:
    return get_attribute(non_visual_props(node), "id")


def source_name(node: XmlNode) -> Optional[str]:
    return get_attribute(non_visual_props(node), "name")


def preset_geometry(node: XmlNode) -> Optional[str]:
    return get_attribute(find_path(node, "spPr", "prstGeom"), "prst")


def is_text_box(node: XmlNode) -> bool:
    nv_sp_pr = find_child(node, "nvSpPr")
    return get_attribute(find_child(nv_sp_pr, "cNvSpPr"), "txBox") in ("1", "true")


def has_blip_fill(node: XmlNode) -> bool:
    return find_path(node, "spPr", "blipFill") is not None or find_child(node, "blipFill") is not None


def has_visible_fill(node: XmlNode) -> bool:
    """True when the shape paints its interior."""
    sp_pr = find_child(node, "spPr")
    if find_child(sp_pr, "noFill") is not None:
        return False
    if any(find_child(sp_pr, name) is not None for name in FILL_NAMES):
        return True
    fill_ref = find_path(node, "style", "fillRef")
    return fill_ref is not None and get_attribute(fill_ref, "idx", "0") != "0"


def has_visible_outline(node: XmlNode) -> bool:
    ln = find_path(node, "spPr", "ln")
    if ln is not None:
        if find_child(ln, "noFill") is not None:
            return False
        if find_child(ln, "solidFill") is not None or find_child(ln, "gradFill") is not None:
            return True
    ln_ref = find_path(node, "style", "lnRef")
    return ln_ref is not None and get_attribute(ln_ref, "idx", "0") != "0"


def has_visible_geometry(node: XmlNode) -> bool:
    return has_visible_fill(node) or has_visible_outline(node)


class ElementProcessor(ABC):
    """Turns one shape-tree node into one or more elements.

    ``can_process`` must be a cheap structural check that no other
    registered processor also answers True for.
    """

    element_type = "element"

    @abstractmethod
    def can_process(self, node: XmlNode) -> bool:
        """Return True if this processor handles ``node``."""

    @abstractmethod
    def process(self, node: XmlNode, context: ProcessingContext) -> list[Element]:
        """Extract the node's elements; an empty list means nothing to draw."""
