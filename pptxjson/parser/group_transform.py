"""Nested group coordinate spaces.

A ``p:grpSp`` places its children in a private coordinate space: ``chOff``
and ``chExt`` describe that space, ``off`` and ``ext`` describe where the
group sits in its parent's space. Children's raw coordinates are mapped with

    (p - child_offset) * (ext / chExt) + offset

and nested groups compose by mapping the inner group's own offset through
the outer transform before multiplying scales.
"""

import math
from dataclasses import dataclass
from typing import Optional

from pptxjson.dsl.schema import GroupTransform, normalize_rotation
from pptxjson.parser.units import angle_to_degrees, parse_number
from pptxjson.parser.xml_node import XmlNode, find_child, find_path, get_attribute


def _flag(value: Optional[str]) -> bool:
    return value in ("1", "true")


def _scale(extent: float, child_extent: float) -> float:
    if child_extent <= 0 or extent < 0:
        return 1.0
    return extent / child_extent


def extract_group_transform(grp_sp: XmlNode) -> GroupTransform:
    """Read a group's own transform from ``grpSpPr/xfrm``.

    A missing ``chOff``/``chExt`` means the child space equals the group's
    placement; a zero child extent keeps scale 1 on that axis.

    XML structure example:
        <p:grpSpPr>
            <a:xfrm rot="0" flipH="0">
                <a:off x="1000" y="1000"/>
                <a:ext cx="4000" cy="2000"/>
                <a:chOff x="0" y="0"/>
                <a:chExt cx="2000" cy="1000"/>
            </a:xfrm>
        </p:grpSpPr>
    """
    xfrm = find_path(grp_sp, "grpSpPr", "xfrm")
    if xfrm is None:
        return GroupTransform()

    def point(name: str, x_attr: str, y_attr: str) -> Optional[tuple[float, float]]:
        node = find_child(xfrm, name)
        if node is None:
            return None
        return (
            parse_number(get_attribute(node, x_attr)) or 0.0,
            parse_number(get_attribute(node, y_attr)) or 0.0,
        )

    off = point("off", "x", "y") or (0.0, 0.0)
    ext = point("ext", "cx", "cy") or (0.0, 0.0)
    ch_off = point("chOff", "x", "y") or off
    ch_ext = point("chExt", "cx", "cy") or ext

    return GroupTransform(
        scale_x=_scale(ext[0], ch_ext[0]),
        scale_y=_scale(ext[1], ch_ext[1]),
        offset_x=off[0],
        offset_y=off[1],
        child_offset_x=ch_off[0],
        child_offset_y=ch_off[1],
        rotation=angle_to_degrees(get_attribute(xfrm, "rot")),
        flip_h=_flag(get_attribute(xfrm, "flipH")),
        flip_v=_flag(get_attribute(xfrm, "flipV")),
    )


def compose(parent: Optional[GroupTransform], child: GroupTransform) -> GroupTransform:
    """Compose a child group's transform with its parent's effective transform.

    The child's placement is mapped through the parent, scales multiply,
    flips combine by XOR and rotations sum. The child's own local origin is
    kept, so the result maps the child's raw coordinates straight to slide
    space.
    """
    if parent is None:
        return child
    offset_x, offset_y = parent.apply(child.offset_x, child.offset_y)
    return GroupTransform(
        scale_x=parent.scale_x * child.scale_x,
        scale_y=parent.scale_y * child.scale_y,
        offset_x=offset_x,
        offset_y=offset_y,
        child_offset_x=child.child_offset_x,
        child_offset_y=child.child_offset_y,
        rotation=normalize_rotation(parent.rotation + child.rotation),
        flip_h=parent.flip_h != child.flip_h,
        flip_v=parent.flip_v != child.flip_v,
    )


@dataclass(frozen=True)
class AffineMatrix:
    """2x3 affine matrix mapping (x, y) to (a*x + c*y + tx, b*x + d*y + ty)."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def identity(cls) -> "AffineMatrix":
        return cls()

    @classmethod
    def scaling(cls, sx: float, sy: float) -> "AffineMatrix":
        return cls(a=sx, d=sy)

    @classmethod
    def translation(cls, tx: float, ty: float) -> "AffineMatrix":
        return cls(tx=tx, ty=ty)

    @classmethod
    def rotation(cls, degrees: float, cx: float = 0.0, cy: float = 0.0) -> "AffineMatrix":
        """Clockwise rotation (y axis points down) about (cx, cy)."""
        rad = math.radians(degrees)
        cos, sin = math.cos(rad), math.sin(rad)
        about_origin = cls(a=cos, b=sin, c=-sin, d=cos)
        return (
            cls.translation(cx, cy)
            .multiply(about_origin)
            .multiply(cls.translation(-cx, -cy))
        )

    @classmethod
    def flipping(cls, flip_h: bool, flip_v: bool, cx: float = 0.0, cy: float = 0.0) -> "AffineMatrix":
        """Mirror about the lines x=cx and/or y=cy."""
        sx = -1.0 if flip_h else 1.0
        sy = -1.0 if flip_v else 1.0
        return cls(a=sx, d=sy, tx=cx - sx * cx, ty=cy - sy * cy)

    def multiply(self, other: "AffineMatrix") -> "AffineMatrix":
        """Return ``self @ other``: apply ``other`` first, then ``self``."""
        return AffineMatrix(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            tx=self.a * other.tx + self.c * other.ty + self.tx,
            ty=self.b * other.tx + self.d * other.ty + self.ty,
        )

    __matmul__ = multiply

    def transform_point(self, x: float, y: float) -> tuple[float, float]:
        return (
            self.a * x + self.c * y + self.tx,
            self.b * x + self.d * y + self.ty,
        )

    def determinant(self) -> float:
        return self.a * self.d - self.b * self.c

    def is_close(self, other: "AffineMatrix", tolerance: float = 1e-6) -> bool:
        return all(
            math.isclose(mine, theirs, abs_tol=tolerance)
            for mine, theirs in (
                (self.a, other.a),
                (self.b, other.b),
                (self.c, other.c),
                (self.d, other.d),
                (self.tx, other.tx),
                (self.ty, other.ty),
            )
        )


def to_matrix(
    transform: GroupTransform,
    center: Optional[tuple[float, float]] = None,
) -> AffineMatrix:
    """Express a group transform as a matrix.

    Order: move the local origin to zero, scale, flip, rotate about
    ``center`` (in parent space), then translate to the group's offset. With
    no rotation and no flip the matrix agrees exactly with
    ``GroupTransform.apply``.
    """
    cx, cy = center if center is not None else (transform.offset_x, transform.offset_y)
    matrix = AffineMatrix.translation(-transform.child_offset_x, -transform.child_offset_y)
    matrix = AffineMatrix.scaling(transform.scale_x, transform.scale_y) @ matrix
    matrix = AffineMatrix.translation(transform.offset_x, transform.offset_y) @ matrix
    if transform.flip_h or transform.flip_v:
        matrix = AffineMatrix.flipping(transform.flip_h, transform.flip_v, cx, cy) @ matrix
    if transform.rotation:
        matrix = AffineMatrix.rotation(transform.rotation, cx, cy) @ matrix
    return matrix
