"""Unit conversion for OOXML measurements.

Lengths in the package are EMUs (English Metric Units). Everything the engine
emits is in points, using python-pptx's definition of a point as the single
scale constant: 1 pt = 12700 EMU.
"""

import math
from typing import Optional, Union

from pptx.util import Pt


EMU_PER_POINT = int(Pt(1))
ANGLE_UNITS_PER_DEGREE = 60000
PERCENTAGE_UNITS = 100000

Number = Union[int, float]


def emu_to_points(value: Optional[Number], precision: int = 2) -> float:
    """Convert EMUs to points rounded to ``precision`` decimals.

    Args:
        value: Length in EMUs. None and non-finite values convert to 0.0.
        precision: Decimal digits to keep.

    Returns:
        Length in points.
    """
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return round(value / EMU_PER_POINT, precision)


def points_to_emu(points: Number) -> int:
    """Convert points back to whole EMUs."""
    return int(round(float(points) * EMU_PER_POINT))


def angle_to_degrees(value: Optional[str]) -> float:
    """Convert an OOXML angle attribute (60000ths of a degree) to degrees."""
    number = parse_number(value)
    return number / ANGLE_UNITS_PER_DEGREE if number is not None else 0.0


def percentage_to_fraction(value: Optional[str], default: float = 0.0) -> float:
    """Convert an OOXML percentage attribute (100000ths) to a fraction.

    ``val="50000"`` is 0.5. Some producers write ``val="50%"``; that form is
    accepted too.
    """
    if value is None:
        return default
    text = value.strip()
    if text.endswith("%"):
        number = parse_number(text[:-1])
        return number / 100.0 if number is not None else default
    number = parse_number(text)
    return number / PERCENTAGE_UNITS if number is not None else default


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse a numeric attribute; None when absent or malformed."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Optional[str], default: int = 0) -> int:
    """Parse an integer attribute with a default."""
    number = parse_number(value)
    return int(number) if number is not None else default
