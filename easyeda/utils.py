"""Utility functions for EasyEDA to KiCad conversion.

Handles unit conversion, angle normalization and coordinate transforms.
"""

import math
from typing import Optional

from .pcb_model import Point, Transform

# EasyEDA stores lengths in units of 10 mil
UNIT_SCALE = 10 * 0.0254

# EasyEDA canvas origin, in source units
ORIGIN_X = 4000
ORIGIN_Y = 3000


def parse_float(s) -> float:
    """Parse a float string, handling edge cases."""
    try:
        value = float(s)
    except (ValueError, TypeError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return value


def fmt(value: float) -> str:
    """Format a float for KiCad output: 6 decimal places, strip trailing zeros."""
    s = f"{value:.6f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s == "-0":
        s = "0"
    return s


def to_length(value) -> float:
    """Convert an EasyEDA length (string or number) to mm."""
    return parse_float(value) * UNIT_SCALE


def to_angle(value) -> Optional[float]:
    """Normalize an EasyEDA angle into KiCad's (-180, 180] range.

    Returns None when the value is absent or not a number; callers omit the
    rotation entirely in that case.
    """
    if value is None or value == "":
        return None
    try:
        angle = float(value)
    except (ValueError, TypeError):
        return None
    if math.isnan(angle):
        return None
    if angle > 180:
        return angle - 360
    return angle


def rotate(x: float, y: float, angle_deg: float):
    """Rotate point (x,y) around origin by angle_deg (counter-clockwise)."""
    if abs(angle_deg) < 1e-9:
        return x, y
    rad = math.radians(angle_deg)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


def to_point(x, y, transform: Optional[Transform] = None) -> Point:
    """Convert an absolute EasyEDA point to KiCad mm.

    With a parent transform the result is expressed in the parent's local
    frame: the parent origin is subtracted and the offset rotated by the
    parent angle. KiCad rotates child offsets clockwise on its Y-down
    canvas, so placing the result back with the parent angle recovers the
    absolute point.
    """
    px = (parse_float(x) - ORIGIN_X) * UNIT_SCALE
    py = (parse_float(y) - ORIGIN_Y) * UNIT_SCALE
    if transform is None:
        return Point(px, py)
    lx, ly = rotate(px - transform.x, py - transform.y, transform.angle or 0)
    return Point(lx, ly)


def to_start_end(start_x, start_y, end_x, end_y, transform: Optional[Transform] = None):
    """Build the (start ...) and (end ...) nodes of a segment."""
    start = to_point(start_x, start_y, transform)
    end = to_point(end_x, end_y, transform)
    return [
        ["start", start.x, start.y],
        ["end", end.x, end.y],
    ]


def to_at(x, y, angle=None, transform: Optional[Transform] = None):
    """Build an (at X Y [ROTATION]) node; the rotation is dropped when None."""
    p = to_point(x, y, transform)
    return ["at", p.x, p.y, to_angle(angle)]


def make_transform(x, y, angle=None) -> Transform:
    """Build a footprint placement transform from raw EasyEDA fields."""
    origin = to_point(x, y)
    return Transform(origin.x, origin.y, to_angle(angle) or 0.0)
