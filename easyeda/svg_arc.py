"""SVG elliptical arc geometry.

EasyEDA stores arcs as SVG path fragments (endpoints, radii and flags);
KiCad wants a center, an endpoint and a swept angle. The conversion follows
the endpoint-to-center parameterization from the SVG implementation notes.
"""

import math
from dataclasses import dataclass


class InvalidArcError(ValueError):
    """Raised when arc parameters do not describe a drawable arc."""


@dataclass
class ArcGeometry:
    cx: float
    cy: float
    # Start angle and signed sweep, in degrees
    start_angle: float
    extent: float


def _vector_angle(ux, uy, vx, vy) -> float:
    """Signed angle from vector u to vector v, in degrees."""
    dot = ux * vx + uy * vy
    norm = math.sqrt((ux * ux + uy * uy) * (vx * vx + vy * vy))
    if norm == 0:
        raise InvalidArcError("Degenerate arc vector")
    # Clamp rounding noise so acos stays defined
    ratio = max(-1.0, min(1.0, dot / norm))
    sign = -1 if ux * vy - uy * vx < 0 else 1
    return sign * math.degrees(math.acos(ratio))


def compute_arc(x0: float, y0: float, rx: float, ry: float, x_axis_rotation: float,
                large_arc: bool, sweep: bool, x: float, y: float) -> ArcGeometry:
    """Convert an SVG arc from (x0, y0) to (x, y) into center form.

    Radii that are too small to span the chord are scaled up, as SVG
    renderers do.

    Raises:
        InvalidArcError: for zero radii, coincident endpoints or a
            non-finite result.
    """
    rx = abs(rx)
    ry = abs(ry)
    if rx == 0 or ry == 0:
        raise InvalidArcError(f"Arc radius is zero: rx={rx}, ry={ry}")

    dx2 = (x0 - x) / 2
    dy2 = (y0 - y) / 2
    if dx2 == 0 and dy2 == 0:
        raise InvalidArcError("Arc start and end points coincide")

    rad = math.radians(x_axis_rotation % 360)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)

    # Midpoint in the ellipse's local frame
    x1 = cos_a * dx2 + sin_a * dy2
    y1 = -sin_a * dx2 + cos_a * dy2

    prx = rx * rx
    pry = ry * ry
    px1 = x1 * x1
    py1 = y1 * y1

    radii_check = px1 / prx + py1 / pry
    if radii_check > 1:
        scale = math.sqrt(radii_check)
        rx *= scale
        ry *= scale
        prx = rx * rx
        pry = ry * ry

    sign = -1 if large_arc == sweep else 1
    sq = (prx * pry - prx * py1 - pry * px1) / (prx * py1 + pry * px1)
    sq = max(sq, 0.0)
    coef = sign * math.sqrt(sq)
    cx1 = coef * (rx * y1 / ry)
    cy1 = coef * -(ry * x1 / rx)

    # Back to the world frame
    cx = (x0 + x) / 2 + (cos_a * cx1 - sin_a * cy1)
    cy = (y0 + y) / 2 + (sin_a * cx1 + cos_a * cy1)
    if not (math.isfinite(cx) and math.isfinite(cy)):
        raise InvalidArcError(f"Arc center is not finite: ({cx}, {cy})")

    ux = (x1 - cx1) / rx
    uy = (y1 - cy1) / ry
    vx = (-x1 - cx1) / rx
    vy = (-y1 - cy1) / ry

    start_angle = _vector_angle(1.0, 0.0, ux, uy)
    extent = _vector_angle(ux, uy, vx, vy)
    if not sweep and extent > 0:
        extent -= 360
    elif sweep and extent < 0:
        extent += 360

    return ArcGeometry(cx=cx, cy=cy, start_angle=start_angle % 360,
                       extent=math.fmod(extent, 360))
