"""Per-shape converters from EasyEDA records to KiCad board nodes.

Each converter takes a typed shape record, the conversion state and, for
shapes embedded in a footprint, the footprint's placement transform. It
returns a KiCad node (a list whose first item is the tag), or None when the
shape has no KiCad representation; None children inside a node are dropped
by the encoder.

EasyEDA format reference:
https://docs.easyeda.com/en/DocumentFormat/3-EasyEDA-PCB-File-Format/index.html#shapes
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional

from .layers import PAD_LAYERS, get_layer_name, get_text_layer_name, is_copper
from .pcb_model import (
    ArcRecord, CircleRecord, ConversionState, CopperAreaRecord, HoleRecord,
    PadRecord, SolidRegionRecord, TextRecord, TrackRecord, Transform, ViaRecord,
)
from .svg_arc import InvalidArcError, compute_arc
from .utils import (
    make_transform, parse_float, to_angle, to_at, to_length, to_point, to_start_end,
)

log = logging.getLogger(__name__)

# KiCad "locked" status bit for tracks
LOCKED_STATUS = 40000

ZONE_HATCH_PITCH = 0.508
ZONE_MIN_THICKNESS = 0.254
ZONE_THERMAL_GAP = 0.508
ZONE_THERMAL_BRIDGE_WIDTH = 0.508

PAD_SHAPES = {
    "ELLIPSE": "circle",
    "RECT": "rect",
    "OVAL": "oval",
    "POLYGON": "custom",
}

MIN_PAD_SIZE = 0.01
# Corner match tolerance for rectangle detection, in EasyEDA units
RECT_TOLERANCE = 0.01
CUSTOM_PAD_OUTLINE_WIDTH = 0.1

_ARC_PATH = re.compile(r"^M\s*([-\d.\s]+)A\s*([-\d.\s]+)$")
_PATH_NUMBER = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_CURVE_COMMAND = re.compile(r"[ACQST]", re.I)


@dataclass(frozen=True)
class FontCorrection:
    """Scale factors that bring an EasyEDA font close to KiCad's stroke font."""
    width: float
    height: float
    thickness: float


FONT_TABLE = {
    "NotoSerifCJKsc-Medium": FontCorrection(width=0.8, height=0.8, thickness=0.3),
    "NotoSansCJKjp-DemiLight": FontCorrection(width=0.6, height=0.6, thickness=0.5),
}
DEFAULT_FONT = FontCorrection(width=0.9, height=1.0, thickness=0.9)


def _locked(record) -> bool:
    return record.locked == "1"


def _raw_angle(value) -> Optional[float]:
    """Parse an angle without normalizing it; None when absent."""
    if to_angle(value) is None:
        return None
    return parse_float(value)


# ── Tracks, vias, circles ─────────────────────────────────────────────

def convert_via(record: ViaRecord, state: ConversionState,
                transform: Optional[Transform] = None):
    net_id = state.nets.resolve(record.net)
    return [
        "via",
        to_at(record.x, record.y, None, transform),
        ["size", to_length(record.diameter)],
        ["drill", to_length(record.drill) * 2],
        ["layers", "F.Cu", "B.Cu"],
        ["net", max(net_id, 0)],
    ]


def convert_track(record: TrackRecord, state: ConversionState,
                  obj_name: str = "segment", transform: Optional[Transform] = None) -> List:
    """Split a polyline into one line node per consecutive point pair."""
    net_id = state.nets.resolve(record.net)
    layer_name = get_layer_name(record.layer, state)
    if not layer_name:
        return []

    # Board-level tracks off copper are plain graphics
    line_type = obj_name
    if obj_name == "segment" and not is_copper(layer_name):
        line_type = "gr_line"
    with_net = line_type == "segment" and net_id > 0

    coords = (record.points or "").split()
    result = []
    for i in range(0, len(coords) - 3, 2):
        result.append([
            line_type,
            *to_start_end(coords[i], coords[i + 1], coords[i + 2], coords[i + 3], transform),
            ["width", to_length(record.width)],
            ["layer", layer_name],
            ["net", net_id] if with_net else None,
            ["status", LOCKED_STATUS] if _locked(record) else None,
        ])
    return result


def convert_circle(record: CircleRecord, state: ConversionState,
                   obj_name: str = "gr_circle", transform: Optional[Transform] = None):
    layer_name = get_layer_name(record.layer, state)
    if not layer_name:
        return None
    center = to_point(record.x, record.y, transform)
    return [
        obj_name,
        ["center", center.x, center.y],
        ["end", center.x + to_length(record.radius), center.y],
        ["layer", layer_name],
        ["width", to_length(record.stroke_width)],
    ]


# ── Text ──────────────────────────────────────────────────────────────

def text_offset(angle) -> tuple:
    """Baseline compensation for footprint text, in EasyEDA units.

    EasyEDA anchors text at the baseline, KiCad at the left middle.
    """
    sin_a = math.sin(math.radians(_raw_angle(angle) or 0.0))
    x_offset = 0.5 * -1.28 - 1.5 * 1.28 * sin_a
    y_offset = 1.5 * -1.28 + 2.54 * sin_a
    return x_offset, y_offset


def _text_role(text_type: Optional[str]) -> str:
    if text_type == "P":
        return "reference"
    if text_type == "N":
        return "value"
    return "user"


def convert_text(record: TextRecord, state: ConversionState,
                 obj_name: str = "gr_text", transform: Optional[Transform] = None):
    in_footprint = obj_name == "fp_text"
    layer_name = get_text_layer_name(record.layer, state, in_footprint,
                                     record.text_type == "N")
    if not layer_name:
        return None

    font = FONT_TABLE.get(record.font, DEFAULT_FONT)
    font_size = to_length(record.font_size)

    x = parse_float(record.x)
    y = parse_float(record.y)
    if in_footprint:
        dx, dy = text_offset(record.angle)
        x += dx
        y += dy

    return [
        obj_name,
        _text_role(record.text_type) if in_footprint else None,
        record.text or "",
        to_at(x, y, record.angle, transform),
        ["layer", layer_name],
        "hide" if record.display == "none" else None,
        [
            "effects",
            [
                "font",
                ["size", font_size * font.height, font_size * font.width],
                ["thickness", to_length(record.stroke_width) * font.thickness],
            ],
            ["justify", "left", "mirror" if layer_name.startswith("B.") else None],
        ],
    ]


# ── Arcs ──────────────────────────────────────────────────────────────

def convert_arc(record: ArcRecord, state: ConversionState,
                obj_name: str = "gr_arc", transform: Optional[Transform] = None):
    """Convert an SVG arc path into a KiCad center/end/angle arc.

    KiCad sweeps clockwise from the end point, so the SVG start point is
    emitted when the sweep flag is set and the SVG end point otherwise.
    """
    layer_name = get_layer_name(record.layer, state)
    if not layer_name:
        return None

    path = re.sub(r"[,\s]+", " ", record.path or "").strip()
    m = _ARC_PATH.match(path)
    start_xy = m.group(1).split() if m else []
    params = m.group(2).split() if m else []
    if len(start_xy) != 2 or len(params) != 7:
        log.warning("Invalid arc path: %s", record.path)
        return None

    rx, ry, x_axis_rotation, large_arc, sweep, end_x, end_y = params
    start = to_point(start_xy[0], start_xy[1], transform)
    end = to_point(end_x, end_y, transform)
    # Radii are lengths; only the ellipse axis follows the footprint rotation
    rotation = parse_float(x_axis_rotation) + (transform.angle if transform else 0.0)

    try:
        arc = compute_arc(
            start.x, start.y,
            to_length(rx), to_length(ry),
            rotation,
            large_arc == "1",
            sweep == "1",
            end.x, end.y,
        )
    except InvalidArcError as e:
        log.warning("Invalid arc %s: %s", record.path, e)
        return None

    end_point = start if sweep == "1" else end
    return [
        obj_name,
        ["start", arc.cx, arc.cy],  # KiCad 5 arcs: start is the center
        ["end", end_point.x, end_point.y],
        ["angle", abs(arc.extent)],
        ["width", to_length(record.width)],
        ["layer", layer_name],
    ]


# ── Pads and holes ────────────────────────────────────────────────────

def is_rectangle(points: List[float]) -> bool:
    """True when 4 corner points form an axis-aligned rectangle."""
    if len(points) != 8:
        return False

    def eq(a, b):
        return abs(a - b) < RECT_TOLERANCE

    x1, y1, x2, y2, x3, y3, x4, y4 = points
    return (
        (eq(x1, x2) and eq(y2, y3) and eq(x3, x4) and eq(y4, y1))
        or (eq(y1, y2) and eq(x2, x3) and eq(y3, y4) and eq(x4, x1))
    )


def rectangle_size(points: List[float], rotation: float):
    """Bounding box size of a rectangle outline as (width, height).

    The outline is drawn already rotated, so width and height swap when the
    pad rotation is an odd multiple of 90 degrees.
    """
    xs = points[0::2]
    ys = points[1::2]
    width = max(xs) - min(xs)
    height = max(ys) - min(ys)
    if round(abs(rotation)) % 180 == 90:
        return height, width
    return width, height


def get_drill(hole_radius: float, hole_length: float):
    if hole_radius and hole_length:
        return ["drill", "oval", hole_radius * 2, hole_length]
    if hole_radius:
        return ["drill", hole_radius * 2]
    return None


def points_to_polygon(values: List[str], transform: Optional[Transform] = None):
    """Turn a flat "x y x y ..." list into (xy ...) nodes."""
    polygon = []
    for i in range(0, len(values) - 1, 2):
        p = to_point(values[i], values[i + 1], transform)
        polygon.append(["xy", p.x, p.y])
    return polygon


def _pad_number(number):
    try:
        return int(number)
    except (ValueError, TypeError):
        return number or ""


def convert_pad(record: PadRecord, state: ConversionState,
                transform: Optional[Transform] = None):
    shape = PAD_SHAPES.get(record.shape)
    if shape is None:
        log.warning("Unsupported pad shape %s in pad %s", record.shape, record.id)
        return None

    point_values = (record.points or "").split()
    point_list = [parse_float(p) for p in point_values]
    rotation = _raw_angle(record.rotation)

    points_are_rectangle = shape == "custom" and is_rectangle(point_list)
    if points_are_rectangle:
        shape = "rect"
    is_custom = shape == "custom"
    if is_custom and len(point_values) < 6:
        log.warning("PAD %s is a polygon, but has no points defined", record.id)
        return None

    net_id = state.nets.resolve(record.net)
    layers = PAD_LAYERS.get(int(parse_float(record.layer)))
    if layers is None:
        log.warning("Unsupported pad layer %s in pad %s", record.layer, record.id)
        return None

    if points_are_rectangle:
        width, height = rectangle_size(point_list, rotation or 0.0)
    else:
        width, height = parse_float(record.width), parse_float(record.height)

    # KiCad prefers pads taller than wide
    if width > height:
        width, height = height, width
        rotation = (rotation or 0.0) - 90

    hole_radius = to_length(record.hole_radius)
    hole_length = to_length(record.hole_length)
    if hole_radius <= 0:
        pad_type = "smd"
    elif record.plated == "N":
        pad_type = "np_thru_hole"
    else:
        pad_type = "thru_hole"

    primitives = None
    if is_custom:
        # Outline relative to the pad center, in the pad's own orientation
        center = to_point(record.x, record.y)
        pad_frame = Transform(center.x, center.y, rotation or 0.0)
        primitives = [
            "primitives",
            [
                "gr_poly",
                ["pts", *points_to_polygon(point_values, pad_frame)],
                ["width", CUSTOM_PAD_OUTLINE_WIDTH],
            ],
        ]

    return [
        "pad",
        _pad_number(record.number),
        pad_type,
        shape,
        to_at(record.x, record.y, rotation, transform),
        ["size", max(to_length(width), MIN_PAD_SIZE), max(to_length(height), MIN_PAD_SIZE)],
        ["layers", *layers],
        get_drill(hole_radius, hole_length),
        ["net", net_id, record.net] if net_id > 0 else None,
        primitives,
    ]


def _virtual_module(name: str, record, pad):
    """Wrap a single pad in an unnamed virtual footprint."""
    return [
        "module",
        name,
        "locked" if _locked(record) else None,
        ["layer", "F.Cu"],
        to_at(record.x, record.y),
        ["attr", "virtual"],
        ["fp_text", "reference", "", ["at", 0, 0], ["layer", "F.SilkS"]],
        ["fp_text", "value", "", ["at", 0, 0], ["layer", "F.SilkS"]],
        pad,
    ]


def convert_pad_to_via(record: PadRecord, state: ConversionState):
    """Convert a board-level pad.

    Round pads become vias; other shapes are wrapped in a virtual footprint
    since a via can only be round.
    """
    if record.shape != "ELLIPSE":
        pad = convert_pad(record, state, make_transform(record.x, record.y))
        if pad is None:
            return None
        size = to_length(record.width)
        return _virtual_module(f"AutoGenerated:Pad_{size:.2f}mm", record, pad)

    net_id = state.nets.resolve(record.net)
    return [
        "via",
        to_at(record.x, record.y),
        ["size", to_length(record.width)],
        ["drill", to_length(record.hole_radius) * 2],
        ["layers", "F.Cu", "B.Cu"],
        ["net", max(net_id, 0)],
    ]


def convert_hole(record: HoleRecord, transform: Optional[Transform] = None):
    """Convert a non-plated hole.

    Inside a footprint the hole is a plain np_thru_hole pad; on the board it
    becomes a mounting-hole footprint named after its diameter.
    """
    size = to_length(record.radius) * 2
    if transform is not None:
        return [
            "pad",
            "",
            "np_thru_hole",
            "circle",
            to_at(record.x, record.y, None, transform),
            ["size", size, size],
            ["drill", size],
            ["layers", "*.Cu", "*.Mask"],
        ]

    pad = [
        "pad",
        "",
        "np_thru_hole",
        "circle",
        ["at", 0, 0],
        ["size", size, size],
        ["drill", size],
        ["layers", "*.Cu", "*.Mask"],
    ]
    return _virtual_module(f"AutoGenerated:MountingHole_{size:.2f}mm", record, pad)


# ── Zones and filled regions ──────────────────────────────────────────

def path_to_polygon(path: Optional[str], transform: Optional[Transform] = None):
    """Extract polygon points from an SVG-like path of straight segments.

    Returns None when the path contains curves or has too few points.
    """
    path = path or ""
    if _CURVE_COMMAND.search(path):
        log.warning("Filled regions with arcs or curves are not supported: %s", path)
        return None
    values = _PATH_NUMBER.findall(path)
    if len(values) < 6:
        log.warning("Region path has fewer than 3 points: %s", path)
        return None
    return points_to_polygon(values, transform)


def convert_copper_area(record: CopperAreaRecord, state: ConversionState):
    net_id = state.nets.resolve(record.net)
    layer_name = get_layer_name(record.layer, state)
    if not layer_name:
        return None
    polygon = path_to_polygon(record.path)
    if polygon is None:
        return None

    net_id = max(net_id, 0)
    return [
        "zone",
        ["net", net_id],
        ["net_name", state.nets.names[net_id]],
        ["layer", layer_name],
        ["hatch", "edge", ZONE_HATCH_PITCH],
        [
            "connect_pads",
            "yes" if record.thermal == "direct" else None,
            ["clearance", to_length(record.clearance)],
        ],
        ["min_thickness", ZONE_MIN_THICKNESS],
        [
            "fill",
            "yes" if record.fill_style == "solid" else None,
            ["arc_segments", 32],
            ["thermal_gap", ZONE_THERMAL_GAP],
            ["thermal_bridge_width", ZONE_THERMAL_BRIDGE_WIDTH],
        ],
        ["polygon", ["pts", *polygon]],
    ]


def convert_solid_region(record: SolidRegionRecord, state: ConversionState):
    """Convert a board-level solid region, cutout or non-plated slot."""
    layer_name = get_layer_name(record.layer, state)
    if not layer_name:
        return None
    polygon = path_to_polygon(record.path)
    net_id = state.nets.resolve(record.net)
    if polygon is None:
        return None

    if record.region_type == "cutout":
        return [
            "zone",
            ["net", max(net_id, 0)],
            ["net_name", ""],
            ["hatch", "edge", ZONE_HATCH_PITCH],
            ["layer", layer_name],
            ["keepout", ["tracks", "allowed"], ["vias", "allowed"], ["copperpour", "not_allowed"]],
            ["polygon", ["pts", *polygon]],
        ]
    if record.region_type in ("solid", "npth"):
        # gr_poly has no net in KiCad
        return ["gr_poly", ["pts", *polygon], ["layer", layer_name], ["width", 0]]

    log.warning("Unsupported SOLIDREGION type %s", record.region_type)
    return None


def convert_footprint_region(record: SolidRegionRecord, state: ConversionState,
                             transform: Optional[Transform] = None):
    if record.region_type not in ("solid", "npth"):
        log.warning("Unsupported SOLIDREGION type in footprint: %s", record.region_type)
        return None
    layer_name = get_layer_name(record.layer, state)
    if not layer_name:
        return None
    polygon = path_to_polygon(record.path, transform)
    if polygon is None:
        return None
    return ["fp_poly", ["pts", *polygon], ["layer", layer_name], ["width", 0]]
