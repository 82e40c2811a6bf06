"""Footprint (LIB shape) expansion.

An EasyEDA footprint embeds its own tracks, pads, text and so on, all in
board coordinates. They are converted under the footprint's placement
transform so that the KiCad module holds footprint-local geometry.
"""

import logging

from .pcb_model import ConversionState, LibRecord, ShapeKind
from .shapes import (
    convert_arc, convert_circle, convert_footprint_region, convert_hole,
    convert_pad, convert_text, convert_track,
)
from .utils import make_transform, to_at

log = logging.getLogger(__name__)

FOOTPRINT_LIBRARY = "easyeda"

FOOTPRINT_CONVERTERS = {
    ShapeKind.TRACK: lambda rec, state, t: convert_track(rec, state, "fp_line", t),
    ShapeKind.TEXT: lambda rec, state, t: [convert_text(rec, state, "fp_text", t)],
    ShapeKind.ARC: lambda rec, state, t: [convert_arc(rec, state, "fp_arc", t)],
    ShapeKind.HOLE: lambda rec, state, t: [convert_hole(rec, t)],
    ShapeKind.PAD: lambda rec, state, t: [convert_pad(rec, state, t)],
    ShapeKind.CIRCLE: lambda rec, state, t: [convert_circle(rec, state, "fp_circle", t)],
    ShapeKind.SOLIDREGION: lambda rec, state, t: [convert_footprint_region(rec, state, t)],
}


def footprint_name(record: LibRecord) -> str:
    package = record.attribute_map().get("package")
    return f"{FOOTPRINT_LIBRARY}:{package or record.id}"


def is_smd_pad(node) -> bool:
    return bool(node) and node[0] == "pad" and node[2] == "smd"


def convert_lib(record: LibRecord, state: ConversionState):
    """Expand a footprint record into a KiCad module node."""
    transform = make_transform(record.x, record.y, record.rotation)

    shapes = []
    for child in record.children:
        converter = FOOTPRINT_CONVERTERS.get(child.kind)
        if converter is None:
            log.warning("Unsupported shape %s in footprint %s", child.kind.value, record.id)
            continue
        shapes.extend(node for node in converter(child, state, transform) if node)

    shapes.append([
        "fp_text",
        "user",
        record.id or "",
        ["at", 0, 0],
        ["layer", "Cmts.User"],
        ["effects", ["font", ["size", 1, 1], ["thickness", 0.15]]],
    ])

    return [
        "module",
        footprint_name(record),
        "locked" if record.locked == "1" else None,
        ["layer", "F.Cu"],
        to_at(record.x, record.y, record.rotation),
        ["attr", "smd"] if any(is_smd_pad(node) for node in shapes) else None,
        *shapes,
    ]
