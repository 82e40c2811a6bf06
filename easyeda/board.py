"""EasyEDA PCB document to KiCad board conversion.

Input is the loaded EasyEDA document: ``board["shape"]`` holds the raw shape
strings and ``board["routerRule"]["nets"]`` the initial net names.
"""

import logging

from .footprint import convert_lib
from .layers import layer_table
from .pcb_model import ConversionState, NetTable, ShapeKind
from .sexp import encode
from .shape_parser import parse_shapes
from .shapes import (
    convert_arc, convert_circle, convert_copper_area, convert_hole,
    convert_pad_to_via, convert_solid_region, convert_text, convert_track,
    convert_via,
)

log = logging.getLogger(__name__)

KICAD_VERSION = 20171130
KICAD_HOST = ("pcbnew", "(5.1.5)-3")
PAGE_SIZE = "A4"


def _one(node):
    return [node] if node is not None else []


BOARD_CONVERTERS = {
    ShapeKind.VIA: lambda rec, state: _one(convert_via(rec, state)),
    ShapeKind.TRACK: lambda rec, state: convert_track(rec, state),
    ShapeKind.TEXT: lambda rec, state: _one(convert_text(rec, state)),
    ShapeKind.ARC: lambda rec, state: _one(convert_arc(rec, state)),
    ShapeKind.COPPERAREA: lambda rec, state: _one(convert_copper_area(rec, state)),
    ShapeKind.SOLIDREGION: lambda rec, state: _one(convert_solid_region(rec, state)),
    ShapeKind.CIRCLE: lambda rec, state: _one(convert_circle(rec, state)),
    ShapeKind.HOLE: lambda rec, state: _one(convert_hole(rec)),
    ShapeKind.LIB: lambda rec, state: _one(convert_lib(rec, state)),
    ShapeKind.PAD: lambda rec, state: _one(convert_pad_to_via(rec, state)),
}


def convert_shape(record, state: ConversionState):
    """Convert one top-level shape record into zero or more board nodes."""
    return BOARD_CONVERTERS[record.kind](record, state)


def convert_records(raw_shapes, state: ConversionState):
    """Parse and convert shapes in document order."""
    nodes = []
    for record in parse_shapes(raw_shapes):
        nodes.extend(convert_shape(record, state))
    return nodes


def convert_board(board: dict):
    """Convert an EasyEDA PCB document into a KiCad board node tree.

    Raises:
        UnknownLayerError: if a shape uses a layer id outside every known band
    """
    router_rule = board.get("routerRule") or {}
    state = ConversionState(nets=NetTable(router_rule.get("nets") or []))

    shapes = convert_records(board.get("shape") or [], state)
    nets = [["net", index, name] for index, name in enumerate(state.nets.names)]

    log.info("Shapes: %d", len(shapes))
    log.info("Nets: %d", len(nets))
    log.info("Inner layers: %d", state.inner_layers)

    return [
        "kicad_pcb",
        ["version", KICAD_VERSION],
        ["host", *KICAD_HOST],
        ["page", PAGE_SIZE],
        layer_table(state.inner_layers),
        *nets,
        *shapes,
    ]


def board_to_kicad(board: dict) -> str:
    """Convert an EasyEDA PCB document into KiCad .kicad_pcb text."""
    return encode(convert_board(board)) + "\n"
