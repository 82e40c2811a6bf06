"""EasyEDA layer id to KiCad layer name mapping.

EasyEDA numbers its layers with small integers. Ids 21-50 are inner copper
layers (21 -> In1.Cu); ids 99-199 are tolerated but have no KiCad
counterpart, so shapes on them are dropped.
"""

import logging
from typing import Optional

from .pcb_model import ConversionState

log = logging.getLogger(__name__)

LAYER_NAMES = {
    1: "F.Cu",
    2: "B.Cu",
    3: "F.SilkS",
    4: "B.SilkS",
    5: "F.Paste",
    6: "B.Paste",
    7: "F.Mask",
    8: "B.Mask",
    10: "Edge.Cuts",
    11: "Edge.Cuts",
    12: "Cmts.User",
    13: "F.Fab",
    14: "B.Fab",
    15: "Dwgs.User",
}

INNER_LAYER_FIRST = 21
INNER_LAYER_LAST = 50
UNSUPPORTED_FIRST = 99
UNSUPPORTED_LAST = 199

# Pad layer sets, keyed by EasyEDA pad layer id
PAD_LAYERS = {
    1: ("F.Cu", "F.Paste", "F.Mask"),
    2: ("B.Cu", "B.Paste", "B.Mask"),
    11: ("*.Cu", "*.Mask"),
}

# KiCad 5 board layer table: (ordinal, name, type[, hide])
USER_LAYERS = [
    (32, "B.Adhes", "user"),
    (33, "F.Adhes", "user"),
    (34, "B.Paste", "user"),
    (35, "F.Paste", "user"),
    (36, "B.SilkS", "user"),
    (37, "F.SilkS", "user"),
    (38, "B.Mask", "user"),
    (39, "F.Mask", "user"),
    (40, "Dwgs.User", "user"),
    (41, "Cmts.User", "user"),
    (42, "Eco1.User", "user"),
    (43, "Eco2.User", "user"),
    (44, "Edge.Cuts", "user"),
    (45, "Margin", "user"),
    (46, "B.CrtYd", "user"),
    (47, "F.CrtYd", "user"),
    (48, "B.Fab", "user", "hide"),
    (49, "F.Fab", "user", "hide"),
]


class UnknownLayerError(ValueError):
    """Raised for a layer id outside every known band."""


def get_layer_name(layer_id, state: ConversionState) -> Optional[str]:
    """Resolve an EasyEDA layer id to a KiCad layer name.

    Returns None for the unsupported band. Inner copper ids also raise the
    running inner layer count held in the conversion state.
    """
    try:
        int_id = int(str(layer_id).strip())
    except ValueError:
        raise UnknownLayerError(f"Missing layer id: {layer_id}") from None

    name = LAYER_NAMES.get(int_id)
    if name is not None:
        return name

    if INNER_LAYER_FIRST <= int_id <= INNER_LAYER_LAST:
        inner = int_id - INNER_LAYER_FIRST + 1
        state.inner_layers = max(state.inner_layers, inner)
        return f"In{inner}.Cu"

    if UNSUPPORTED_FIRST <= int_id <= UNSUPPORTED_LAST:
        log.warning("Unsupported layer id: %d", int_id)
        return None

    raise UnknownLayerError(f"Missing layer id: {layer_id}")


def get_text_layer_name(layer_id, state: ConversionState,
                        footprint: bool = False, is_name: bool = False) -> Optional[str]:
    """Resolve a text layer; footprint name text moves from silkscreen to fab."""
    name = get_layer_name(layer_id, state)
    if name and footprint and is_name:
        return name.replace(".SilkS", ".Fab")
    return name


def is_copper(layer_name: str) -> bool:
    return layer_name.endswith(".Cu")


def layer_table(inner_layers: int):
    """Build the (layers ...) node with inner layers between F.Cu and B.Cu."""
    layers = [[0, "F.Cu", "signal"]]
    for i in range(1, inner_layers + 1):
        layers.append([i, f"In{i}.Cu", "signal"])
    layers.append([31, "B.Cu", "signal"])
    layers.extend(list(entry) for entry in USER_LAYERS)
    return ["layers", *layers]
