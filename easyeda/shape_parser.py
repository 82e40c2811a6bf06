"""EasyEDA shape record tokenizer.

A PCB document lists its shapes as strings of the form
``KIND~field~field~...``. Footprints (``LIB``) carry their embedded shapes
after the header, each introduced by the ``#@$`` marker:

    LIB~4000~3000~package`SOT-23`~90~~gge5~~~~0#@$TRACK~...#@$PAD~...
"""

import logging
from dataclasses import replace
from typing import List, Optional

from .pcb_model import (
    ArcRecord, CircleRecord, CopperAreaRecord, HoleRecord, LibRecord,
    PadRecord, ShapeKind, ShapeRecord, SolidRegionRecord, TextRecord,
    TrackRecord, ViaRecord,
)

log = logging.getLogger(__name__)

FIELD_SEPARATOR = "~"
SHAPE_MARKER = "#@$"

RECORD_TYPES = {
    ShapeKind.VIA: ViaRecord,
    ShapeKind.TRACK: TrackRecord,
    ShapeKind.TEXT: TextRecord,
    ShapeKind.ARC: ArcRecord,
    ShapeKind.PAD: PadRecord,
    ShapeKind.HOLE: HoleRecord,
    ShapeKind.COPPERAREA: CopperAreaRecord,
    ShapeKind.SOLIDREGION: SolidRegionRecord,
    ShapeKind.CIRCLE: CircleRecord,
    ShapeKind.LIB: LibRecord,
}


class ShapeFormatError(ValueError):
    """Raised for a shape string without a kind tag."""


def _split_kind(raw: str):
    if not raw or not raw.strip():
        raise ShapeFormatError("Empty shape record")
    tag, _, rest = raw.partition(FIELD_SEPARATOR)
    tag = tag.strip()
    if not tag:
        raise ShapeFormatError(f"Shape record has no kind: {raw[:40]!r}")
    try:
        kind = ShapeKind(tag)
    except ValueError:
        kind = None
    return tag, kind, rest.split(FIELD_SEPARATOR) if rest else []


def parse_shape(raw: str, nested: bool = False) -> Optional[ShapeRecord]:
    """Parse one shape string into its typed record.

    Returns None for shape kinds this converter does not know; those are
    logged and skipped by the caller.
    """
    if SHAPE_MARKER in raw:
        head, *embedded = raw.split(SHAPE_MARKER)
    else:
        head, embedded = raw, []

    tag, kind, values = _split_kind(head)
    if kind is None:
        log.warning("Unsupported shape %s", tag)
        return None

    if kind == ShapeKind.LIB:
        if nested:
            log.warning("Nested footprint %s is not supported", tag)
            return None
        record = LibRecord.from_fields(values)
        children = tuple(_parse_children(embedded, record.id))
        return replace(record, children=children)

    if embedded:
        log.warning("Ignoring %d embedded shapes in %s record", len(embedded), tag)
    return RECORD_TYPES[kind].from_fields(values)


def _parse_children(embedded: List[str], footprint_id) -> List[ShapeRecord]:
    children = []
    for raw in embedded:
        if not raw.strip():
            continue
        try:
            child = parse_shape(raw, nested=True)
        except ShapeFormatError as e:
            log.warning("Skipped a shape in footprint %s: %s", footprint_id, e)
            continue
        if child is None:
            log.warning("Skipped a shape in footprint %s", footprint_id)
            continue
        children.append(child)
    return children


def parse_shapes(raw_shapes) -> List[ShapeRecord]:
    """Parse a document's shape list in order, dropping unknown or malformed shapes."""
    records = []
    for raw in raw_shapes:
        try:
            record = parse_shape(raw)
        except ShapeFormatError as e:
            log.warning("Skipping shape: %s", e)
            continue
        if record is not None:
            records.append(record)
    return records
