"""Data model for EasyEDA to KiCad conversion.

Shape records mirror the tilde-delimited EasyEDA PCB shape lines, one frozen
dataclass per shape kind. Field values stay as the raw strings read from the
document; the converters in shapes.py interpret them.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple


class ShapeKind(Enum):
    VIA = "VIA"
    TRACK = "TRACK"
    TEXT = "TEXT"
    ARC = "ARC"
    PAD = "PAD"
    HOLE = "HOLE"
    COPPERAREA = "COPPERAREA"
    SOLIDREGION = "SOLIDREGION"
    CIRCLE = "CIRCLE"
    LIB = "LIB"


@dataclass
class Point:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Transform:
    """Placement of a parent footprint, in KiCad mm and degrees."""
    x: float = 0.0
    y: float = 0.0
    angle: float = 0.0


@dataclass(frozen=True)
class ShapeRecord:
    kind: ClassVar[ShapeKind]

    @classmethod
    def from_fields(cls, values):
        """Build a record from positional fields; missing fields become None."""
        names = [f.name for f in fields(cls) if not f.metadata.get("embedded")]
        values = list(values)[:len(names)]
        values += [None] * (len(names) - len(values))
        return cls(**dict(zip(names, values)))


@dataclass(frozen=True)
class ViaRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.VIA
    x: Optional[str] = None
    y: Optional[str] = None
    diameter: Optional[str] = None
    net: Optional[str] = None
    drill: Optional[str] = None  # hole radius
    id: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class TrackRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.TRACK
    width: Optional[str] = None
    layer: Optional[str] = None
    net: Optional[str] = None
    points: Optional[str] = None  # "x1 y1 x2 y2 ..."
    id: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class TextRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.TEXT
    text_type: Optional[str] = None  # N/P/L (name/prefix/label)
    x: Optional[str] = None
    y: Optional[str] = None
    stroke_width: Optional[str] = None
    angle: Optional[str] = None
    mirror: Optional[str] = None
    layer: Optional[str] = None
    net: Optional[str] = None
    font_size: Optional[str] = None
    text: Optional[str] = None
    path: Optional[str] = None
    display: Optional[str] = None
    id: Optional[str] = None
    font: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class ArcRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.ARC
    width: Optional[str] = None
    layer: Optional[str] = None
    net: Optional[str] = None
    path: Optional[str] = None  # "M x y A rx ry rot large sweep x y"
    helper_dots: Optional[str] = None
    id: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class PadRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.PAD
    shape: Optional[str] = None  # ELLIPSE/RECT/OVAL/POLYGON
    x: Optional[str] = None
    y: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    layer: Optional[str] = None
    net: Optional[str] = None
    number: Optional[str] = None
    hole_radius: Optional[str] = None
    points: Optional[str] = None
    rotation: Optional[str] = None
    id: Optional[str] = None
    hole_length: Optional[str] = None
    hole_points: Optional[str] = None
    plated: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class HoleRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.HOLE
    x: Optional[str] = None
    y: Optional[str] = None
    radius: Optional[str] = None
    id: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class CopperAreaRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.COPPERAREA
    stroke_width: Optional[str] = None
    layer: Optional[str] = None
    net: Optional[str] = None
    path: Optional[str] = None
    clearance: Optional[str] = None
    fill_style: Optional[str] = None  # solid/none
    id: Optional[str] = None
    thermal: Optional[str] = None  # spoke/direct
    keep_island: Optional[str] = None
    copper_zone: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class SolidRegionRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.SOLIDREGION
    layer: Optional[str] = None
    net: Optional[str] = None
    path: Optional[str] = None
    region_type: Optional[str] = None  # solid/npth/cutout
    id: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class CircleRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.CIRCLE
    x: Optional[str] = None
    y: Optional[str] = None
    radius: Optional[str] = None
    stroke_width: Optional[str] = None
    layer: Optional[str] = None
    id: Optional[str] = None
    locked: Optional[str] = None


@dataclass(frozen=True)
class LibRecord(ShapeRecord):
    kind: ClassVar[ShapeKind] = ShapeKind.LIB
    x: Optional[str] = None
    y: Optional[str] = None
    attributes: Optional[str] = None  # backtick-delimited key/value pairs
    rotation: Optional[str] = None
    import_flag: Optional[str] = None
    id: Optional[str] = None
    spare1: Optional[str] = None
    spare2: Optional[str] = None
    spare3: Optional[str] = None
    locked: Optional[str] = None
    # Embedded shapes, filled in by the parser
    children: Tuple[ShapeRecord, ...] = field(default=(), metadata={"embedded": True})

    def attribute_map(self) -> Dict[str, str]:
        attr_list = (self.attributes or "").split("`")
        attrs = {}
        for i in range(0, len(attr_list) - 1, 2):
            attrs[attr_list[i]] = attr_list[i + 1]
        return attrs


class NetTable:
    """Ordered net names; index 0 is always the unnamed net."""

    def __init__(self, names=()):
        self.names: List[str] = [""]
        self._index: Dict[str, int] = {"": 0}
        for name in names:
            if name:
                self.resolve(name)

    def resolve(self, name: Optional[str]) -> int:
        """Return the id of a net name, interning it on first use.

        An absent name resolves to -1; the empty name is net 0.
        """
        if name is None:
            return -1
        index = self._index.get(name)
        if index is not None:
            return index
        self.names.append(name)
        self._index[name] = len(self.names) - 1
        return len(self.names) - 1

    def __len__(self):
        return len(self.names)


@dataclass
class ConversionState:
    """Mutable state threaded through a single board conversion."""
    nets: NetTable = field(default_factory=NetTable)
    # Highest inner copper layer seen (In<n>.Cu)
    inner_layers: int = 0
