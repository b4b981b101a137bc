from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from struct import Struct
from typing import Any, ClassVar, Union

from . import constants
from .constants import (
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NODATA,
    NULL,
    PARTTYPE_LOOKUP,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    SHAPETYPE_LOOKUP,
)
from .exceptions import FormatError
from .helpers import _Array, read_array, read_count, read_exact, read_int32_le
from .types import BoundingBox, MBox, Point2D, PointsT, Range, ReadableBinStream, ZBox

logger = logging.getLogger(__name__)

_DOUBLE = Struct("<d")
_INT32 = Struct("<i")
_POINT = Struct("<2d")
_BBOX = Struct("<4d")


class _Shape:
    shapeType: ClassVar[int]

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]


@dataclass(frozen=True)
class NullShape(_Shape):
    shapeType: ClassVar[int] = NULL


Point_shapeTypes = frozenset([POINT, POINTM, POINTZ])


@dataclass(frozen=True)
class Point(_Shape):
    shapeType: ClassVar[int] = POINT

    x: float
    y: float


@dataclass(frozen=True)
class PointM(_Shape):
    shapeType: ClassVar[int] = POINTM

    x: float
    y: float
    m: float


@dataclass(frozen=True)
class PointZ(_Shape):
    shapeType: ClassVar[int] = POINTZ

    x: float
    y: float
    z: float
    m: float


_CanHaveBBox_shapeTypes = frozenset(
    [
        POLYLINE,
        POLYLINEM,
        POLYLINEZ,
        MULTIPOINT,
        MULTIPOINTM,
        MULTIPOINTZ,
        POLYGON,
        POLYGONM,
        POLYGONZ,
        MULTIPATCH,
    ]
)

_CanHaveParts_shapeTypes = frozenset(
    [
        POLYLINE,
        POLYLINEM,
        POLYLINEZ,
        POLYGON,
        POLYGONM,
        POLYGONZ,
        MULTIPATCH,
    ]
)


class _CanHaveParts(_Shape):
    parts: Sequence[int]  # index of start point of each part
    points: PointsT

    @property
    def lines(self) -> list[PointsT]:
        """The points of each part, in part order."""
        ends = [*self.parts[1:], len(self.points)]
        return [self.points[start:end] for start, end in zip(self.parts, ends)]


# Every shape type with an m block. Z shapes always carry one after the z block.
_HasM_shapeTypes = frozenset(
    [
        POLYLINEM,
        POLYLINEZ,
        POLYGONM,
        POLYGONZ,
        MULTIPOINTM,
        MULTIPOINTZ,
        MULTIPATCH,
    ]
)


class _HasM(_Shape):
    m: Sequence[float]

    @property
    def measures(self) -> list[float | None]:
        # Measure values less than -10e38 are nodata values according to the spec
        return [m if m > NODATA else None for m in self.m]


_HasZ_shapeTypes = frozenset(
    [
        POLYLINEZ,
        POLYGONZ,
        MULTIPOINTZ,
        MULTIPATCH,
    ]
)


@dataclass(frozen=True)
class Polyline(_CanHaveParts):
    shapeType: ClassVar[int] = POLYLINE

    bbox: BoundingBox
    parts: Sequence[int]
    points: PointsT


@dataclass(frozen=True)
class Polygon(_CanHaveParts):
    shapeType: ClassVar[int] = POLYGON

    bbox: BoundingBox
    parts: Sequence[int]
    points: PointsT


@dataclass(frozen=True)
class MultiPoint(_Shape):
    shapeType: ClassVar[int] = MULTIPOINT

    bbox: BoundingBox
    points: PointsT


@dataclass(frozen=True)
class PolylineM(_CanHaveParts, _HasM):
    shapeType: ClassVar[int] = POLYLINEM

    bbox: BoundingBox
    parts: Sequence[int]
    points: PointsT
    mbox: MBox
    m: Sequence[float]


@dataclass(frozen=True)
class PolygonM(_CanHaveParts, _HasM):
    shapeType: ClassVar[int] = POLYGONM

    bbox: BoundingBox
    parts: Sequence[int]
    points: PointsT
    mbox: MBox
    m: Sequence[float]


@dataclass(frozen=True)
class MultiPointM(_HasM):
    shapeType: ClassVar[int] = MULTIPOINTM

    bbox: BoundingBox
    points: PointsT
    mbox: MBox
    m: Sequence[float]


@dataclass(frozen=True)
class PolylineZ(_CanHaveParts, _HasM):
    shapeType: ClassVar[int] = POLYLINEZ

    bbox: BoundingBox
    parts: Sequence[int]
    points: PointsT
    zbox: ZBox
    z: Sequence[float]
    mbox: MBox
    m: Sequence[float]


@dataclass(frozen=True)
class PolygonZ(_CanHaveParts, _HasM):
    shapeType: ClassVar[int] = POLYGONZ

    bbox: BoundingBox
    parts: Sequence[int]
    points: PointsT
    zbox: ZBox
    z: Sequence[float]
    mbox: MBox
    m: Sequence[float]


@dataclass(frozen=True)
class MultiPointZ(_HasM):
    shapeType: ClassVar[int] = MULTIPOINTZ

    bbox: BoundingBox
    points: PointsT
    zbox: ZBox
    z: Sequence[float]
    mbox: MBox
    m: Sequence[float]


@dataclass(frozen=True)
class MultiPatch(_CanHaveParts, _HasM):
    """A set of surface patches. partTypes holds the patch type code
    of each part, see constants.PARTTYPE_LOOKUP."""

    shapeType: ClassVar[int] = MULTIPATCH

    bbox: BoundingBox
    parts: Sequence[int]
    partTypes: Sequence[int]
    points: PointsT
    zbox: ZBox
    z: Sequence[float]
    mbox: MBox
    m: Sequence[float]

    @property
    def partTypeNames(self) -> list[str]:
        return [PARTTYPE_LOOKUP[code] for code in self.partTypes]


Shape = Union[
    NullShape,
    Point,
    PointM,
    PointZ,
    Polyline,
    Polygon,
    MultiPoint,
    PolylineM,
    PolygonM,
    MultiPointM,
    PolylineZ,
    PolygonZ,
    MultiPointZ,
    MultiPatch,
]

SHAPE_CLASS_FROM_SHAPETYPE: dict[int, type[Shape]] = {
    NULL: NullShape,
    POINT: Point,
    POLYLINE: Polyline,
    POLYGON: Polygon,
    MULTIPOINT: MultiPoint,
    POINTZ: PointZ,
    POLYLINEZ: PolylineZ,
    POLYGONZ: PolygonZ,
    MULTIPOINTZ: MultiPointZ,
    POINTM: PointM,
    POLYLINEM: PolylineM,
    POLYGONM: PolygonM,
    MULTIPOINTM: MultiPointM,
    MULTIPATCH: MultiPatch,
}


def _read_point_shape(b_io: ReadableBinStream, shapeType: int) -> tuple[Shape, int]:
    x, y = _POINT.unpack(read_exact(b_io, 16))
    if shapeType == POINT:
        return Point(x=x, y=y), 16
    if shapeType == POINTZ:
        (z,) = _DOUBLE.unpack(read_exact(b_io, 8))
        (m,) = _DOUBLE.unpack(read_exact(b_io, 8))
        return PointZ(x=x, y=y, z=z, m=m), 32
    (m,) = _DOUBLE.unpack(read_exact(b_io, 8))
    return PointM(x=x, y=y, m=m), 24


def _read_part_types(b_io: ReadableBinStream, nParts: int) -> _Array[int]:
    partTypes = _Array[int]("i", read_array(b_io, nParts, _INT32, int))
    for code in partTypes:
        if code not in PARTTYPE_LOOKUP:
            raise FormatError(f"Unknown multipatch part type: {code}")
    return partTypes


def _read_range_and_values(
    b_io: ReadableBinStream, nPoints: int
) -> tuple[Range, _Array[float]]:
    box = Range(*_POINT.unpack(read_exact(b_io, 16)))
    return box, _Array[float]("d", read_array(b_io, nPoints, _DOUBLE, float))


def _check_parts(parts: Sequence[int], nPoints: int) -> None:
    if not parts:
        if nPoints:
            raise FormatError(f"{nPoints} points are not assigned to any part.")
        return
    if parts[0] != 0:
        raise FormatError(f"The first part must start at point 0, not {parts[0]}.")
    for previous, start in zip(parts, parts[1:]):
        if start <= previous:
            raise FormatError(f"Part indexes are not strictly ascending: {parts}")
    if parts[-1] >= nPoints:
        raise FormatError(
            f"Part index {parts[-1]} is out of range for {nPoints} points."
        )


def decode_shape(
    b_io: ReadableBinStream, strict: bool | None = None
) -> tuple[Shape, int]:
    """Decodes one shape from a stream positioned on its shape type.
    Returns the shape and the exact number of bytes consumed,
    shape type included.

    Unknown shape types are read as a NullShape of length 4,
    unless strict is set, in which case FormatError is raised.
    strict also checks the part indexes of lines, polygons and multipatches.
    """
    if strict is None:
        strict = constants.STRICT

    shapeType = read_int32_le(b_io)
    length = 4

    if shapeType == NULL:
        return NullShape(), length

    if shapeType in Point_shapeTypes:
        shape, point_length = _read_point_shape(b_io, shapeType)
        return shape, length + point_length

    if shapeType not in _CanHaveBBox_shapeTypes:
        if strict:
            raise FormatError(f"Unknown shape type: {shapeType}")
        if constants.VERBOSE:
            logger.warning("Unknown shape type %d read as a null shape.", shapeType)
        return NullShape(), length

    kwargs: dict[str, Any] = {}
    kwargs["bbox"] = BoundingBox(*_BBOX.unpack(read_exact(b_io, 32)))
    length += 32

    if shapeType in _CanHaveParts_shapeTypes:
        nParts = read_count(b_io, "part")
        nPoints = read_count(b_io, "point")
        length += 8
        kwargs["parts"] = parts = _Array[int]("i", read_array(b_io, nParts, _INT32, int))
        length += 4 * nParts
        if shapeType == MULTIPATCH:
            kwargs["partTypes"] = _read_part_types(b_io, nParts)
            length += 4 * nParts
        if strict:
            _check_parts(parts, nPoints)
    else:
        nPoints = read_count(b_io, "point")
        length += 4

    kwargs["points"] = read_array(b_io, nPoints, _POINT, Point2D)
    length += 16 * nPoints

    if shapeType in _HasZ_shapeTypes:
        kwargs["zbox"], kwargs["z"] = _read_range_and_values(b_io, nPoints)
        length += 16 + 8 * nPoints

    if shapeType in _HasM_shapeTypes:
        kwargs["mbox"], kwargs["m"] = _read_range_and_values(b_io, nPoints)
        length += 16 + 8 * nPoints

    return SHAPE_CLASS_FROM_SHAPETYPE[shapeType](**kwargs), length
