from __future__ import annotations

from datetime import date
from os import PathLike
from typing import (
    IO,
    Any,
    Final,
    Literal,
    NamedTuple,
    Protocol,
    Union,
)

## Value types


class Point2D(NamedTuple):
    x: float
    y: float


class Range(NamedTuple):
    """Minimum and maximum of a z or m array."""

    min: float
    max: float


ZBox = Range
MBox = Range


class BoundingBox(NamedTuple):
    x_min: float
    y_min: float
    x_max: float
    y_max: float


class BoundingVolume(NamedTuple):
    """The bounding box of a whole file, as found in .shp and .shx headers."""

    x_min: float
    y_min: float
    x_max: float
    y_max: float
    z_min: float
    z_max: float
    m_min: float
    m_max: float

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox(self.x_min, self.y_min, self.x_max, self.y_max)

    @property
    def zbox(self) -> ZBox:
        return Range(self.z_min, self.z_max)

    @property
    def mbox(self) -> MBox:
        return Range(self.m_min, self.m_max)


PointsT = list[Point2D]


class ReadableBinStream(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class ReadSeekableBinStream(Protocol):
    def seek(self, offset: int, whence: int = 0) -> int: ...
    def tell(self) -> int: ...
    def read(self, size: int = -1) -> bytes: ...


# File name, file object or anything with a read() method that returns bytes.
BinaryFileT = Union[str, PathLike[Any], IO[bytes]]


FieldTypeT = Literal["C", "D", "F", "L", "M", "N"]


# https://en.wikipedia.org/wiki/.dbf#Database_records
class FieldType:
    """A bare bones 'enum', as the enum library noticeably slows performance."""

    C: Final = "C"  # "Character"  # (str)
    D: Final = "D"  # "Date"
    F: Final = "F"  # "Floating point"
    L: Final = "L"  # "Logical"  # (bool)
    M: Final = "M"  # "Memo"  # Legacy. (10 digit str, starting block in an .dbt file)
    N: Final = "N"  # "Numeric"  # (int)
    __members__: set[FieldTypeT] = {
        "C",
        "D",
        "F",
        "L",
        "M",
        "N",
    }


FIELD_TYPE_ALIASES: dict[str | bytes, FieldTypeT] = {}
for c in FieldType.__members__:
    FIELD_TYPE_ALIASES[c.upper()] = c
    FIELD_TYPE_ALIASES[c.lower()] = c
    FIELD_TYPE_ALIASES[c.encode("ascii").lower()] = c
    FIELD_TYPE_ALIASES[c.encode("ascii").upper()] = c


class Field(NamedTuple):
    name: str
    field_type: FieldTypeT
    size: int
    decimal: int

    def __repr__(self) -> str:
        return f'Field(name="{self.name}", field_type=FieldType.{self.field_type}, size={self.size}, decimal={self.decimal})'


RecordValueNotDate = Union[bool, int, float, str]

# A Possible value in a dbf record, i.e. L, N, M, F, C, or D types
RecordValue = Union[RecordValueNotDate, date, None]
