from __future__ import annotations

from dataclasses import dataclass

from .shapes import Shape
from .types import RecordValue


@dataclass(frozen=True)
class Record:
    """One geometry record of a .shp file."""

    record_number: int  # as stored in the record header, starting at 1
    content_length: int  # as stored in the record header, in 16 bit words
    shape: Shape
    oid: int = -1  # ordinal the record was read at
    length: int = 0  # bytes consumed, record header included

    def __repr__(self) -> str:
        return f"Record #{self.oid}: {self.shape.shapeTypeName}"


class ShapeRecord:
    """A geometry record along with its attributes."""

    def __init__(
        self,
        record: Record,
        attributes: dict[str, RecordValue] | None = None,
    ):
        self.record = record
        self.attributes = attributes

    @property
    def shape(self) -> Shape:
        return self.record.shape

    @property
    def oid(self) -> int:
        return self.record.oid

    def __repr__(self) -> str:
        return f"ShapeRecord #{self.oid}: {self.shape.shapeTypeName} {self.attributes}"


class Records(list[Record]):
    """A class to hold a list of Record objects. Subclasses list to reuse
    all the optimizations of the builtin list."""

    def __repr__(self) -> str:
        return f"Records: {list(self)}"

    @property
    def shapes(self) -> list[Shape]:
        return [record.shape for record in self]


class ShapeRecords(list[ShapeRecord]):
    """A class to hold a list of ShapeRecord objects."""

    def __repr__(self) -> str:
        return f"ShapeRecords: {list(self)}"
