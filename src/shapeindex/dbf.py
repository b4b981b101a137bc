from __future__ import annotations

from datetime import date
from struct import Struct, calcsize, unpack

from .exceptions import FormatError
from .helpers import read_exact
from .types import (
    FIELD_TYPE_ALIASES,
    Field,
    FieldType,
    ReadSeekableBinStream,
    RecordValue,
)


class AttributeTable:
    """Reads rows of the .dbf file of a shapefile.
    Xbase-related code borrows heavily from ActiveState Python Cookbook Recipe 362715 by Raymond Hettinger

    Rows are looked up with the same 1-based ordinal as the geometry
    records, so attribute_lookup(1) returns the first row of the table.
    """

    def __init__(
        self,
        dbf: ReadSeekableBinStream,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
    ):
        self.dbf = dbf
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        self.fields: list[Field] = []
        self.__readHeader()

    def __readHeader(self) -> None:
        dbf = self.dbf
        # read relevant header parts
        dbf.seek(0)
        self.numRecords, self.__dbfHdrLength, self.__recordLength = unpack(
            "<xxxxLHH20x", read_exact(dbf, 32)
        )

        # read fields
        numFields = (self.__dbfHdrLength - 33) // 32
        for __field in range(numFields):
            encoded_name, encoded_type_char, size, decimal = unpack(
                "<11sc4xBB14x", read_exact(dbf, 32)
            )

            if b"\x00" in encoded_name:
                idx = encoded_name.index(b"\x00")
            else:
                idx = len(encoded_name) - 1
            encoded_name = encoded_name[:idx]
            name = encoded_name.decode(self.encoding, self.encodingErrors)
            name = name.lstrip()

            try:
                field_type = FIELD_TYPE_ALIASES[encoded_type_char]
            except KeyError:
                raise FormatError(
                    f"Unknown dbf field type {encoded_type_char!r} for field {name}"
                )

            self.fields.append(Field(name, field_type, size, decimal))
        terminator = dbf.read(1)
        if terminator != b"\r":
            raise FormatError(
                "Shapefile dbf header lacks expected terminator. (likely corrupt?)"
            )

        # the deletion flag comes first in each row
        fmt = "1s" + "".join(f"{field.size}s" for field in self.fields)
        # total size of fields should add up to recordlength from the header
        padding = self.__recordLength - calcsize(fmt)
        if padding > 0:
            fmt += f"{padding}x"
        self.__recStruct = Struct(fmt)

    def __len__(self) -> int:
        return self.numRecords

    def __repr__(self) -> str:
        return f"AttributeTable: {self.numRecords} records ({len(self.fields)} fields)"

    @property
    def fieldNames(self) -> list[str]:
        return [field.name for field in self.fields]

    def _decode_value(self, field: Field, value: bytes) -> RecordValue:
        typ = field.field_type
        if typ is FieldType.N or typ is FieldType.F:
            # numeric or float: number stored as a string, right justified, and padded with blanks to the width of the field.
            value = value.split(b"\0")[0]
            value = value.replace(b"*", b"").strip()  # QGIS NULL is all '*' chars
            if value == b"":
                return None
            if field.decimal:
                try:
                    return float(value)
                except ValueError:
                    # not parseable as float, set to None
                    return None
            try:
                # forcing a large int to float and back to int
                # will lose information and result in wrong nr.
                return int(value)
            except ValueError:
                try:
                    return int(float(value))
                except ValueError:
                    return None
        if typ is FieldType.D:
            # date: 8 bytes - date stored as a string in the format YYYYMMDD.
            if not value.replace(b"\x00", b"").replace(b" ", b"").replace(b"0", b""):
                # dbf date field has no official null value
                # but can check for all hex null-chars, all spaces, or all 0s (QGIS null)
                return None
            try:
                y, m, d = int(value[:4]), int(value[4:6]), int(value[6:8])
                return date(y, m, d)
            except (TypeError, ValueError):
                # if invalid date, just return as unicode string
                return value.decode(self.encoding, self.encodingErrors).strip()
        if typ is FieldType.L:
            # logical: 1 byte - initialized to 0x20 (space) otherwise T or F.
            if value == b" ":
                return None  # space means missing or not yet set
            if value in b"YyTt1":
                return True
            if value in b"NnFf0":
                return False
            return None  # unknown value is set to missing
        text = value.decode(self.encoding, self.encodingErrors)
        return text.strip().rstrip("\x00")  # remove null-padding at end of strings

    def attribute_lookup(self, oid: int) -> dict[str, RecordValue] | None:
        """Returns the row for the 1-based ordinal oid as a dict of
        field name to value. Returns None if oid is out of range or the
        row is marked as deleted."""
        if oid < 1 or oid > self.numRecords:
            return None
        f = self.dbf
        f.seek(self.__dbfHdrLength + (oid - 1) * self.__recordLength)
        recordContents = self.__recStruct.unpack(read_exact(f, self.__recStruct.size))

        if recordContents[0] != b" ":
            # deleted record
            return None

        return {
            field.name: self._decode_value(field, value)
            for field, value in zip(self.fields, recordContents[1:])
        }
