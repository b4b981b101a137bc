from __future__ import annotations

import sys
from collections.abc import Iterator
from typing import NamedTuple

from .constants import HEADER_SIZE, INDEX_ENTRY_SIZE
from .exceptions import FormatError
from .header import FileHeader, check_file_size, read_file_header
from .helpers import _Array, read_exact, unpack_2_int32_be
from .types import ReadSeekableBinStream


class IndexEntry(NamedTuple):
    """Position of one record in the .shp file, in 16 bit words."""

    offset: int
    length: int

    @property
    def byte_offset(self) -> int:
        return self.offset * 2

    @property
    def byte_length(self) -> int:
        return self.length * 2


class IndexTable:
    """The .shx file of a shapefile: a fixed stride table giving the
    offset and content length of every record in the .shp file.

    Records are looked up by their 1-based ordinal. Lookups seek the
    .shx stream, unless the whole table was loaded with entries(),
    after which the table no longer touches the stream and can be
    shared between readers.
    """

    def __init__(self, shx: ReadSeekableBinStream):
        self.shx = shx
        check_file_size(shx)
        self.header: FileHeader = read_file_header(shx)
        self.numRecords = self._count_records(self.header)
        self._entries: tuple[IndexEntry, ...] | None = None

    @staticmethod
    def _count_records(header: FileHeader) -> int:
        table_size = header.file_length_bytes - HEADER_SIZE
        if table_size < 0 or table_size % INDEX_ENTRY_SIZE:
            raise FormatError(
                f"Malformed index: {table_size} bytes after the header is not "
                f"a whole number of {INDEX_ENTRY_SIZE} byte entries."
            )
        return table_size // INDEX_ENTRY_SIZE

    def __len__(self) -> int:
        return self.numRecords

    def __iter__(self) -> Iterator[IndexEntry]:
        yield from self.entries()

    def __repr__(self) -> str:
        return f"IndexTable: {self.numRecords} records"

    def entry_position(self, oid: int) -> int | None:
        """Byte offset of the entry for ordinal oid within the .shx file,
        or None if there is no such record."""
        if oid < 1 or oid > self.numRecords:
            return None
        return HEADER_SIZE + (oid - 1) * INDEX_ENTRY_SIZE

    def entry(self, oid: int) -> IndexEntry | None:
        """Returns the index entry of the record with ordinal oid (1-based),
        or None if oid is out of range."""
        position = self.entry_position(oid)
        if position is None:
            return None
        if self._entries is not None:
            return self._entries[oid - 1]
        self.shx.seek(position)
        return IndexEntry(*unpack_2_int32_be(read_exact(self.shx, INDEX_ENTRY_SIZE)))

    def entries(self) -> tuple[IndexEntry, ...]:
        """Reads every entry of the table, once."""
        if self._entries is None:
            self.shx.seek(HEADER_SIZE)
            flat = _Array[int](
                "i", read_exact(self.shx, self.numRecords * INDEX_ENTRY_SIZE)
            )
            if sys.byteorder != "big":
                flat.byteswap()
            self._entries = tuple(
                IndexEntry(offset, length)
                for offset, length in zip(flat[::2], flat[1::2])
            )
        return self._entries

    def byte_offsets(self) -> list[int]:
        """Byte offsets of all the records in the .shp file."""
        return [entry.byte_offset for entry in self.entries()]
