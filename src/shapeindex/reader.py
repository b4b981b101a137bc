from __future__ import annotations

import io
import logging
import os
from collections.abc import Iterator
from os import PathLike
from types import TracebackType
from typing import IO, Any

from . import constants
from .classes import Record, Records, ShapeRecord, ShapeRecords
from .constants import HEADER_SIZE, NULL, RECORD_HEADER_SIZE, SHAPETYPE_LOOKUP
from .dbf import AttributeTable
from .exceptions import (
    FormatError,
    RecordNotFound,
    ShapefileException,
    TruncationError,
)
from .header import FileHeader, check_file_size, read_file_header
from .helpers import fsdecode_if_pathlike, read_exact, unpack_2_int32_be
from .index import IndexTable
from .shapes import Shape, decode_shape
from .types import BinaryFileT, BoundingVolume, ReadSeekableBinStream, RecordValue

logger = logging.getLogger(__name__)


def read_record(
    shp: ReadSeekableBinStream,
    oid: int = -1,
    strict: bool | None = None,
    shapeType: int | None = None,
) -> Record:
    """Reads one record, its 8 byte header and its shape, from the
    current position of shp. If shapeType is given, the shape must be
    of that type or a null shape."""
    if strict is None:
        strict = constants.STRICT

    recNum, contentLength = unpack_2_int32_be(read_exact(shp, RECORD_HEADER_SIZE))
    shape, shape_length = decode_shape(shp, strict=strict)

    if oid != -1 and recNum != oid:
        if strict:
            raise FormatError(f"Record number {recNum} found at position {oid}.")
        if constants.VERBOSE:
            logger.warning("Record number %d found at position %d.", recNum, oid)

    if (
        shapeType is not None
        and shape.shapeType != NULL
        and shape.shapeType != shapeType
    ):
        msg = (
            f"Record {oid} holds a {shape.shapeTypeName} "
            f"in a {SHAPETYPE_LOOKUP.get(shapeType, shapeType)} file."
        )
        if strict:
            raise FormatError(msg)
        if constants.VERBOSE:
            logger.warning(msg)

    return Record(
        record_number=recNum,
        content_length=contentLength,
        shape=shape,
        oid=oid,
        length=RECORD_HEADER_SIZE + shape_length,
    )


def iter_records(
    shp: ReadSeekableBinStream,
    header: FileHeader,
    strict: bool | None = None,
) -> Iterator[Record]:
    """Decodes every record of a .shp file in order, from the end of
    its header until the file length declared in the header is used up."""
    total = header.file_length_bytes
    shp.seek(HEADER_SIZE)
    pos = HEADER_SIZE
    oid = 1
    while pos < total:
        try:
            record = read_record(shp, oid, strict=strict, shapeType=header.shape_type)
        except TruncationError as e:
            raise TruncationError(
                f"Record {oid} at byte {pos} is incomplete: {e}"
            ) from e
        pos += record.length

        # The content length in the record header may cover more bytes than
        # the shape needs, skip them to land on the next record.
        surplus = 2 * record.content_length - (record.length - RECORD_HEADER_SIZE)
        if surplus > 0:
            if constants.VERBOSE:
                logger.warning(
                    "Skipping %d bytes of padding after record %d.", surplus, oid
                )
            read_exact(shp, surplus)
            pos += surplus

        if pos > total:
            raise FormatError(
                f"Record {oid} ends at byte {pos}, past the declared file length of {total} bytes."
            )
        yield record
        oid += 1


class Reader:
    """Reads the geometry records of a shapefile, along with the
    attributes of each record when the .dbf file is available.

    Records are addressed by their 1-based ordinal, the position of the
    record in the .shp file. If the .shx index file is available any
    record can be read directly, otherwise the record headers of the
    .shp file are walked to find it.

    The "shapefile_path" argument is the path to the shapefile, with or
    without extension. Alternatively the constituent files can be given
    as file-like objects with the shp, shx and dbf keyword arguments.
    """

    CONSTITUENT_FILE_EXTS = ["shp", "shx", "dbf"]
    assert all(ext.islower() for ext in CONSTITUENT_FILE_EXTS)

    def _assert_ext_is_supported(self, ext: str) -> None:
        assert ext in self.CONSTITUENT_FILE_EXTS

    def __init__(
        self,
        shapefile_path: str | PathLike[Any] = "",
        /,
        *,
        shp: BinaryFileT | None = None,
        shx: BinaryFileT | None = None,
        dbf: BinaryFileT | None = None,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
        strict: bool | None = None,
    ):
        self.shp: IO[bytes] | None = None
        self.shx: IO[bytes] | None = None
        self.dbf: IO[bytes] | None = None
        self._files_to_close: list[IO[bytes]] = []
        self.shapeName = "Not specified"
        self.header: FileHeader | None = None
        self.index: IndexTable | None = None
        self.attributes: AttributeTable | None = None
        self.shpLength: int | None = None
        self.numShapes: int | None = None
        self._offsets: list[int] = []
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        self.strict = constants.STRICT if strict is None else strict

        if shapefile_path:
            path = fsdecode_if_pathlike(shapefile_path)
            self.load(path)
            return

        self.shp = self.__seek_0_on_file_obj_wrap_or_open_from_name("shp", shp)
        self.shx = self.__seek_0_on_file_obj_wrap_or_open_from_name("shx", shx)
        self.dbf = self.__seek_0_on_file_obj_wrap_or_open_from_name("dbf", dbf)

        if self.shp:
            self._load_headers()

    def __seek_0_on_file_obj_wrap_or_open_from_name(
        self,
        ext: str,
        file_: BinaryFileT | None,
    ) -> IO[bytes] | None:
        self._assert_ext_is_supported(ext)

        if file_ is None:
            return None

        if isinstance(file_, (str, PathLike)):
            baseName, __ = os.path.splitext(file_)
            return self._load_constituent_file(baseName, ext)

        if hasattr(file_, "read"):
            # Copy if required
            try:
                file_.seek(0)
                return file_
            except (AttributeError, io.UnsupportedOperation):
                return io.BytesIO(file_.read())

        raise ShapefileException(
            f"Could not load shapefile constituent file from: {file_}"
        )

    def __str__(self) -> str:
        """
        Use some general info on the shapefile as __str__
        """
        info = ["shapeindex Reader"]
        if self.header:
            info.append(f"    {len(self)} records (type '{self.shapeTypeName}')")
        if self.attributes:
            info.append(f"    {len(self.attributes.fields)} attribute fields")
        return "\n".join(info)

    def __enter__(self) -> Reader:
        return self

    def __exit__(
        self,
        exc_type: BaseException | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        """
        Exit phase of context manager, close opened files.
        """
        self.close()
        return None

    def __len__(self) -> int:
        """Returns the number of records in the shapefile."""
        if self.numShapes is None:
            if not self.shp:
                # No file loaded yet, treat as 'empty' shapefile
                return 0
            # Index file not available, walk the record headers
            self._walk_offsets()
        return self.numShapes or 0

    def __iter__(self) -> Iterator[ShapeRecord]:
        """Iterates through the records and attributes in the shapefile."""
        yield from self.iterShapeRecords()

    @property
    def shapeType(self) -> int:
        return self.__require_header().shape_type

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP.get(self.shapeType, str(self.shapeType))

    @property
    def bbox(self) -> BoundingVolume:
        return self.__require_header().bbox

    def load(self, shapefile: str | None = None) -> None:
        """Opens a shapefile from a filename. Normally this method
        would be called by the constructor with the file name as an argument."""
        if shapefile:
            (shapeName, __ext) = os.path.splitext(shapefile)
            self.shapeName = shapeName
            self.shp = self._load_constituent_file(shapeName, "shp")
            self.shx = self._load_constituent_file(shapeName, "shx")
            self.dbf = self._load_constituent_file(shapeName, "dbf")
            if not self.shp:
                raise ShapefileException(f"Unable to open {shapeName}.shp.")
        self._load_headers()

    def _load_headers(self) -> None:
        shp = self.__require_shp()
        self.shpLength = check_file_size(shp)
        self.header = read_file_header(shp)
        if self.shx:
            self.index = IndexTable(self.shx)
            self.numShapes = len(self.index)
        if self.dbf:
            self.attributes = AttributeTable(
                self.dbf, encoding=self.encoding, encodingErrors=self.encodingErrors
            )

    def _try_get_open_constituent_file(
        self,
        shapefile_name: str,
        ext: str,
    ) -> IO[bytes] | None:
        """
        Attempts to open a .shp, .dbf or .shx file,
        with both lower case and upper case file extensions,
        and return it.  If it was not possible to open the file, None is returned.
        """
        self._assert_ext_is_supported(ext)

        try:
            return open(f"{shapefile_name}.{ext}", "rb")
        except OSError:
            try:
                return open(f"{shapefile_name}.{ext.upper()}", "rb")
            except OSError:
                return None

    def _load_constituent_file(
        self,
        shapefile_name: str,
        ext: str,
    ) -> IO[bytes] | None:
        """
        Attempts to open a .shp, .dbf or .shx file, with the extension
        as both lower and upper case, and if successful append it to
        self._files_to_close.
        """
        shp_dbf_or_shx_file = self._try_get_open_constituent_file(shapefile_name, ext)
        if shp_dbf_or_shx_file is not None:
            self._files_to_close.append(shp_dbf_or_shx_file)
        return shp_dbf_or_shx_file

    def __del__(self) -> None:
        self.close()

    def close(self) -> None:
        # Close any files that the reader opened (but not those given by user)
        for attribute in self._files_to_close:
            if hasattr(attribute, "close"):
                try:
                    attribute.close()
                except OSError:
                    pass
        self._files_to_close = []

    def __require_shp(self) -> IO[bytes]:
        if not self.shp:
            raise ShapefileException(
                "Shapefile Reader requires a shapefile or file-like object. (no shp file found)"
            )
        return self.shp

    def __require_header(self) -> FileHeader:
        if self.header is None:
            raise ShapefileException("No shapefile has been loaded.")
        return self.header

    def _walk_offsets(self) -> list[int]:
        """Finds the byte offset of every record by jumping from one
        record header to the next. Used when there is no index file."""
        if not self._offsets:
            shp = self.__require_shp()
            total = self.__require_header().file_length_bytes
            checkpoint = shp.tell()
            shp.seek(HEADER_SIZE)
            offsets = []
            pos = HEADER_SIZE
            while pos < total:
                offsets.append(pos)
                # Unpack the record header only
                (recNum, recLength) = unpack_2_int32_be(
                    read_exact(shp, RECORD_HEADER_SIZE)
                )
                if recLength < 0:
                    raise FormatError(
                        f"Record {recNum} at byte {pos} has a negative content length: {recLength}"
                    )
                # Jump to next record position
                pos += RECORD_HEADER_SIZE + 2 * recLength
                shp.seek(pos)
            shp.seek(checkpoint)
            self._offsets = offsets
            self.numShapes = len(offsets)
        return self._offsets

    def _record_offset(self, oid: int) -> int | None:
        """Byte offset of the record with ordinal oid in the .shp file."""
        if self.index is not None:
            entry = self.index.entry(oid)
            return None if entry is None else entry.byte_offset
        offsets = self._walk_offsets()
        if oid < 1 or oid > len(offsets):
            return None
        return offsets[oid - 1]

    def fetch_record(self, oid: int) -> Record:
        """Reads the record with the 1-based ordinal oid.

        Raises RecordNotFound if there is no such record, and FormatError
        or TruncationError if the record is there but can not be decoded.
        """
        shp = self.__require_shp()
        header = self.__require_header()
        offset = self._record_offset(oid)
        if offset is None:
            raise RecordNotFound(f"No record {oid}, there are {len(self)} records.")
        if offset < HEADER_SIZE:
            raise RecordNotFound(
                f"Record {oid} at byte {offset} lies before the first record of the .shp file."
            )
        if self.shpLength is None or offset + RECORD_HEADER_SIZE > self.shpLength:
            raise RecordNotFound(
                f"Record {oid} at byte {offset} lies beyond the end of the .shp file."
            )
        shp.seek(offset)
        return read_record(shp, oid, strict=self.strict, shapeType=header.shape_type)

    def record(self, oid: int) -> Record | None:
        """Returns the record with the 1-based ordinal oid, or None if it
        does not exist or could not be read. Use fetch_record to find out why."""
        self.__require_shp()
        try:
            return self.fetch_record(oid)
        except (ShapefileException, OSError) as e:
            logger.debug("Record %d not available: %s", oid, e)
            return None

    def shape(self, oid: int) -> Shape | None:
        """Returns the shape of the record with the 1-based ordinal oid."""
        record = self.record(oid)
        return None if record is None else record.shape

    def records(self) -> Records:
        """Returns all records of the .shp file, read sequentially."""
        return Records(self.iterRecords())

    def iterRecords(self) -> Iterator[Record]:
        """Returns a generator of all records in the .shp file, read
        sequentially. Useful for large shapefiles."""
        shp = self.__require_shp()
        count = 0
        for record in iter_records(shp, self.__require_header(), strict=self.strict):
            count += 1
            yield record
        # Entire shp file consumed
        if self.numShapes is None:
            self.numShapes = count

    def attribute(self, oid: int) -> dict[str, RecordValue] | None:
        """Returns the attributes of the record with the 1-based ordinal oid."""
        if self.attributes is None:
            raise ShapefileException(
                "Shapefile Reader requires a dbf file to read attributes. (no dbf file found)"
            )
        return self.attributes.attribute_lookup(oid)

    def shapeRecord(self, oid: int) -> ShapeRecord | None:
        """Returns the record with the 1-based ordinal oid together with its
        attributes. Returns None if either of them is missing. Without a dbf
        file the attributes are None."""
        record = self.record(oid)
        if record is None:
            return None
        if self.attributes is None:
            return ShapeRecord(record=record)
        attributes = self.attributes.attribute_lookup(oid)
        if attributes is None:
            return None
        return ShapeRecord(record=record, attributes=attributes)

    def shapeRecords(self) -> ShapeRecords:
        """Returns all the records of the shapefile with their attributes."""
        return ShapeRecords(self.iterShapeRecords())

    def iterShapeRecords(self) -> Iterator[ShapeRecord]:
        """Returns a generator of records with their attributes, in ordinal
        order. Records that can not be read, or whose attribute row is
        deleted, are skipped."""
        for oid in range(1, len(self) + 1):
            shaperec = self.shapeRecord(oid)
            if shaperec is not None:
                yield shaperec
