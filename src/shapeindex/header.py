from __future__ import annotations

from struct import Struct
from typing import NamedTuple

from .constants import FILE_CODE, FILE_VERSION, HEADER_SIZE, SHAPETYPE_LOOKUP
from .exceptions import FormatError, TruncationError
from .helpers import read_exact, stream_size
from .types import BoundingVolume, ReadSeekableBinStream

# magic, 20 unused bytes, file length (all big endian), then
# version, shape type and the bounding volume (little endian).
_HEAD_BE = Struct(">i20xi")
_HEAD_LE = Struct("<2i8d")


class FileHeader(NamedTuple):
    """The 100 byte header shared by .shp and .shx files."""

    file_length: int  # in 16 bit words, header included
    shape_type: int
    bbox: BoundingVolume

    @property
    def file_length_bytes(self) -> int:
        return self.file_length * 2

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP.get(self.shape_type, f"UNKNOWN ({self.shape_type})")


def check_file_size(f: ReadSeekableBinStream) -> int:
    """Makes sure the stream can hold a file header and rewinds it.
    Returns the size of the stream in bytes."""
    size = stream_size(f)
    if size < HEADER_SIZE:
        raise TruncationError(
            f"A shapefile header needs {HEADER_SIZE} bytes, got a file of {size} bytes."
        )
    f.seek(0)
    return size


def read_file_header(f: ReadSeekableBinStream) -> FileHeader:
    """Reads the header of a .shp or .shx file from the current position,
    which should be the start of the file."""
    data = read_exact(f, HEADER_SIZE)

    file_code, file_length = _HEAD_BE.unpack_from(data, 0)
    if file_code != FILE_CODE:
        raise FormatError(
            f"Not a shapefile: expected file code {FILE_CODE}, got {file_code}."
        )

    version, shape_type, *volume = _HEAD_LE.unpack_from(data, _HEAD_BE.size)
    if version != FILE_VERSION:
        raise FormatError(
            f"Unsupported shapefile version {version}, only {FILE_VERSION} can be read."
        )

    return FileHeader(
        file_length=file_length,
        shape_type=shape_type,
        bbox=BoundingVolume(*volume),
    )
