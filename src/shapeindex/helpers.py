from __future__ import annotations

import array
import os
from collections.abc import Callable
from os import PathLike
from struct import Struct
from typing import Any, Generic, TypeVar, overload

from .exceptions import FormatError, TruncationError
from .types import ReadableBinStream, ReadSeekableBinStream

# Helpers

T = TypeVar("T")
V = TypeVar("V")

unpack_2_int32_be = Struct(">2i").unpack
unpack_int32_le = Struct("<i").unpack


@overload
def fsdecode_if_pathlike(path: PathLike[Any]) -> str: ...
@overload
def fsdecode_if_pathlike(path: T) -> T: ...
def fsdecode_if_pathlike(path: Any) -> Any:
    if isinstance(path, PathLike):
        return os.fsdecode(path)  # str

    return path


ARR_TYPE = TypeVar("ARR_TYPE", int, float)


# In Python 3.12 we can do:
# class _Array(array.array[ARR_TYPE], Generic[ARR_TYPE]):
class _Array(array.array, Generic[ARR_TYPE]):  # type: ignore[type-arg]
    """Converts python tuples to lists of the appropriate type.
    Used to hold part indexes, part types, and z and m values."""

    def __repr__(self) -> str:
        return str(self.tolist())


def read_exact(b_io: ReadableBinStream, size: int) -> bytes:
    """Reads exactly size bytes, or raises TruncationError."""
    data = b_io.read(size)
    if len(data) != size:
        raise TruncationError(
            f"Expected {size} bytes but the stream ended after {len(data)}."
        )
    return data


def read_int32_le(b_io: ReadableBinStream) -> int:
    (value,) = unpack_int32_le(read_exact(b_io, 4))
    return value


def read_count(b_io: ReadableBinStream, what: str) -> int:
    """Reads a little endian element count, which can not be negative."""
    count = read_int32_le(b_io)
    if count < 0:
        raise FormatError(f"Negative {what} count: {count}")
    return count


def read_array(
    b_io: ReadableBinStream,
    count: int,
    element: Struct,
    make: Callable[..., V],
) -> list[V]:
    """Reads count consecutive elements laid out as element, passing
    the unpacked fields of each one to make."""
    if count == 0:
        return []
    data = read_exact(b_io, count * element.size)
    return [make(*fields) for fields in element.iter_unpack(data)]


def stream_size(f: ReadSeekableBinStream) -> int:
    """Size of a seekable stream in bytes. The position is left unchanged."""
    checkpoint = f.tell()
    f.seek(0, 2)
    size = f.tell()
    f.seek(checkpoint)
    return size
