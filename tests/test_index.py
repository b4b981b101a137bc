"""
This module tests the .shx index table.
"""

import io

import pytest

import shapeindex
from shapeindex import IndexEntry, IndexTable
from _shp_helpers import build_shapefile, file_header, point_body


def point_index(n):
    __, shx = build_shapefile(
        shapeindex.POINT, [point_body(float(i), float(i)) for i in range(n)]
    )
    return IndexTable(shx)


def test_index_record_count():
    index = point_index(5)
    assert len(index) == index.numRecords == 5


def test_index_entry_positions():
    """
    Assert that entries are found at a fixed stride after the header.
    """
    n = 5
    index = point_index(n)
    assert index.entry_position(1) == 100
    assert index.entry_position(n) == 100 + (n - 1) * 8
    assert index.entry_position(0) is None
    assert index.entry_position(n + 1) is None


def test_index_entry():
    index = point_index(3)
    # each point record is 8 header bytes and 20 content bytes
    assert index.entry(1) == IndexEntry(offset=50, length=10)
    assert index.entry(3) == IndexEntry(offset=50 + 2 * 14, length=10)
    assert index.entry(3).byte_offset == 100 + 2 * 28
    assert index.entry(3).byte_length == 20


def test_index_entry_out_of_range():
    index = point_index(3)
    assert index.entry(0) is None
    assert index.entry(4) is None
    assert index.entry(-1) is None


def test_index_entries_loaded_once():
    """
    Assert that after loading all the entries the table
    no longer reads from the .shx stream.
    """
    index = point_index(4)
    entries = index.entries()
    assert len(entries) == 4
    assert list(index) == list(entries)
    index.shx.close()
    assert index.entry(2) == entries[1]
    assert index.byte_offsets() == [100, 128, 156, 184]


def test_index_empty():
    index = IndexTable(io.BytesIO(file_header(50, shapeindex.POINT)))
    assert len(index) == 0
    assert index.entry(1) is None
    assert index.entries() == ()


@pytest.mark.parametrize("file_length", [53, 49])
def test_index_malformed_stride(file_length):
    """
    Assert that a table that is not a whole number of entries,
    or shorter than a header, is rejected.
    """
    shx = io.BytesIO(file_header(file_length, shapeindex.POINT) + b"\x00" * 8)
    with pytest.raises(shapeindex.FormatError):
        IndexTable(shx)


def test_index_too_small():
    with pytest.raises(shapeindex.TruncationError):
        IndexTable(io.BytesIO(b"\x00" * 40))
