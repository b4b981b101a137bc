"""
Unit tests for decoding .dbf attribute rows.
"""

import io
from datetime import date

import pytest

import shapeindex
from shapeindex import AttributeTable, Field, FieldType
from _shp_helpers import build_dbf

FIELDS = [
    ("NAME", "C", 12, 0),
    ("POP", "N", 9, 0),
    ("AREA", "F", 10, 3),
    ("FOUNDED", "D", 8, 0),
    ("CAPITAL", "L", 1, 0),
]


def test_fields():
    table = AttributeTable(build_dbf(FIELDS, []))
    assert len(table) == 0
    assert table.fields[0] == Field("NAME", FieldType.C, 12, 0)
    assert table.fields[2].decimal == 3
    assert table.fieldNames == ["NAME", "POP", "AREA", "FOUNDED", "CAPITAL"]


def test_values():
    rows = [
        [b"Oslo", b"709037", b"454.030", b"10480101", b"T"],
        [b"Bergen", b"", b"**********", b"00000000", b" "],
        [b"Molde", b"27", b"3.5", b"19990231", b"n"],
    ]
    table = AttributeTable(build_dbf(FIELDS, rows))
    assert len(table) == 3
    assert table.attribute_lookup(1) == {
        "NAME": "Oslo",
        "POP": 709037,
        "AREA": 454.03,
        "FOUNDED": date(1048, 1, 1),
        "CAPITAL": True,
    }
    # blanks, QGIS style nulls and empty dates are missing values
    assert table.attribute_lookup(2) == {
        "NAME": "Bergen",
        "POP": None,
        "AREA": None,
        "FOUNDED": None,
        "CAPITAL": None,
    }
    third = table.attribute_lookup(3)
    assert third["CAPITAL"] is False
    # invalid dates are returned as text
    assert third["FOUNDED"] == "19990231"


def test_numeric_written_as_float():
    table = AttributeTable(build_dbf([("N", "N", 8, 0)], [[b"12.0"]]))
    assert table.attribute_lookup(1) == {"N": 12}


def test_lookup_is_one_based():
    rows = [[b"a", b"1", b"", b"", b" "], [b"b", b"2", b"", b"", b" "]]
    table = AttributeTable(build_dbf(FIELDS, rows))
    assert table.attribute_lookup(1)["NAME"] == "a"
    assert table.attribute_lookup(2)["NAME"] == "b"
    assert table.attribute_lookup(0) is None
    assert table.attribute_lookup(3) is None


def test_deleted_row():
    rows = [[b"a", b"1", b"", b"", b" "], [b"b", b"2", b"", b"", b" "]]
    table = AttributeTable(build_dbf(FIELDS, rows, deleted=frozenset([0])))
    assert table.attribute_lookup(1) is None
    assert table.attribute_lookup(2)["POP"] == 2


def test_encoding():
    rows = [["Tromsø".encode("latin-1")]]
    table = AttributeTable(build_dbf([("NAME", "C", 10, 0)], rows), encoding="latin-1")
    assert table.attribute_lookup(1) == {"NAME": "Tromsø"}


def test_missing_terminator():
    data = bytearray(build_dbf(FIELDS, []).getvalue())
    data[32 + 32 * len(FIELDS)] = 0x20
    with pytest.raises(shapeindex.FormatError):
        AttributeTable(io.BytesIO(bytes(data)))


def test_truncated_table():
    data = build_dbf(FIELDS, []).getvalue()[:40]
    with pytest.raises(shapeindex.TruncationError):
        AttributeTable(io.BytesIO(data))
