from __future__ import annotations

import os

# Module settings
VERBOSE = True

# Reject unknown shape types, mismatched record numbers and malformed parts
# instead of reading past them.
STRICT = os.getenv("SHAPEINDEX_STRICT", "").lower() == "yes"

# Constants for shape types
NULL = 0
POINT = 1
POLYLINE = 3
POLYGON = 5
MULTIPOINT = 8
POINTZ = 11
POLYLINEZ = 13
POLYGONZ = 15
MULTIPOINTZ = 18
POINTM = 21
POLYLINEM = 23
POLYGONM = 25
MULTIPOINTM = 28
MULTIPATCH = 31

SHAPETYPE_LOOKUP = {
    NULL: "NULL",
    POINT: "POINT",
    POLYLINE: "POLYLINE",
    POLYGON: "POLYGON",
    MULTIPOINT: "MULTIPOINT",
    POINTZ: "POINTZ",
    POLYLINEZ: "POLYLINEZ",
    POLYGONZ: "POLYGONZ",
    MULTIPOINTZ: "MULTIPOINTZ",
    POINTM: "POINTM",
    POLYLINEM: "POLYLINEM",
    POLYGONM: "POLYGONM",
    MULTIPOINTM: "MULTIPOINTM",
    MULTIPATCH: "MULTIPATCH",
}

# Patch types, MultiPatch only
TRIANGLE_STRIP = 0
TRIANGLE_FAN = 1
OUTER_RING = 2
INNER_RING = 3
FIRST_RING = 4
RING = 5

PARTTYPE_LOOKUP = {
    TRIANGLE_STRIP: "TRIANGLE_STRIP",
    TRIANGLE_FAN: "TRIANGLE_FAN",
    OUTER_RING: "OUTER_RING",
    INNER_RING: "INNER_RING",
    FIRST_RING: "FIRST_RING",
    RING: "RING",
}

# File layout
FILE_CODE = 9994
FILE_VERSION = 1000
HEADER_SIZE = 100
INDEX_ENTRY_SIZE = 8
RECORD_HEADER_SIZE = 8

NODATA = -10e38  # as per the ESRI shapefile spec, only used for m-values.
