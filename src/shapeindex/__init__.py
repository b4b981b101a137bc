"""
shapeindex
Reads the geometry of ESRI Shapefiles, sequentially or record by record
through the .shx index, along with the attributes in the .dbf file.
Compatible with Python versions >=3.9
"""

from __future__ import annotations

import logging

from .__version__ import __version__
from .classes import Record, Records, ShapeRecord, ShapeRecords
from .constants import (
    FIRST_RING,
    INNER_RING,
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NODATA,
    NULL,
    OUTER_RING,
    PARTTYPE_LOOKUP,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    RING,
    SHAPETYPE_LOOKUP,
    TRIANGLE_FAN,
    TRIANGLE_STRIP,
)
from .dbf import AttributeTable
from .exceptions import (
    FormatError,
    RecordNotFound,
    ShapefileException,
    TruncationError,
)
from .header import FileHeader, check_file_size, read_file_header
from .index import IndexEntry, IndexTable
from .reader import Reader, iter_records, read_record
from .shapes import (
    SHAPE_CLASS_FROM_SHAPETYPE,
    MultiPatch,
    MultiPoint,
    MultiPointM,
    MultiPointZ,
    NullShape,
    Point,
    PointM,
    PointZ,
    Polygon,
    PolygonM,
    PolygonZ,
    Polyline,
    PolylineM,
    PolylineZ,
    Shape,
    decode_shape,
)
from .types import (
    BoundingBox,
    BoundingVolume,
    Field,
    FieldType,
    MBox,
    Point2D,
    Range,
    ZBox,
)

__all__ = [
    "__version__",
    "NULL",
    "POINT",
    "POLYLINE",
    "POLYGON",
    "MULTIPOINT",
    "POINTZ",
    "POLYLINEZ",
    "POLYGONZ",
    "MULTIPOINTZ",
    "POINTM",
    "POLYLINEM",
    "POLYGONM",
    "MULTIPOINTM",
    "MULTIPATCH",
    "SHAPETYPE_LOOKUP",
    "TRIANGLE_STRIP",
    "TRIANGLE_FAN",
    "OUTER_RING",
    "INNER_RING",
    "FIRST_RING",
    "RING",
    "PARTTYPE_LOOKUP",
    "NODATA",
    "Reader",
    "read_record",
    "iter_records",
    "FileHeader",
    "check_file_size",
    "read_file_header",
    "IndexEntry",
    "IndexTable",
    "AttributeTable",
    "Shape",
    "NullShape",
    "Point",
    "PointM",
    "PointZ",
    "Polyline",
    "Polygon",
    "MultiPoint",
    "PolylineM",
    "PolygonM",
    "MultiPointM",
    "PolylineZ",
    "PolygonZ",
    "MultiPointZ",
    "MultiPatch",
    "SHAPE_CLASS_FROM_SHAPETYPE",
    "decode_shape",
    "Record",
    "Records",
    "ShapeRecord",
    "ShapeRecords",
    "BoundingBox",
    "BoundingVolume",
    "Point2D",
    "Range",
    "ZBox",
    "MBox",
    "Field",
    "FieldType",
    "ShapefileException",
    "FormatError",
    "TruncationError",
    "RecordNotFound",
]

logger = logging.getLogger(__name__)
