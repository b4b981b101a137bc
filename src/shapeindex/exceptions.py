class ShapefileException(Exception):
    """An exception to handle shapefile specific problems."""


class FormatError(ShapefileException):
    """The bytes do not follow the shapefile or dBASE layout."""


class TruncationError(ShapefileException):
    """A stream ended before a field or declared array was complete."""


class RecordNotFound(ShapefileException, LookupError):
    pass
