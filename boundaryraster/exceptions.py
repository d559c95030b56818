"""Error types raised while building a boundary raster."""


class BoundaryRasterError(Exception):
    """Base class for all boundaryraster errors."""


class InvalidGeometryError(BoundaryRasterError, ValueError):
    """A polygon could not be turned into valid Simple-Feature geometry."""


class RangeError(BoundaryRasterError, ValueError):
    """A coordinate lies outside the encodable fixed-point domain."""
