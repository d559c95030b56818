"""boundaryraster — precomputed country-boundary lookup rasters.

Import constants FIRST so logging and environment configuration are in
place before any other module logs.
"""

from boundaryraster import constants as _constants  # noqa: F401

from boundaryraster.builder import RasterBuilder
from boundaryraster.exceptions import (BoundaryRasterError, InvalidGeometryError,
                                       RangeError)
from boundaryraster.models import Cell, CellResult, Raster, Region, RegionArea
