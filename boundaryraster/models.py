"""Data classes for regions, grid cells and the finished raster."""

from dataclasses import dataclass, field
from typing import Union

from shapely.geometry import MultiPolygon, Polygon, box

Ring = list[tuple[int, int]]


@dataclass(frozen=True)
class Region:
    """A named polygonal area, e.g. a country."""
    id: str
    polygon: Union[Polygon, MultiPolygon]

    @property
    def is_indexable(self) -> bool:
        """True if the region has a usable id and non-empty polygonal geometry."""
        return (isinstance(self.id, str) and bool(self.id)
                and isinstance(self.polygon, (Polygon, MultiPolygon))
                and not self.polygon.is_empty)


@dataclass(frozen=True)
class Cell:
    x: int
    y: int
    lon_min: float
    lat_min: float
    lon_max: float
    lat_max: float

    @classmethod
    def at(cls, x: int, y: int, width: int, height: int) -> "Cell":
        """Cell (x, y) of a width x height grid over the whole globe.

        Row 0 is the northernmost row.  Neighbouring cells share their edge
        coordinates exactly since both are computed with the same expression.
        """
        lon_min = -180.0 + 360.0 * x / width
        lat_max = +90.0 - 180.0 * y / height
        lon_max = -180.0 + 360.0 * (x + 1) / width
        lat_min = +90.0 - 180.0 * (y + 1) / height
        return cls(x, y, lon_min, lat_min, lon_max, lat_max)

    @property
    def bounds(self) -> tuple:
        """(minx, miny, maxx, maxy), same order as shapely's ``bounds``."""
        return (self.lon_min, self.lat_min, self.lon_max, self.lat_max)

    def index(self, width: int) -> int:
        return self.x + self.y * width

    def to_polygon(self) -> Polygon:
        """Convert the cell rectangle to a shapely polygon."""
        return box(self.lon_min, self.lat_min, self.lon_max, self.lat_max)


@dataclass(frozen=True)
class RegionArea:
    """The clipped part of one region inside one cell, in fixed-point rings."""
    region_id: str
    outer: list[Ring]
    inner: list[Ring] = field(default_factory=list)


@dataclass(frozen=True)
class CellResult:
    containing_ids: list[str] = field(default_factory=list)
    partial_areas: list[RegionArea] = field(default_factory=list)

    def region_ids(self) -> set:
        """All region ids referenced by this cell."""
        return set(self.containing_ids) | {a.region_id for a in self.partial_areas}


@dataclass
class Raster:
    width: int
    height: int
    cells: list[CellResult]
    region_areas: dict[str, float]

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid raster size {self.width}x{self.height}")
        if len(self.cells) != self.width * self.height:
            raise ValueError(f"Expected {self.width * self.height} cells, "
                             f"got {len(self.cells)}")

    def cell_at(self, x: int, y: int) -> CellResult:
        return self.cells[x + y * self.width]
