"""Per-cell classification of regions into full cover / partial / disjoint."""

import logging

import shapely
from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon

from .exceptions import InvalidGeometryError
from .fixed_point import encode_ring
from .index import SpatialIndex
from .models import Cell, CellResult, RegionArea

logger = logging.getLogger(__name__)

# DE-9IM patterns for "a covers b"; any one of them matching is enough
_COVERS_PATTERNS = ('T*****FF*', '*T****FF*', '***T**FF*', '****T*FF*')


def _matches(matrix: str, pattern: str) -> bool:
    for m, p in zip(matrix, pattern):
        if p == '*':
            continue
        if p == 'T':
            if m == 'F':
                return False
        elif m != p:
            return False
    return True


def _covers(matrix: str) -> bool:
    return any(_matches(matrix, p) for p in _COVERS_PATTERNS)


def _is_disjoint(matrix: str) -> bool:
    return _matches(matrix, 'FF*FF****')


def _polygonal_parts(geom) -> list[Polygon]:
    """Polygons contained in *geom*; lines and points are dropped."""
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom] if geom.area > 0 else []
    if isinstance(geom, (MultiPolygon, GeometryCollection)):
        parts = []
        for g in geom.geoms:
            parts.extend(_polygonal_parts(g))
        return parts
    return []


def _region_area(region_id: str, polygons: list[Polygon]) -> RegionArea:
    if len(polygons) == 1:
        geom = polygons[0]
    else:
        geom = MultiPolygon(polygons)
    # fixed ring orientation and start vertex so output is reproducible
    geom = shapely.normalize(geom)

    outer, inner = [], []
    for poly in getattr(geom, "geoms", [geom]):
        outer.append(encode_ring(poly.exterior.coords))
        for interior in poly.interiors:
            inner.append(encode_ring(interior.coords))
    return RegionArea(region_id, outer, inner)


def classify_cell(cell: Cell, index: SpatialIndex) -> CellResult:
    """Classify every candidate region of *index* against *cell*.

    Regions covering the whole cell are only listed by id; regions that
    overlap it partially are clipped to the cell and stored as fixed-point
    rings.
    """
    bounds = cell.to_polygon()
    containing_ids = []
    partial_areas = []

    for region in index.query(cell.bounds):
        matrix = region.polygon.relate(bounds)
        if _covers(matrix):
            containing_ids.append(region.id)
        elif not _is_disjoint(matrix):
            try:
                clipped = region.polygon.intersection(bounds)
            except GEOSException as e:
                logger.error(f"Clipping {region.id} to cell ({cell.x}, {cell.y}) failed: {e}")
                raise InvalidGeometryError(
                    f"Cannot clip region {region.id} to cell ({cell.x}, {cell.y})") from e
            polygons = _polygonal_parts(clipped)
            if not polygons:
                logger.debug(f"Region {region.id} only touches cell ({cell.x}, {cell.y}) "
                             f"({clipped.geom_type}); skipped")
                continue
            partial_areas.append(_region_area(region.id, polygons))

    return CellResult(containing_ids, partial_areas)
