"""RasterBuilder — thin orchestrator that delegates to focused modules."""

import logging
import pathlib
import time
from typing import Iterable, Optional, Union

from .exceptions import InvalidGeometryError
from .index import SpatialIndex
from .merge import make_valid_region
from .models import Raster, Region
from .scheduler import GridScheduler, ProgressCallback
from .serializer import save_raster

logger = logging.getLogger(__name__)


def calculate_region_areas(regions: Iterable[Region]) -> dict[str, float]:
    """Raw planar area (square degrees) of every indexable region."""
    return {r.id: r.polygon.area for r in regions if r.is_indexable}


def merge_regions(regions: Iterable[Region]) -> list[Region]:
    """Replace each region's geometry with its Simple-Feature valid merge.

    A region that cannot be merged aborts the build: an invalid polygon would
    corrupt every cell it touches. Region ids must be unique.
    """
    merged = []
    seen = set()
    for region in regions:
        if not region.is_indexable:
            logger.warning(f"Skipping region without usable id or area: {region.id!r}")
            continue
        if region.id in seen:
            raise ValueError(f"Duplicate region id: {region.id}")
        seen.add(region.id)
        try:
            merged.append(Region(region.id, make_valid_region(region.polygon)))
        except InvalidGeometryError as e:
            logger.error(f"Cannot merge rings of region {region.id}: {e}")
            raise
    return merged


class RasterBuilder:
    def __init__(self, workers: int = 0,
                 on_progress: Optional[ProgressCallback] = None):
        """
        workers: 0 or 1 classifies cells sequentially, more uses a thread pool.
        on_progress: called with the completed fraction in [0, 1].
        """
        self.workers = workers
        self.on_progress = on_progress

    def build(self, regions: Iterable[Region], width: int, height: int) -> Raster:
        """Compute the raster for *regions* on a width x height grid."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid raster size {width}x{height}")
        regions = list(regions)
        logger.info(f"Building {width}x{height} raster from {len(regions)} regions")

        region_areas = calculate_region_areas(regions)

        t0 = time.perf_counter()
        merged = merge_regions(regions)
        logger.info(f"Merged touching rings of {len(merged)} regions "
                    f"in {time.perf_counter() - t0:.1f}s")

        index = SpatialIndex(merged)
        scheduler = GridScheduler(index, workers=self.workers,
                                  on_progress=self.on_progress)
        cells = scheduler.run(width, height)
        return Raster(width, height, cells, region_areas)

    def generate(self, regions: Iterable[Region], width: int, height: int,
                 output_path: Union[str, pathlib.Path]) -> pathlib.Path:
        """Build the raster and write it to *output_path*."""
        raster = self.build(regions, width, height)
        return save_raster(raster, output_path)
