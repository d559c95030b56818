"""Bounding-box index over region polygons."""

import logging
from typing import Iterable

import numpy as np
from shapely import STRtree
from shapely.geometry import box

from .models import Region

logger = logging.getLogger(__name__)


class SpatialIndex:
    """Bulk-loaded STR-tree over the envelopes of indexable regions.

    ``query`` is conservative: it returns every region whose bounding box
    intersects the rectangle, the exact relation is decided by the caller.
    """

    def __init__(self, regions: Iterable[Region]):
        self.regions: list[Region] = []
        for region in regions:
            if not region.is_indexable:
                logger.warning(f"Skipping region without usable id or area: {region.id!r}")
                continue
            self.regions.append(region)
        self._tree = STRtree([r.polygon for r in self.regions])
        logger.info(f"Indexed {len(self.regions)} regions")

    def __len__(self) -> int:
        return len(self.regions)

    def query(self, bounds: tuple) -> list[Region]:
        """Regions whose envelope intersects *bounds* (minx, miny, maxx, maxy).

        Results come back in input order so repeated runs see the same
        sequence of candidates.
        """
        if not self.regions:
            return []
        hits = self._tree.query(box(*bounds))
        return [self.regions[i] for i in np.sort(hits)]
