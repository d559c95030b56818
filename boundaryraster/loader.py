"""Load boundary regions from GeoJSON or (id, geometry) pairs."""

import json
import logging
import pathlib
from typing import Iterable, Union

from shapely.geometry import MultiPolygon, Polygon, shape

from .constants import EXCLUDED_REGION_IDS
from .models import Region

logger = logging.getLogger(__name__)


def regions_from_pairs(pairs: Iterable[tuple], exclude=EXCLUDED_REGION_IDS) -> list[Region]:
    """Build regions from ``(area_id, geometry)`` pairs.

    Pairs with a missing id, an excluded id or non-polygonal geometry are
    skipped.  Raises ValueError on duplicate ids.
    """
    exclude = frozenset(exclude or ())
    regions = []
    seen = set()
    skipped = 0
    for area_id, geom in pairs:
        if not isinstance(area_id, str) or not area_id or area_id in exclude:
            skipped += 1
            continue
        if not isinstance(geom, (Polygon, MultiPolygon)) or geom.is_empty:
            logger.warning(f"Skipping {area_id}: geometry is "
                           f"{getattr(geom, 'geom_type', type(geom).__name__)}, not polygonal")
            skipped += 1
            continue
        if area_id in seen:
            raise ValueError(f"Duplicate region id: {area_id}")
        seen.add(area_id)
        regions.append(Region(area_id, geom))
    if skipped:
        logger.info(f"Skipped {skipped} features (excluded, unnamed or not polygonal)")
    return regions


def _feature_id(feature: dict, id_property: str):
    props = feature.get('properties') or {}
    if id_property in props:
        return props[id_property]
    return feature.get(id_property)


def load_geojson(path: Union[str, pathlib.Path], id_property: str = "id",
                 exclude=EXCLUDED_REGION_IDS) -> list[Region]:
    """Read regions from a GeoJSON FeatureCollection.

    The region id is taken from ``properties[id_property]``, falling back to
    the feature's own member of that name.
    """
    path = pathlib.Path(path)
    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    if data.get('type') == 'FeatureCollection':
        features = data.get('features', [])
    elif data.get('type') == 'Feature':
        features = [data]
    else:
        raise ValueError(f"{path} is not a GeoJSON Feature or FeatureCollection")

    pairs = []
    for feature in features:
        geometry = feature.get('geometry')
        geom = shape(geometry) if geometry else None
        pairs.append((_feature_id(feature, id_property), geom))

    regions = regions_from_pairs(pairs, exclude=exclude)
    logger.info(f"Loaded {len(regions)} regions from {path.name}")
    return regions
