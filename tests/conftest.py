import pytest
from shapely.geometry import Polygon, box

from boundaryraster.models import Region


@pytest.fixture
def world():
    return Region("WORLD", box(-180, -90, 180, 90))


@pytest.fixture
def sample_regions():
    """A handful of regions touching, overlapping cells and carrying holes."""
    return [
        Region("AA", box(-170, 10, -20, 80)),
        Region("BB", Polygon([(-20, 10), (40, 10), (40, 60), (-20, 60)],
                             [[(0, 20), (10, 20), (10, 30), (0, 30)]])),
        Region("CC", box(100, -60, 150, -5).union(box(160, 0, 175, 20))),
        Region("DD", box(-60, -85, 60, -45)),
    ]
