from shapely.geometry import LineString, box

from boundaryraster.index import SpatialIndex
from boundaryraster.models import Region


def test_query_returns_envelope_hits_in_input_order():
    regions = [
        Region("B", box(10, 10, 20, 20)),
        Region("A", box(0, 0, 5, 5)),
        Region("C", box(50, 50, 60, 60)),
    ]
    index = SpatialIndex(regions)

    assert len(index) == 3
    assert [r.id for r in index.query((-1, -1, 15, 15))] == ["B", "A"]
    assert [r.id for r in index.query((55, 55, 70, 70))] == ["C"]
    assert index.query((100, 100, 110, 110)) == []


def test_query_is_conservative():
    # L-shaped region whose envelope covers a corner the polygon does not
    from shapely.geometry import Polygon
    region = Region("L", Polygon([(0, 0), (10, 0), (10, 1), (1, 1), (1, 10), (0, 10)]))
    index = SpatialIndex([region])
    assert [r.id for r in index.query((8, 8, 9, 9))] == ["L"]


def test_unusable_regions_are_not_indexed():
    index = SpatialIndex([
        Region("", box(0, 0, 1, 1)),
        Region("LINE", LineString([(0, 0), (1, 1)])),
        Region("OK", box(0, 0, 1, 1)),
    ])
    assert [r.id for r in index.regions] == ["OK"]
    assert [r.id for r in index.query((0, 0, 1, 1))] == ["OK"]


def test_empty_index():
    index = SpatialIndex([])
    assert len(index) == 0
    assert index.query((-180, -90, 180, 90)) == []
