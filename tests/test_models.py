import pytest
from shapely.geometry import LineString, Polygon, box

from boundaryraster.models import Cell, CellResult, Raster, Region, RegionArea


def test_region_is_indexable():
    assert Region("DE", box(0, 0, 1, 1)).is_indexable
    assert not Region("", box(0, 0, 1, 1)).is_indexable
    assert not Region(None, box(0, 0, 1, 1)).is_indexable
    assert not Region("L", LineString([(0, 0), (1, 1)])).is_indexable
    assert not Region("E", Polygon()).is_indexable


def test_cell_polygon_matches_bounds():
    cell = Cell.at(3, 1, 4, 2)
    assert cell.to_polygon().bounds == cell.bounds
    assert cell.index(4) == 7


def test_cell_result_region_ids():
    result = CellResult(["A"], [RegionArea("B", [[(0, 0), (1, 0), (1, 1)]])])
    assert result.region_ids() == {"A", "B"}


def test_raster_validates_size():
    with pytest.raises(ValueError):
        Raster(0, 1, [], {})
    with pytest.raises(ValueError):
        Raster(2, 2, [CellResult()], {})


def test_raster_cell_at():
    cells = [CellResult([str(i)]) for i in range(6)]
    raster = Raster(3, 2, cells, {})
    assert raster.cell_at(2, 1).containing_ids == ["5"]
    assert raster.cell_at(0, 1).containing_ids == ["3"]
