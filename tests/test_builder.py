import io

import pytest
from shapely.geometry import MultiPolygon, Polygon, box

from boundaryraster.builder import RasterBuilder, calculate_region_areas, merge_regions
from boundaryraster.exceptions import InvalidGeometryError
from boundaryraster.models import Region
from boundaryraster.serializer import load_raster, write_raster


def _serialized(raster):
    buf = io.BytesIO()
    write_raster(raster, buf)
    return buf.getvalue()


def test_two_by_two_world(world):
    raster = RasterBuilder().build([world], 2, 2)

    assert raster.width == 2
    assert raster.height == 2
    assert raster.region_areas == {"WORLD": pytest.approx(360 * 180)}
    for cell in raster.cells:
        assert cell.containing_ids == ["WORLD"]
        assert cell.partial_areas == []


def test_sequential_and_parallel_output_are_byte_identical(sample_regions):
    sequential = RasterBuilder(workers=0).build(sample_regions, 24, 12)
    parallel = RasterBuilder(workers=4).build(sample_regions, 24, 12)
    assert _serialized(sequential) == _serialized(parallel)


def test_every_referenced_region_has_an_area(sample_regions):
    raster = RasterBuilder().build(sample_regions, 16, 8)
    for cell in raster.cells:
        assert cell.region_ids() <= set(raster.region_areas)
        assert not set(cell.containing_ids) & {a.region_id for a in cell.partial_areas}


def test_touching_parts_are_merged_before_indexing():
    region = Region("T", MultiPolygon([
        Polygon([(0, 0), (4, 0), (4, 4), (0, 4)]),
        Polygon([(4, 0), (8, 4), (4, 4)]),
    ]))
    merged = merge_regions([region])
    assert len(merged) == 1
    assert len(merged[0].polygon.geoms) == 1
    assert merged[0].polygon.area == pytest.approx(24.0)


def test_unusable_regions_are_dropped():
    regions = [Region("", box(0, 0, 1, 1)), Region("OK", box(0, 0, 1, 1))]
    assert list(calculate_region_areas(regions)) == ["OK"]
    raster = RasterBuilder().build(regions, 4, 2)
    ids = set().union(*(c.region_ids() for c in raster.cells))
    assert ids == {"OK"}


def test_merge_failure_aborts_build():
    square = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    bad = Region("BAD", MultiPolygon([square, square]))
    with pytest.raises(InvalidGeometryError):
        RasterBuilder().build([bad], 2, 2)


def test_duplicate_region_ids_abort_build():
    regions = [Region("A", box(0, 0, 15, 15)), Region("A", box(-40, -40, 40, 40))]
    with pytest.raises(ValueError, match="Duplicate region id: A"):
        RasterBuilder().build(regions, 36, 18)
    with pytest.raises(ValueError, match="Duplicate"):
        merge_regions(regions)


def test_progress_reaches_one(world):
    calls = []
    RasterBuilder(on_progress=calls.append).build([world], 3, 3)
    assert calls[-1] == 1.0


def test_generate_writes_file(tmp_path, sample_regions):
    path = RasterBuilder().generate(sample_regions, 8, 4, tmp_path / "out" / "boundaries.ser")
    raster = load_raster(path)
    assert raster.width == 8
    assert len(raster.cells) == 32
    assert set(raster.region_areas) == {"AA", "BB", "CC", "DD"}


def test_invalid_size(world):
    with pytest.raises(ValueError):
        RasterBuilder().build([world], 2, 0)
