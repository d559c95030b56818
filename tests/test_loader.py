import json

import pytest
from shapely.geometry import Point, box

from boundaryraster.loader import load_geojson, regions_from_pairs


def _feature(props, geometry, **extra):
    return {"type": "Feature", "properties": props, "geometry": geometry, **extra}


def _square(x, y, size=1):
    return {"type": "Polygon",
            "coordinates": [[[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]]}


@pytest.fixture
def geojson_file(tmp_path):
    data = {
        "type": "FeatureCollection",
        "features": [
            _feature({"id": "DE"}, _square(5, 47)),
            _feature({"id": "FX"}, _square(0, 43)),
            _feature({"id": "PT"}, {"type": "Point", "coordinates": [0, 0]}),
            _feature({"name": "nameless"}, _square(20, 20)),
            _feature({}, _square(30, 30), id="AT"),
            _feature({"id": "XX"}, None),
        ],
    }
    path = tmp_path / "boundaries.geojson"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_geojson(geojson_file):
    regions = load_geojson(geojson_file, exclude={"FX"})
    assert [r.id for r in regions] == ["DE", "AT"]
    assert regions[0].polygon.bounds == (5.0, 47.0, 6.0, 48.0)


def test_exclusion_list_is_a_parameter(geojson_file):
    regions = load_geojson(geojson_file, exclude=())
    assert [r.id for r in regions] == ["DE", "FX", "AT"]


def test_custom_id_property(geojson_file):
    regions = load_geojson(geojson_file, id_property="name")
    assert [r.id for r in regions] == ["nameless"]


def test_not_geojson(tmp_path):
    path = tmp_path / "x.json"
    path.write_text('{"type": "Topology"}')
    with pytest.raises(ValueError):
        load_geojson(path)


def test_regions_from_pairs_rejects_duplicates():
    with pytest.raises(ValueError, match="Duplicate"):
        regions_from_pairs([("A", box(0, 0, 1, 1)), ("A", box(2, 2, 3, 3))])


def test_regions_from_pairs_skips_unusable():
    regions = regions_from_pairs([
        ("A", box(0, 0, 1, 1)),
        ("", box(0, 0, 1, 1)),
        (None, box(0, 0, 1, 1)),
        ("P", Point(0, 0)),
        ("EU", box(0, 0, 1, 1)),
    ], exclude={"EU"})
    assert [r.id for r in regions] == ["A"]
