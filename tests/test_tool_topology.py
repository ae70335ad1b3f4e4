"""Tests for the topology toolkit (GeoJSON <-> TopoJSON)."""

import pytest
from shapely.geometry import shape

from gisconvert.core.errors import ConversionFailed
from gisconvert.toolkits.topology import _resolve_object_name, setup as topology_setup

from conftest import MockRegistrar


@pytest.fixture()
def reg():
    r = MockRegistrar()
    topology_setup(r)
    return r


# Two squares sharing the edge x=1
SHARED_EDGE = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "properties": {"name": "A"},
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]]},
        },
        {
            "type": "Feature",
            "properties": {"name": "B"},
            "geometry": {"type": "Polygon", "coordinates": [[[1, 0], [2, 0], [2, 1], [1, 1], [1, 0]]]},
        },
    ],
}


def test_geojson_to_topojson_default_object_name(reg):
    topo = reg.call("geojson_to_topojson", {"geojson": SHARED_EDGE})
    assert topo["type"] == "Topology"
    assert list(topo["objects"]) == ["data"]
    assert len(topo["objects"]["data"]["geometries"]) == 2
    assert "transform" in topo


def test_geojson_to_topojson_custom_name_unquantized(reg):
    topo = reg.call("geojson_to_topojson", {"geojson": SHARED_EDGE, "objectName": "parcels", "quantization": 0})
    assert list(topo["objects"]) == ["parcels"]
    assert "transform" not in topo


def test_geojson_to_topojson_rejects_tiny_quantization(reg):
    with pytest.raises(ConversionFailed):
        reg.call("geojson_to_topojson", {"geojson": SHARED_EDGE, "quantization": 1})


def test_topojson_round_trip_keeps_features(reg):
    topo = reg.call("geojson_to_topojson", {"geojson": SHARED_EDGE, "quantization": 0})
    fc = reg.call("topojson_to_geojson", {"topojson": topo})
    assert fc["type"] == "FeatureCollection"
    assert sorted(f["properties"]["name"] for f in fc["features"]) == ["A", "B"]
    assert {f["geometry"]["type"] for f in fc["features"]} == {"Polygon"}


def test_first_object_is_used_when_name_omitted():
    topo = {"type": "Topology", "objects": {"second": {}, "first": {}}, "arcs": []}
    assert _resolve_object_name(topo) == "second"
    assert _resolve_object_name(topo, "first") == "first"


@pytest.mark.parametrize(
    "topo, name",
    [
        ({"type": "Topology", "objects": {"data": {}}, "arcs": []}, "missing"),
        ({"type": "Topology", "objects": {}, "arcs": []}, None),
        ({"type": "Topology", "arcs": []}, None),
    ],
)
def test_unresolvable_object_fails(reg, topo, name):
    args = {"topojson": topo}
    if name:
        args["objectName"] = name
    with pytest.raises(ConversionFailed, match="No valid object found in TopoJSON"):
        reg.call("topojson_to_geojson", args)


MIXED = {
    "type": "FeatureCollection",
    "features": [
        {"type": "Feature", "properties": {"name": "well"}, "geometry": {"type": "Point", "coordinates": [5, 5]}},
        {
            "type": "Feature",
            "properties": {"name": "road"},
            "geometry": {"type": "LineString", "coordinates": [[0, 0], [4, 6], [10, 10]]},
        },
        {
            "type": "Feature",
            "properties": {"name": "field"},
            "geometry": {"type": "Polygon", "coordinates": [[[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]]]},
        },
    ],
}


def test_points_are_quantized_with_the_arcs(reg):
    topo = reg.call("geojson_to_topojson", {"geojson": MIXED})
    assert "transform" in topo
    point = next(g for g in topo["objects"]["data"]["geometries"] if g["type"] == "Point")
    assert all(float(c).is_integer() for c in point["coordinates"])
    assert all(0 <= c < 1e4 for c in point["coordinates"])


@pytest.mark.parametrize("quantization", [1e4, 1e6, 0])
def test_mixed_round_trip_within_tolerance(reg, quantization):
    topo = reg.call("geojson_to_topojson", {"geojson": MIXED, "quantization": quantization})
    fc = reg.call("topojson_to_geojson", {"topojson": topo})

    decoded = {f["properties"]["name"]: shape(f["geometry"]) for f in fc["features"]}
    assert set(decoded) == {"well", "road", "field"}
    # bbox spans 10 units, so one quantization step is about 10 / q
    tolerance = 10.0 / quantization * 2 if quantization else 1e-9
    for feature in MIXED["features"]:
        original = shape(feature["geometry"])
        got = decoded[feature["properties"]["name"]]
        assert got.geom_type == original.geom_type
        assert got.hausdorff_distance(original) <= tolerance


def test_round_trip_keeps_only_source_ids(reg):
    gj = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "id": "well-1", "properties": {"name": "well"},
             "geometry": {"type": "Point", "coordinates": [5, 5]}},
            {"type": "Feature", "properties": {"name": "road"},
             "geometry": {"type": "LineString", "coordinates": [[0, 0], [10, 10]]}},
        ],
    }
    topo = reg.call("geojson_to_topojson", {"geojson": gj})
    fc = reg.call("topojson_to_geojson", {"topojson": topo})

    by_name = {f["properties"]["name"]: f for f in fc["features"]}
    assert by_name["well"]["id"] == "well-1"
    assert "id" not in by_name["road"]
