import json

import pytest
from shapely.geometry import Point, Polygon

from data.features import (
    FeatureSourceError,
    GeometryConversionError,
    UnsupportedGeometryPolicy,
    convert_geometry,
    extract_key,
    extract_record,
    features_from_payload,
    load_features,
)
from geojson_helpers import feature_collection, polygon_feature, square, square_feature


def test_extract_record_polygon_and_key():
    record = extract_record(square_feature("川口市", 2.0))
    assert isinstance(record.geometry, Polygon)
    assert record.key == "川口市"


def test_custom_key_attribute():
    feature = polygon_feature([square(0, 0, 1)], "Tokorozawa", key_attribute="name")
    assert extract_record(feature, key_attribute="name").key == "Tokorozawa"
    assert extract_record(feature).key is None


@pytest.mark.parametrize("properties", [None, {}, {"N03_004": None}, {"N03_004": 11201}, {"other": "x"}])
def test_missing_or_non_string_key(properties):
    assert extract_key(properties) is None


def test_missing_geometry_is_not_an_error():
    record = extract_record({"type": "Feature", "geometry": None, "properties": {"N03_004": "A"}})
    assert record.geometry is None
    assert record.key == "A"


def test_non_mapping_properties_are_ignored():
    feature = square_feature("A", 1.0)
    feature["properties"] = ["A"]
    assert extract_record(feature).key is None


def test_degenerate_ring_is_malformed():
    with pytest.raises(GeometryConversionError) as excinfo:
        convert_geometry({"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [0, 0]]]})
    assert excinfo.value.reason == "malformed_geometry"


@pytest.mark.parametrize(
    "coordinates",
    [
        [[[0, 0], [1, 1]]],
        [[[0, 0], [1, 0], [0, 0], [0, 0]]],
        [square(0, 0, 2), [[0.5, 0.5], [1.0, 1.0], [0.5, 0.5]]],
    ],
)
def test_rings_need_three_distinct_points(coordinates):
    with pytest.raises(GeometryConversionError) as excinfo:
        convert_geometry({"type": "Polygon", "coordinates": coordinates})
    assert excinfo.value.reason == "malformed_geometry"


def test_degenerate_multipolygon_part_is_malformed():
    with pytest.raises(GeometryConversionError):
        convert_geometry(
            {"type": "MultiPolygon", "coordinates": [[square(0, 0, 1)], [[[5, 5], [6, 5], [5, 5]]]]}
        )


@pytest.mark.parametrize("raw_feature", [None, "feature", 5, ["Feature"]])
def test_non_mapping_feature_is_malformed(raw_feature):
    with pytest.raises(GeometryConversionError) as excinfo:
        extract_record(raw_feature)
    assert excinfo.value.reason == "malformed_feature"


def test_empty_ring_set_is_malformed():
    with pytest.raises(GeometryConversionError) as excinfo:
        convert_geometry({"type": "Polygon", "coordinates": []})
    assert excinfo.value.reason == "empty_geometry"


def test_non_mapping_geometry_is_malformed():
    with pytest.raises(GeometryConversionError):
        convert_geometry("POLYGON ((0 0, 1 0, 1 1, 0 0))")


def test_unsupported_geometry_rejected_by_default():
    with pytest.raises(GeometryConversionError) as excinfo:
        convert_geometry({"type": "Point", "coordinates": [1.0, 2.0]})
    assert excinfo.value.reason == "unsupported_geometry"


def test_unsupported_geometry_kept_with_zero_policy():
    geometry = convert_geometry({"type": "Point", "coordinates": [1.0, 2.0]}, UnsupportedGeometryPolicy.ZERO_AREA)
    assert isinstance(geometry, Point)


def test_features_from_payload_variants():
    feature = square_feature("A", 1.0)
    assert features_from_payload(feature_collection([feature, feature])) == [feature, feature]
    assert features_from_payload(feature) == [feature]
    assert features_from_payload([feature]) == [feature]
    assert features_from_payload({"type": "FeatureCollection", "features": None}) == []
    with pytest.raises(FeatureSourceError):
        features_from_payload({"type": "Polygon", "coordinates": []})
    with pytest.raises(FeatureSourceError):
        features_from_payload("not geojson")


def test_load_geojson_keeps_malformed_features_raw(tmp_path):
    malformed = {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[[0, 0]]]}, "properties": {}}
    path = tmp_path / "cities.geojson"
    path.write_text(
        json.dumps(feature_collection([square_feature("さいたま市", 1.0), malformed]), ensure_ascii=False),
        encoding="utf-8",
    )
    features = load_features(path)
    assert len(features) == 2
    assert features[0]["properties"]["N03_004"] == "さいたま市"


def test_load_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        load_features(tmp_path / "missing.geojson")


def test_load_vector_file_through_geopandas(tmp_path):
    gpd = pytest.importorskip("geopandas")
    gdf = gpd.GeoDataFrame(
        {"N03_004": ["A", "B"]},
        geometry=[Polygon(square(0, 0, 2)), Polygon(square(5, 5, 1))],
        crs="EPSG:4326",
    )
    path = tmp_path / "cities.gpkg"
    gdf.to_file(path, driver="GPKG")

    features = load_features(path)
    assert [feature["properties"]["N03_004"] for feature in features] == ["A", "B"]
    record = extract_record(features[0])
    assert record.key == "A"
    assert isinstance(record.geometry, Polygon)
