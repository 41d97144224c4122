"""Feature records and the loaders that produce them.

A raw feature is a GeoJSON-like mapping with optional ``geometry`` and
``properties`` members. :func:`extract_record` turns it into a
:class:`FeatureRecord` holding a shapely geometry and the grouping key.
"""
from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Union

from shapely.errors import ShapelyError
from shapely.geometry import MultiPolygon, shape
from shapely.geometry.base import BaseGeometry

LOGGER = logging.getLogger(__name__)

DEFAULT_KEY_ATTRIBUTE = "N03_004"
POLYGONAL_TYPES = frozenset({"Polygon", "MultiPolygon"})
GEOJSON_SUFFIXES = frozenset({".geojson", ".json"})
MIN_RING_POINTS = 3

RawFeature = Mapping[str, Any]


class UnsupportedGeometryPolicy(str, enum.Enum):
    """What to do with geometries that are neither polygons nor multipolygons."""

    REJECT = "reject"
    ZERO_AREA = "zero"


class GeometryConversionError(RuntimeError):
    """Raised when a feature geometry cannot be converted to a shapely geometry."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class FeatureSourceError(RuntimeError):
    """Raised when an input file does not contain any feature collection."""


@dataclass(frozen=True)
class FeatureRecord:
    geometry: Optional[BaseGeometry]
    key: Optional[str]


def convert_geometry(
    raw_geometry: Optional[Mapping[str, Any]],
    policy: UnsupportedGeometryPolicy = UnsupportedGeometryPolicy.REJECT,
) -> Optional[BaseGeometry]:
    """Convert a GeoJSON geometry mapping into a shapely geometry.

    ``None`` means the feature has no geometry and is returned unchanged.
    Malformed coordinates, empty polygonal geometries and (under the
    ``REJECT`` policy) non-polygonal geometries raise
    :class:`GeometryConversionError`.
    """
    if raw_geometry is None:
        return None
    if not isinstance(raw_geometry, Mapping):
        raise GeometryConversionError(
            "malformed_geometry", f"Geometry must be a mapping, got {type(raw_geometry).__name__}"
        )

    geom_type = raw_geometry.get("type")
    if geom_type not in POLYGONAL_TYPES and policy is UnsupportedGeometryPolicy.REJECT:
        raise GeometryConversionError("unsupported_geometry", f"Unsupported geometry type: {geom_type!r}")

    try:
        geometry = shape(raw_geometry)
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError, AttributeError) as exc:
        raise GeometryConversionError("malformed_geometry", f"Failed to convert {geom_type} geometry: {exc}") from exc

    if geom_type in POLYGONAL_TYPES:
        if geometry.is_empty:
            raise GeometryConversionError("empty_geometry", f"{geom_type} geometry has no rings")
        _check_rings(geometry)
    return geometry


def _polygon_rings(geometry: BaseGeometry) -> Iterator[Any]:
    polygons = geometry.geoms if isinstance(geometry, MultiPolygon) else [geometry]
    for polygon in polygons:
        if polygon.is_empty:
            continue
        yield polygon.exterior
        yield from polygon.interiors


def _check_rings(geometry: BaseGeometry) -> None:
    # A ring needs three distinct vertices; some shapely releases accept shorter rings.
    for ring in _polygon_rings(geometry):
        distinct = {tuple(coord) for coord in ring.coords}
        if len(distinct) < MIN_RING_POINTS:
            raise GeometryConversionError(
                "malformed_geometry",
                f"Ring has {len(distinct)} distinct points, at least {MIN_RING_POINTS} are required",
            )


def extract_key(properties: Optional[Mapping[str, Any]], key_attribute: str = DEFAULT_KEY_ATTRIBUTE) -> Optional[str]:
    if not properties:
        return None
    value = properties.get(key_attribute)
    if isinstance(value, str):
        return value
    return None


def extract_record(
    raw_feature: RawFeature,
    key_attribute: str = DEFAULT_KEY_ATTRIBUTE,
    policy: UnsupportedGeometryPolicy = UnsupportedGeometryPolicy.REJECT,
) -> FeatureRecord:
    if not isinstance(raw_feature, Mapping):
        raise GeometryConversionError(
            "malformed_feature", f"Feature must be a mapping, got {type(raw_feature).__name__}"
        )
    geometry = convert_geometry(raw_feature.get("geometry"), policy)
    properties = raw_feature.get("properties")
    if not isinstance(properties, Mapping):
        properties = None
    return FeatureRecord(geometry=geometry, key=extract_key(properties, key_attribute))


def features_from_payload(payload: Any) -> List[RawFeature]:
    """Return the raw features held by an already decoded GeoJSON *payload*."""
    if isinstance(payload, list):
        return list(payload)
    if not isinstance(payload, dict):
        raise FeatureSourceError(f"Expected a GeoJSON object, got {type(payload).__name__}")
    data_type = payload.get("type")
    if data_type == "FeatureCollection":
        return list(payload.get("features") or [])
    if data_type == "Feature":
        return [payload]
    raise FeatureSourceError(f"Unsupported GeoJSON type: {data_type}")


def _features_from_vector_file(path: Path) -> List[RawFeature]:
    import geopandas as gpd

    gdf = gpd.read_file(path)
    geometry_column = gdf.geometry.name
    features: List[RawFeature] = []
    property_columns = [column for column in gdf.columns if column != geometry_column]
    for row_dict in gdf.to_dict("records"):
        geom = row_dict.get(geometry_column)
        features.append(
            {
                "type": "Feature",
                "geometry": None if geom is None else geom.__geo_interface__,
                "properties": {column: row_dict.get(column) for column in property_columns},
            }
        )
    return features


def load_features(path: Union[str, Path]) -> List[RawFeature]:
    """Read raw features from *path*.

    GeoJSON files are decoded without converting geometries so that a single
    malformed feature cannot prevent the others from loading. Any other vector
    format is read through geopandas.
    """
    path = Path(path)
    if path.suffix.lower() in GEOJSON_SUFFIXES:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        features = features_from_payload(payload)
    else:
        features = _features_from_vector_file(path)
    LOGGER.info("Loaded %d features from %s", len(features), path)
    return features


__all__ = [
    "DEFAULT_KEY_ATTRIBUTE",
    "FeatureRecord",
    "FeatureSourceError",
    "GeometryConversionError",
    "RawFeature",
    "UnsupportedGeometryPolicy",
    "convert_geometry",
    "extract_key",
    "extract_record",
    "features_from_payload",
    "load_features",
]
