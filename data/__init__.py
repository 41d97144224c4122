"""Data package exposing feature extraction and geometry area utilities."""

from .features import (
    DEFAULT_KEY_ATTRIBUTE,
    FeatureRecord,
    FeatureSourceError,
    GeometryConversionError,
    UnsupportedGeometryPolicy,
    extract_record,
    load_features,
)
from .geometry import geometry_area

__all__ = [
    "DEFAULT_KEY_ATTRIBUTE",
    "FeatureRecord",
    "FeatureSourceError",
    "GeometryConversionError",
    "UnsupportedGeometryPolicy",
    "extract_record",
    "geometry_area",
    "load_features",
]
