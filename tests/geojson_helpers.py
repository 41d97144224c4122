from __future__ import annotations

from typing import Any, Dict, List, Optional


def square(x0: float, y0: float, size: float) -> List[List[float]]:
    return [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]


def polygon_feature(rings: List[List[List[float]]], city: Optional[Any] = None,
                    key_attribute: str = "N03_004") -> Dict[str, Any]:
    properties = {} if city is None else {key_attribute: city}
    return {
        "type": "Feature",
        "geometry": {"type": "Polygon", "coordinates": rings},
        "properties": properties,
    }


def square_feature(city: Optional[Any], size: float, x0: float = 0.0, y0: float = 0.0) -> Dict[str, Any]:
    return polygon_feature([square(x0, y0, size)], city)


def feature_collection(features: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": features}
