from __future__ import annotations

from typing import Any, Dict, List

import pytest

from geojson_helpers import square, square_feature


@pytest.fixture
def city_features() -> List[Dict[str, Any]]:
    """Three cities with integer areas so sums are exact regardless of order."""
    features = []
    for idx in range(20):
        features.append(square_feature("さいたま市", 2.0, x0=idx * 3.0))
    for idx in range(10):
        features.append(square_feature("川越市", 3.0, x0=idx * 4.0))
    features.append(
        {
            "type": "Feature",
            "geometry": {
                "type": "MultiPolygon",
                "coordinates": [[square(0.0, 0.0, 1.0)], [square(5.0, 5.0, 2.0)]],
            },
            "properties": {"N03_004": "秩父市"},
        }
    )
    return features


@pytest.fixture
def city_totals() -> Dict[str, float]:
    return {"さいたま市": 80.0, "川越市": 90.0, "秩父市": 5.0}
