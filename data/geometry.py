"""Planar area helpers for polygonal geometries.

Areas are computed directly from ring coordinates with the shoelace formula so
that the result does not depend on ring orientation or on GEOS validity checks.
Coordinates are treated as planar; no geodesic correction is applied.
"""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry


def ring_signed_area(coords: Sequence[Sequence[float]]) -> float:
    """Signed shoelace area of *coords* (counter-clockwise positive).

    The ring is treated as implicitly closed, so a repeated closing point adds
    nothing. Rings with fewer than three points have zero area.
    """
    points = np.asarray(coords, dtype=np.float64)
    if points.ndim != 2 or points.shape[0] < 3 or points.shape[1] < 2:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    # Shift to the first vertex to limit cancellation on large coordinates.
    x = x - x[0]
    y = y - y[0]
    cross = x * np.roll(y, -1) - np.roll(x, -1) * y
    return float(cross.sum() / 2.0)


def polygon_area(polygon: Polygon) -> float:
    if polygon.is_empty:
        return 0.0
    area = abs(ring_signed_area(polygon.exterior.coords))
    for hole in polygon.interiors:
        area -= abs(ring_signed_area(hole.coords))
    return abs(area)


def geometry_area(geometry: Optional[BaseGeometry]) -> float:
    """Unsigned planar area of *geometry*.

    Polygons subtract their holes, multipolygons sum their parts and every
    other geometry kind (or ``None``) has zero area.
    """
    if geometry is None:
        return 0.0
    if isinstance(geometry, Polygon):
        return polygon_area(geometry)
    if isinstance(geometry, MultiPolygon):
        return float(sum(polygon_area(part) for part in geometry.geoms))
    return 0.0


__all__ = ["geometry_area", "polygon_area", "ring_signed_area"]
