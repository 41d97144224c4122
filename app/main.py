"""FastAPI application exposing area aggregation over posted GeoJSON."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from aggregate_areas import aggregate
from aggregation.aggregator import AggregatorStateError
from aggregation.pipeline import PipelineError
from config import AggregationConfig
from data.features import DEFAULT_KEY_ATTRIBUTE, FeatureSourceError, UnsupportedGeometryPolicy, features_from_payload

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="City Area Aggregation Service", version="0.1.0")


class AggregateRequest(BaseModel):
    """GeoJSON FeatureCollection plus optional aggregation settings."""

    type: str = Field("FeatureCollection", description="GeoJSON object type")
    features: List[Dict[str, Any]] = Field(default_factory=list, description="GeoJSON features")
    key_attribute: str = Field(DEFAULT_KEY_ATTRIBUTE, description="Property holding the group key")
    workers: Optional[int] = Field(None, ge=1, description="Worker threads (default: number of CPUs)")
    unsupported_geometry: UnsupportedGeometryPolicy = Field(
        UnsupportedGeometryPolicy.REJECT,
        description="How non-polygon geometries are treated",
    )


class AreaRow(BaseModel):
    key: str
    area: float


class AggregateResponse(BaseModel):
    header: List[str]
    rows: List[AreaRow]
    errors: int
    stats: Dict[str, int]


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/aggregate", response_model=AggregateResponse)
def aggregate_features(request: AggregateRequest) -> Dict[str, Any]:
    if request.type != "FeatureCollection":
        raise HTTPException(status_code=400, detail=f"Expected a FeatureCollection, got {request.type!r}")
    try:
        features = features_from_payload({"type": request.type, "features": request.features})
        config = AggregationConfig(
            key_attribute=request.key_attribute,
            unsupported_geometry=request.unsupported_geometry,
            show_progress=False,
        )
        if request.workers is not None:
            config = config.with_overrides(workers=request.workers)
    except (FeatureSourceError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        report = aggregate(features, config)
    except (PipelineError, AggregatorStateError) as exc:
        LOGGER.exception("Aggregation failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {
        "header": list(report.header),
        "rows": [{"key": row.key, "area": row.area} for row in report.rows],
        "errors": report.errors,
        "stats": report.stats.to_dict(),
    }


__all__ = ["app"]
