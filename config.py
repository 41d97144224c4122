"""Runtime configuration for area aggregation."""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional

from aggregation.aggregator import AGGREGATOR_KINDS
from aggregation.pipeline import default_workers
from data.features import DEFAULT_KEY_ATTRIBUTE, UnsupportedGeometryPolicy
from utils.io import load_json


@dataclass
class AggregationConfig:
    """Tunable parameters of an aggregation run.

    ``key_attribute`` names the grouping property (the MLIT N03 city field by
    default) and ``workers`` the size of the thread pool.
    """

    key_attribute: str = DEFAULT_KEY_ATTRIBUTE
    workers: int = field(default_factory=default_workers)
    unsupported_geometry: UnsupportedGeometryPolicy = UnsupportedGeometryPolicy.REJECT
    aggregator: str = "locked"
    shards: int = 16
    show_progress: bool = True

    def __post_init__(self) -> None:
        self.unsupported_geometry = UnsupportedGeometryPolicy(self.unsupported_geometry)
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.key_attribute, str) or not self.key_attribute:
            raise ValueError("key_attribute must be a non-empty string")
        for name in ("workers", "shards"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be at least 1")
        if not isinstance(self.show_progress, bool):
            raise ValueError(f"show_progress must be a boolean, got {self.show_progress!r}")
        if self.aggregator not in AGGREGATOR_KINDS:
            raise ValueError(f"aggregator must be one of {', '.join(AGGREGATOR_KINDS)}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "AggregationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**values)

    @classmethod
    def from_json(cls, path: os.PathLike[str] | str) -> "AggregationConfig":
        return cls.from_dict(load_json(path))

    def with_overrides(self, **overrides: Optional[Any]) -> "AggregationConfig":
        """Return a copy where every non-``None`` override replaces the current value."""
        values = asdict(self)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return type(self).from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        values["unsupported_geometry"] = self.unsupported_geometry.value
        return values


__all__ = ["AggregationConfig"]
