"""Concurrent area aggregation: shared accumulator, worker pipeline and ordering."""

from .aggregator import (
    AggregatorStateError,
    AreaAggregator,
    LockedAreaAggregator,
    ShardedAreaAggregator,
    make_aggregator,
)
from .ordering import REPORT_HEADER, ResultRow, order
from .pipeline import ParallelPipeline, PipelineError, PipelineStats

__all__ = [
    "AggregatorStateError",
    "AreaAggregator",
    "LockedAreaAggregator",
    "ParallelPipeline",
    "PipelineError",
    "PipelineStats",
    "REPORT_HEADER",
    "ResultRow",
    "ShardedAreaAggregator",
    "make_aggregator",
    "order",
]
