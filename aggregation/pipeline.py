"""Parallel fan-out of features into an area aggregator.

Each feature is processed independently: its geometry and group key are
extracted, the planar area is computed and folded into the shared aggregator.
Malformed geometries are counted and logged without stopping the batch; any
other worker failure aborts the whole run with :class:`PipelineError`.
"""
from __future__ import annotations

import logging
import os
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass
from typing import Deque, Dict, Optional, Sequence

from data.features import (
    DEFAULT_KEY_ATTRIBUTE,
    GeometryConversionError,
    RawFeature,
    UnsupportedGeometryPolicy,
    extract_record,
)
from data.geometry import geometry_area
from utils.progress import ProgressTracker

from .aggregator import AreaAggregator

LOGGER = logging.getLogger(__name__)

_ACCUMULATED = "accumulated"
_SKIPPED = "skipped"

# In-flight futures per worker thread.
_QUEUE_DEPTH = 4


class PipelineError(RuntimeError):
    """Raised when a worker fails for a reason other than a malformed geometry."""


@dataclass
class PipelineStats:
    total: int = 0
    accumulated: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def default_workers() -> int:
    return max(1, os.cpu_count() or 1)


class ParallelPipeline:
    def __init__(
        self,
        key_attribute: str = DEFAULT_KEY_ATTRIBUTE,
        workers: Optional[int] = None,
        unsupported_geometry: UnsupportedGeometryPolicy = UnsupportedGeometryPolicy.REJECT,
        show_progress: bool = False,
    ) -> None:
        if workers is not None and workers < 1:
            raise ValueError("workers must be at least 1")
        self.key_attribute = key_attribute
        self.workers = workers if workers is not None else default_workers()
        self.unsupported_geometry = UnsupportedGeometryPolicy(unsupported_geometry)
        self.show_progress = show_progress
        self.stats = PipelineStats()

    def _process_feature(self, raw_feature: RawFeature, aggregator: AreaAggregator) -> str:
        record = extract_record(raw_feature, self.key_attribute, self.unsupported_geometry)
        if record.geometry is None or record.key is None:
            return _SKIPPED
        aggregator.accumulate(record.key, geometry_area(record.geometry))
        return _ACCUMULATED

    @staticmethod
    def _record_outcome(outcome: str, stats: PipelineStats) -> None:
        if outcome == _ACCUMULATED:
            stats.accumulated += 1
        else:
            stats.skipped += 1

    @staticmethod
    def _record_error(index: int, exc: GeometryConversionError, stats: PipelineStats) -> None:
        stats.errors += 1
        LOGGER.warning("Feature %d skipped (%s): %s", index, exc.reason, exc)

    def _run_inline(self, features: Sequence[RawFeature], aggregator: AreaAggregator,
                    stats: PipelineStats, progress: ProgressTracker) -> None:
        for index, raw_feature in enumerate(features):
            try:
                outcome = self._process_feature(raw_feature, aggregator)
            except GeometryConversionError as exc:
                self._record_error(index, exc, stats)
            except Exception as exc:
                raise PipelineError(f"Feature {index} failed: {exc}") from exc
            else:
                self._record_outcome(outcome, stats)
            progress.update()

    def _run_pool(self, features: Sequence[RawFeature], aggregator: AreaAggregator,
                  stats: PipelineStats, progress: ProgressTracker) -> None:
        pool_workers = min(self.workers, len(features))
        window = pool_workers * _QUEUE_DEPTH
        remaining: Deque[int] = deque(range(len(features)))
        future_to_index: Dict[Future, int] = {}

        executor = ThreadPoolExecutor(max_workers=pool_workers, thread_name_prefix="area-worker")
        try:
            def submit_next() -> bool:
                if not remaining:
                    return False
                index = remaining.popleft()
                future = executor.submit(self._process_feature, features[index], aggregator)
                future_to_index[future] = index
                return True

            while len(future_to_index) < window and submit_next():
                pass

            while future_to_index:
                done, _ = wait(list(future_to_index), return_when=FIRST_COMPLETED)
                for future in done:
                    index = future_to_index.pop(future)
                    try:
                        outcome = future.result()
                    except GeometryConversionError as exc:
                        self._record_error(index, exc, stats)
                    except Exception as exc:
                        raise PipelineError(f"Feature {index} failed: {exc}") from exc
                    else:
                        self._record_outcome(outcome, stats)
                    progress.update()
                while len(future_to_index) < window and submit_next():
                    pass
        finally:
            # Waits for running workers so nothing touches the aggregator after return.
            executor.shutdown(wait=True, cancel_futures=True)

    def run(self, features: Sequence[RawFeature], aggregator: AreaAggregator) -> int:
        """Fold every feature of *features* into *aggregator*.

        Returns the number of features whose geometry could not be converted.
        The call returns only once every worker has finished.
        """
        stats = PipelineStats(total=len(features))
        self.stats = stats
        progress = ProgressTracker(len(features), enabled=self.show_progress)
        try:
            if self.workers > 1 and len(features) > 1:
                self._run_pool(features, aggregator, stats, progress)
            else:
                self._run_inline(features, aggregator, stats, progress)
        finally:
            progress.close()

        if stats.errors:
            LOGGER.warning("%d of %d features had malformed geometry", stats.errors, stats.total)
        LOGGER.info(
            "Aggregated %d features (%d skipped, %d errors) with %d workers",
            stats.accumulated,
            stats.skipped,
            stats.errors,
            self.workers,
        )
        return stats.errors


__all__ = ["ParallelPipeline", "PipelineError", "PipelineStats", "default_workers"]
