"""Thread-safe progress reporting for feature processing."""
from __future__ import annotations

import logging
import threading
from typing import Optional

from tqdm import tqdm

LOGGER = logging.getLogger(__name__)


class ProgressTracker:
    def __init__(self, total: int, enabled: bool = True, desc: str = "Aggregating features"):
        self._lock = threading.Lock()
        self._total = total
        self._count = 0
        self._bar: Optional[tqdm] = None
        self._closed = False

        if enabled and total > 0:
            self._bar = tqdm(total=total, desc=desc, unit="feature")
        if total > 0:
            LOGGER.info("Processing %s features", total)

    def update(self, n: int = 1) -> None:
        with self._lock:
            self._count += n
            if self._bar is not None:
                self._bar.update(n)
            if self._total > 0 and self._count >= self._total:
                self._finalize_locked()

    def close(self) -> None:
        with self._lock:
            self._finalize_locked()

    def _finalize_locked(self) -> None:
        if self._closed:
            return
        if self._bar is not None:
            self._bar.close()
            self._bar = None
        if self._total > 0 and self._count >= self._total:
            LOGGER.info("Feature processing finished")
        self._closed = True


__all__ = ["ProgressTracker"]
