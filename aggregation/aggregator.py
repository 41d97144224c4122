"""Thread-safe accumulation of areas per group key."""
from __future__ import annotations

import threading
from contextlib import ExitStack
from typing import Dict, List, Tuple


class AggregatorStateError(RuntimeError):
    """Raised when an aggregator is used after it has been drained."""


class AreaAggregator:
    """Shared mapping from group key to accumulated area.

    ``accumulate`` may be called concurrently from any number of threads.
    ``drain`` is called exactly once, after every writer has finished.
    """

    def accumulate(self, key: str, delta: float) -> None:
        raise NotImplementedError

    def drain(self) -> List[Tuple[str, float]]:
        raise NotImplementedError

    def __len__(self) -> int:
        raise NotImplementedError


class LockedAreaAggregator(AreaAggregator):
    """Single lock around the whole mapping."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._areas: Dict[str, float] = {}
        self._drained = False

    def accumulate(self, key: str, delta: float) -> None:
        with self._lock:
            if self._drained:
                raise AggregatorStateError(f"Cannot accumulate {key!r}: aggregator already drained")
            self._areas[key] = self._areas.get(key, 0.0) + delta

    def drain(self) -> List[Tuple[str, float]]:
        with self._lock:
            if self._drained:
                raise AggregatorStateError("Aggregator has already been drained")
            self._drained = True
            items = list(self._areas.items())
            self._areas = {}
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._areas)


class _Shard:
    __slots__ = ("lock", "areas")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.areas: Dict[str, float] = {}


class ShardedAreaAggregator(AreaAggregator):
    """Lock per shard, shard chosen by the hash of the key.

    Every key lives in exactly one shard, so per-key updates stay atomic and
    the final sums match :class:`LockedAreaAggregator` for any interleaving.
    """

    def __init__(self, shards: int = 16) -> None:
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards = [_Shard() for _ in range(shards)]
        self._state_lock = threading.Lock()
        self._drained = False

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def accumulate(self, key: str, delta: float) -> None:
        shard = self._shard_for(key)
        with shard.lock:
            # drain() flips the flag while holding every shard lock.
            if self._drained:
                raise AggregatorStateError(f"Cannot accumulate {key!r}: aggregator already drained")
            shard.areas[key] = shard.areas.get(key, 0.0) + delta

    def drain(self) -> List[Tuple[str, float]]:
        with self._state_lock:
            if self._drained:
                raise AggregatorStateError("Aggregator has already been drained")
            # Shard locks are always taken in list order.
            with ExitStack() as stack:
                for shard in self._shards:
                    stack.enter_context(shard.lock)
                self._drained = True
                items: List[Tuple[str, float]] = []
                for shard in self._shards:
                    items.extend(shard.areas.items())
                    shard.areas = {}
        return items

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.areas)
        return total


AGGREGATOR_KINDS = ("locked", "sharded")


def make_aggregator(kind: str = "locked", shards: int = 16) -> AreaAggregator:
    if kind == "locked":
        return LockedAreaAggregator()
    if kind == "sharded":
        return ShardedAreaAggregator(shards=shards)
    raise ValueError(f"Unknown aggregator kind: {kind!r} (expected one of {', '.join(AGGREGATOR_KINDS)})")


__all__ = [
    "AGGREGATOR_KINDS",
    "AggregatorStateError",
    "AreaAggregator",
    "LockedAreaAggregator",
    "ShardedAreaAggregator",
    "make_aggregator",
]
