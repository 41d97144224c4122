"""Turn a drained aggregator into report rows ordered by area."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .aggregator import AreaAggregator

REPORT_HEADER: Tuple[str, str] = ("City", "Area")


@dataclass(frozen=True)
class ResultRow:
    key: str
    area: float


def _sort_key(row: ResultRow) -> Tuple[float, str]:
    # NaN sorts after every real number.
    area = -math.inf if math.isnan(row.area) else row.area
    return (-area, row.key)


def sort_rows(items: Iterable[Tuple[str, float]]) -> List[ResultRow]:
    """Rows sorted by area descending, equal areas by key ascending."""
    rows = [ResultRow(key=key, area=float(area)) for key, area in items]
    rows.sort(key=_sort_key)
    return rows


def order(aggregator: AreaAggregator) -> List[ResultRow]:
    """Drain *aggregator* and return its totals in report order."""
    return sort_rows(aggregator.drain())


__all__ = ["REPORT_HEADER", "ResultRow", "order", "sort_rows"]
