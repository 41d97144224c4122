"""Utility helpers for input/output operations."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence, Tuple

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

DEFAULT_HEADER: Tuple[str, str] = ("City", "Area")

_REPORT_SCHEMA = pa.schema(
    [
        pa.field(DEFAULT_HEADER[0], pa.string()),
        pa.field(DEFAULT_HEADER[1], pa.float64()),
    ]
)


def load_json(path: os.PathLike[str] | str) -> Dict[str, Any]:
    """Load a JSON file from *path* and return the decoded dictionary."""
    return json.loads(Path(path).read_text(encoding="utf-8"))


def report_frame(rows: Iterable[Any], header: Sequence[str] = DEFAULT_HEADER) -> pd.DataFrame:
    """Build a two-column frame from ``(key, area)`` pairs or row objects, keeping their order."""
    records = []
    for row in rows:
        if isinstance(row, tuple):
            key, area = row
        else:
            key, area = row.key, row.area
        records.append((key, float(area)))
    df = pd.DataFrame.from_records(records, columns=list(header))
    df[header[1]] = df[header[1]].astype("float64")
    return df


def write_report(rows: Iterable[Any], path: os.PathLike[str] | str,
                 header: Sequence[str] = DEFAULT_HEADER) -> Path:
    """Write *rows* to *path* as CSV, or as Parquet when the suffix is ``.parquet``.

    Rows are written in the order given.
    """
    path_obj = Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    df = report_frame(rows, header)
    if path_obj.suffix.lower() == ".parquet":
        schema = _REPORT_SCHEMA if tuple(header) == DEFAULT_HEADER else None
        table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
        pq.write_table(table, path_obj.as_posix())
    else:
        df.to_csv(path_obj, index=False, encoding="utf-8")
    return path_obj
