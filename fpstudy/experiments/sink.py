"""Metrics sinks: one record per kernel run.

CsvMetricsSink appends rows to a CSV file through pandas so partial results
survive an interrupted sweep. MemorySink keeps rows in memory for tests and
interactive use.

CSV columns:
    algo, size, precision, seed, params_json, rel_error, iters,
    converged, n_nan, n_inf, elapsed_ms
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Protocol

import pandas as pd

CSV_COLUMNS = [
    "algo",
    "size",
    "precision",
    "seed",
    "params_json",
    "rel_error",
    "iters",
    "converged",
    "n_nan",
    "n_inf",
    "elapsed_ms",
]


class MetricsSink(Protocol):
    def record(self, row: Dict[str, Any]) -> None: ...


def _ordered(row: Dict[str, Any]) -> Dict[str, Any]:
    missing = [column for column in CSV_COLUMNS if column not in row]
    if missing:
        raise ValueError(f"Metrics row missing columns: {', '.join(missing)}")
    return {column: row[column] for column in CSV_COLUMNS}


class CsvMetricsSink:
    """Append metrics rows to a CSV file.

    The header is written on construction unless appending to a file that
    already exists.

    Attributes:
        path: Output CSV path
        rows_written: Rows recorded by this sink
    """

    def __init__(self, path: str, append: bool = False):
        self.path = Path(path)
        self.rows_written = 0
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not (append and self.path.exists()):
            pd.DataFrame(columns=CSV_COLUMNS).to_csv(self.path, index=False)

    def record(self, row: Dict[str, Any]) -> None:
        frame = pd.DataFrame([_ordered(row)], columns=CSV_COLUMNS)
        frame.to_csv(self.path, mode="a", header=False, index=False)
        self.rows_written += 1


class MemorySink:
    """Keep metrics rows in memory."""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []

    def record(self, row: Dict[str, Any]) -> None:
        self.rows.append(_ordered(row))

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.rows, columns=CSV_COLUMNS)


__all__ = [
    "CSV_COLUMNS",
    "MetricsSink",
    "CsvMetricsSink",
    "MemorySink",
]
