"""Load precision study results from the metrics CSV.

Example:
    >>> from fpstudy.analysis import load_results
    >>> df = load_results("results/smoke.csv", algos=["matmul"])
    >>> df.groupby("precision")["rel_error"].mean()
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import pandas as pd

from fpstudy.experiments.sink import CSV_COLUMNS


def load_results(
    path: str,
    algos: Optional[List[str]] = None,
    precisions: Optional[List[str]] = None,
) -> pd.DataFrame:
    """Read a metrics CSV into a DataFrame.

    The converged column is returned as bool and each row's params_json is
    decoded into a dict in the params column.

    Args:
        path: Metrics CSV written by CsvMetricsSink
        algos: Keep only these algorithms (None keeps all)
        precisions: Keep only these canonical precision names (None keeps all)

    Returns:
        DataFrame with the CSV columns plus params

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If expected columns are missing
    """
    path_obj = Path(path)
    if not path_obj.exists():
        raise FileNotFoundError(f"Results file not found: {path}")

    df = pd.read_csv(path_obj)
    missing = [column for column in CSV_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Results file missing columns: {', '.join(missing)}")
    df["size"] = df["size"].astype(str)

    if algos:
        df = df[df["algo"].isin(algos)]
    if precisions:
        df = df[df["precision"].isin(precisions)]

    df = df.reset_index(drop=True)
    df["converged"] = df["converged"].astype(int).astype(bool)
    df["params"] = [json.loads(text) for text in df["params_json"]]
    return df


__all__ = [
    "load_results",
]
