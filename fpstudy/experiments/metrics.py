"""Accuracy and runtime metrics for one kernel run.

Key metrics:
  - relative_error: ||truth - approx|| / max(||truth||, eps), L2 norms
  - count_nan / count_inf: non-finite outputs (kernels propagate them)
  - Timer: wall-clock milliseconds around the kernel call
"""

from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Sequence


@dataclass
class RunMetrics:
    """Metrics recorded for a single (algorithm, precision, trial) run."""

    relative_error: float = 0.0
    iterations: int = 0
    converged: bool = False
    nan_count: int = 0
    inf_count: int = 0
    elapsed_ms: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def vector_norm(values: Iterable[float]) -> float:
    total = 0.0
    for v in values:
        total += v * v
    return math.sqrt(total)


def relative_error(
    truth: Sequence[float],
    approx: Sequence[float],
    eps: float = 1e-12,
) -> float:
    """Relative L2 error of approx against truth.

    Raises:
        ValueError: If the sequences have different lengths
    """
    if len(truth) != len(approx):
        raise ValueError(
            f"Vector size mismatch in relative_error: {len(truth)} != {len(approx)}"
        )
    diff = [float(t) - float(a) for t, a in zip(truth, approx)]
    return vector_norm(diff) / max(vector_norm(float(t) for t in truth), eps)


def count_nan(values: Iterable) -> int:
    return sum(1 for v in values if math.isnan(float(v)))


def count_inf(values: Iterable) -> int:
    return sum(1 for v in values if math.isinf(float(v)))


class Timer:
    """Wall-clock timer started on construction.

    Example:
        >>> timer = Timer()
        >>> result = run_kernel()
        >>> timer.elapsed_ms()
    """

    def __init__(self):
        self._start = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000.0


__all__ = [
    "RunMetrics",
    "vector_norm",
    "relative_error",
    "count_nan",
    "count_inf",
    "Timer",
]
