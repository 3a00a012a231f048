"""Reductions shared by the generic kernels.

Kahan (compensated) summation tracks the rounding error lost in each
addition and feeds it back into the next one:

    y = value - compensation
    t = sum + y
    compensation = (t - sum) - y
    sum = t

The same reduction body runs over any precision scalar and over
np.float32 for the wide (32-bit working precision) accumulation mode.
"""

from __future__ import annotations

from typing import Iterable, TypeVar

import numpy as np

T = TypeVar("T")


def reduce_sum(terms: Iterable[T], zero: T, use_kahan: bool = False) -> T:
    """Sum terms left to right, optionally with Kahan compensation.

    Args:
        terms: Values to add, in order
        zero: Additive identity of the working type (fixes the result type)
        use_kahan: Use compensated summation

    Returns:
        The sum in the working type
    """
    total = zero
    if not use_kahan:
        for value in terms:
            total = total + value
        return total

    compensation = zero
    for value in terms:
        y = value - compensation
        t = total + y
        compensation = (t - total) - y
        total = t
    return total


def as_fp32(value) -> np.float32:
    """Convert a precision scalar to 32-bit working precision."""
    return np.float32(float(value))


def infer_numeric_type(sample) -> type:
    """Scalar type of a kernel input; plain Python reals count as np.float64."""
    if isinstance(sample, np.floating):
        return type(sample)
    if isinstance(sample, (int, float, np.integer)):
        return np.float64
    return type(sample)


__all__ = [
    "reduce_sum",
    "as_fp32",
    "infer_numeric_type",
]
