"""Causal FIR filter, generic over the precision scalar.

    y[n] = sum_{k=0}^{M-1} h[k] * x[n-k]

with x[n-k] taken as zero when n < k (zero-padded history). The output has
one sample per input sample. Each output sample is a reduction with the
same plain/Kahan and wide-accumulation modes as matmul_square.

Example:
    >>> y = fir_filter([0.5, 0.5], [1.0, 2.0, 3.0, 4.0])
    >>> [float(v) for v in y]
    [0.5, 1.5, 2.5, 3.5]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from fpstudy.algorithms.result import KernelResult, KernelStatus
from fpstudy.algorithms.summation import as_fp32, infer_numeric_type, reduce_sum
from fpstudy.formats.numbers import resolve_accumulation


@dataclass
class FIROptions:
    """Reduction options for fir_filter (see MatMulOptions)."""

    use_kahan: bool = False
    accumulate_in_fp32: Optional[bool] = None


def fir_filter(
    h: Sequence,
    x: Sequence,
    options: Optional[FIROptions] = None,
) -> List:
    """Convolve signal x with filter taps h.

    Args:
        h: Filter coefficients (M taps)
        x: Input signal (N samples)
        options: Reduction options (defaults to FIROptions())

    Returns:
        N output samples in the inputs' scalar type
    """
    options = options or FIROptions()
    if len(x) == 0:
        return []

    numeric_type = infer_numeric_type(x[0])
    wide = resolve_accumulation(numeric_type, options.accumulate_in_fp32)
    M = len(h)

    y: List = []
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        if wide:
            h32 = [as_fp32(v) for v in h]
            x32 = [as_fp32(v) for v in x]
            for n in range(len(x)):
                products = (h32[k] * x32[n - k] for k in range(min(M, n + 1)))
                total = reduce_sum(products, np.float32(0.0), options.use_kahan)
                y.append(numeric_type(total))
        else:
            zero = numeric_type(0.0)
            for n in range(len(x)):
                products = (h[k] * x[n - k] for k in range(min(M, n + 1)))
                y.append(reduce_sum(products, zero, options.use_kahan))
    return y


def run_fir(
    h: Sequence,
    x: Sequence,
    options: Optional[FIROptions] = None,
) -> KernelResult:
    """fir_filter with the uniform result record."""
    return KernelResult(values=fir_filter(h, x, options), status=KernelStatus.COMPLETED)


__all__ = [
    "FIROptions",
    "fir_filter",
    "run_fir",
]
