"""Precision-generic numeric kernels.

Each kernel is written once against the precision scalar protocol
(+ - * /, unary minus, construction from a real, float()) and runs
unchanged over np.float64, np.float32, TF32, BF16 and P3109Number.

Kernels:
    matmul_square: n x n matrix multiply (plain/Kahan, wide accumulation)
    fir_filter: Causal zero-padded FIR convolution (same reduction modes)
    gradient_descent_quadratic: Fixed-step descent on 1/2 x^T Q x + b^T x
    newton_raphson: Newton root finding with zero-derivative guard

Example:
    >>> from fpstudy.algorithms import fir_filter, FIROptions
    >>> from fpstudy.formats import cast_values, Precision
    >>> h = cast_values([0.5, 0.5], Precision.BF16)
    >>> x = cast_values([1.0, 2.0, 3.0], Precision.BF16)
    >>> [float(v) for v in fir_filter(h, x, FIROptions(use_kahan=True))]
    [0.5, 1.5, 2.5]
"""

from fpstudy.algorithms.result import KernelResult, KernelStatus
from fpstudy.algorithms.summation import reduce_sum, infer_numeric_type
from fpstudy.algorithms.matmul import MatMulOptions, matmul_square, run_matmul
from fpstudy.algorithms.fir import FIROptions, fir_filter, run_fir
from fpstudy.algorithms.gradient_descent import (
    GradientDescentOptions,
    gradient_descent_quadratic,
    gradient_norm,
)
from fpstudy.algorithms.newton import NewtonOptions, newton_raphson

__all__ = [
    "KernelResult",
    "KernelStatus",
    "reduce_sum",
    "infer_numeric_type",
    "MatMulOptions",
    "matmul_square",
    "run_matmul",
    "FIROptions",
    "fir_filter",
    "run_fir",
    "GradientDescentOptions",
    "gradient_descent_quadratic",
    "gradient_norm",
    "NewtonOptions",
    "newton_raphson",
]
