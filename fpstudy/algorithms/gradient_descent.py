"""Fixed-step gradient descent on a quadratic, generic over the scalar.

Minimizes f(x) = 1/2 x^T Q x + b^T x with the update

    x <- x - step * (Q x + b)

No line search and no momentum, so precision is the only variable. The
stopping test uses the Euclidean norm of the gradient accumulated in
float64 for every precision, which keeps iteration counts comparable. It
runs before the update, so an exact starting point converges at iteration 0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from fpstudy.algorithms.result import KernelResult, KernelStatus
from fpstudy.algorithms.summation import as_fp32, infer_numeric_type, reduce_sum
from fpstudy.formats.numbers import resolve_accumulation


@dataclass
class GradientDescentOptions:
    """Options for gradient_descent_quadratic.

    Attributes:
        step_size: Fixed step length
        max_iters: Iteration budget
        tol: Gradient-norm tolerance
        use_kahan: Kahan summation for the Q x reduction
        accumulate_in_fp32: Compute Q x + b in 32-bit (None follows the
            accumulation policy for 8-bit values)
    """

    step_size: float = 1e-2
    max_iters: int = 1000
    tol: float = 1e-6
    use_kahan: bool = False
    accumulate_in_fp32: Optional[bool] = None


def _gradient(Q, b, x, numeric_type, wide: bool, use_kahan: bool) -> List:
    dim = len(x)
    gradient = []
    if wide:
        x32 = [as_fp32(v) for v in x]
        for i in range(dim):
            products = (as_fp32(Q[i][j]) * x32[j] for j in range(dim))
            acc = reduce_sum(products, np.float32(0.0), use_kahan)
            gradient.append(numeric_type(acc + as_fp32(b[i])))
    else:
        zero = numeric_type(0.0)
        for i in range(dim):
            products = (Q[i][j] * x[j] for j in range(dim))
            gradient.append(reduce_sum(products, zero, use_kahan) + b[i])
    return gradient


def gradient_norm(gradient: Sequence) -> float:
    """Euclidean norm accumulated in float64."""
    total = 0.0
    for g in gradient:
        gd = float(g)
        total += gd * gd
    return math.sqrt(total)


def gradient_descent_quadratic(
    Q: Sequence[Sequence],
    b: Sequence,
    initial: Sequence,
    options: Optional[GradientDescentOptions] = None,
) -> KernelResult:
    """Run fixed-step gradient descent from an initial point.

    Args:
        Q: Symmetric positive definite dim x dim matrix
        b: Linear term (dim)
        initial: Starting point (dim)
        options: Step size, tolerance, iteration budget, reduction modes

    Returns:
        KernelResult with the final iterate as values, the iteration index
        at termination, and CONVERGED or MAX_ITERATIONS status

    Raises:
        ValueError: If the shapes of Q, b and initial disagree
    """
    options = options or GradientDescentOptions()
    dim = len(initial)
    if len(b) != dim or len(Q) != dim or any(len(row) != dim for row in Q):
        raise ValueError(f"Q must be {dim}x{dim} and b must have length {dim}")

    numeric_type = infer_numeric_type(initial[0]) if dim else np.float64
    wide = resolve_accumulation(numeric_type, options.accumulate_in_fp32)
    x = [numeric_type(v) for v in initial]

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        step = numeric_type(options.step_size)
        for iteration in range(options.max_iters):
            gradient = _gradient(Q, b, x, numeric_type, wide, options.use_kahan)
            if gradient_norm(gradient) < options.tol:
                return KernelResult(
                    values=x,
                    iterations=iteration,
                    converged=True,
                    status=KernelStatus.CONVERGED,
                )
            x = [x[i] - step * gradient[i] for i in range(dim)]

    return KernelResult(
        values=x,
        iterations=options.max_iters,
        converged=False,
        status=KernelStatus.MAX_ITERATIONS,
    )


__all__ = [
    "GradientDescentOptions",
    "gradient_descent_quadratic",
    "gradient_norm",
]
