"""Newton-Raphson root finding, generic over the precision scalar.

    x <- x - f(x) / f'(x)

The residual |f(x)| is compared against the tolerance in float64 so the
stopping test means the same thing in every precision. An exact zero
derivative stops the iteration with DERIVATIVE_ZERO instead of dividing.

Example:
    >>> result = newton_raphson(1.0, lambda x: x * x * x - 2.0, lambda x: 3.0 * x * x)
    >>> round(float(result.root), 6)
    1.259921
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from fpstudy.algorithms.result import KernelResult, KernelStatus
from fpstudy.algorithms.summation import infer_numeric_type


@dataclass
class NewtonOptions:
    max_iters: int = 100
    tol: float = 1e-8


def newton_raphson(
    initial,
    f: Callable,
    df: Callable,
    options: Optional[NewtonOptions] = None,
) -> KernelResult:
    """Find a root of f starting from initial.

    Args:
        initial: Starting guess (precision scalar or real)
        f: Function of one scalar returning a scalar of the same type
        df: Derivative of f, same signature
        options: Tolerance and iteration budget

    Returns:
        KernelResult whose single value is the final iterate, with status
        CONVERGED, DERIVATIVE_ZERO, or MAX_ITERATIONS
    """
    options = options or NewtonOptions()
    x = infer_numeric_type(initial)(initial)

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        for iteration in range(options.max_iters):
            fx = f(x)
            dfx = df(x)
            if abs(float(fx)) < options.tol:
                return KernelResult(
                    values=[x],
                    iterations=iteration,
                    converged=True,
                    status=KernelStatus.CONVERGED,
                )
            if float(dfx) == 0.0:
                return KernelResult(
                    values=[x],
                    iterations=iteration,
                    converged=False,
                    status=KernelStatus.DERIVATIVE_ZERO,
                )
            x = x - fx / dfx

    return KernelResult(
        values=[x],
        iterations=options.max_iters,
        converged=False,
        status=KernelStatus.MAX_ITERATIONS,
    )


__all__ = [
    "NewtonOptions",
    "newton_raphson",
]
