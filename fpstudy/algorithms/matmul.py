"""Dense square matrix multiply, generic over the precision scalar.

Each output cell reduces n products. Reduction modes:
  - plain running sum or Kahan-compensated sum (use_kahan)
  - wide accumulation (accumulate_in_fp32): products and the running sum
    are kept in np.float32 whatever the scalar type, and converted to it
    once per cell. This lets the 8-bit format skip per-multiply-add rounding.

O(n^3), no blocking or tiling.

Example:
    >>> import numpy as np
    >>> C = matmul_square([[1.0, 2.0], [3.0, 4.0]], [[5.0, 6.0], [7.0, 8.0]])
    >>> [[float(v) for v in row] for row in C]
    [[19.0, 22.0], [43.0, 50.0]]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from fpstudy.algorithms.result import KernelResult, KernelStatus
from fpstudy.algorithms.summation import as_fp32, infer_numeric_type, reduce_sum
from fpstudy.formats.numbers import resolve_accumulation


@dataclass
class MatMulOptions:
    """Reduction options for matmul_square.

    Attributes:
        use_kahan: Kahan-compensated summation per cell
        accumulate_in_fp32: Keep products and sums in 32-bit; None follows
            the accumulation policy for 8-bit values and is False otherwise
    """

    use_kahan: bool = False
    accumulate_in_fp32: Optional[bool] = None


def _check_square(name: str, matrix: Sequence[Sequence], n: int) -> None:
    if len(matrix) != n or any(len(row) != n for row in matrix):
        raise ValueError(f"{name} must be {n}x{n}")


def matmul_square(
    A: Sequence[Sequence],
    B: Sequence[Sequence],
    options: Optional[MatMulOptions] = None,
) -> List[List]:
    """Multiply two n x n matrices.

    Args:
        A: Left matrix as nested rows of precision scalars
        B: Right matrix, same shape and scalar type
        options: Reduction options (defaults to MatMulOptions())

    Returns:
        Product matrix as nested lists in the inputs' scalar type

    Raises:
        ValueError: If A and B are not square matrices of the same size
    """
    options = options or MatMulOptions()
    n = len(A)
    _check_square("A", A, n)
    _check_square("B", B, n)
    if n == 0:
        return []

    numeric_type = infer_numeric_type(A[0][0])
    wide = resolve_accumulation(numeric_type, options.accumulate_in_fp32)

    C: List[List] = [[None] * n for _ in range(n)]
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        if wide:
            A32 = [[as_fp32(v) for v in row] for row in A]
            B32 = [[as_fp32(v) for v in row] for row in B]
            for i in range(n):
                for j in range(n):
                    products = (A32[i][k] * B32[k][j] for k in range(n))
                    cell = reduce_sum(products, np.float32(0.0), options.use_kahan)
                    C[i][j] = numeric_type(cell)
        else:
            zero = numeric_type(0.0)
            for i in range(n):
                for j in range(n):
                    products = (A[i][k] * B[k][j] for k in range(n))
                    C[i][j] = reduce_sum(products, zero, options.use_kahan)
    return C


def run_matmul(
    A: Sequence[Sequence],
    B: Sequence[Sequence],
    options: Optional[MatMulOptions] = None,
) -> KernelResult:
    """matmul_square with the uniform result record (row-major values)."""
    C = matmul_square(A, B, options)
    values = [v for row in C for v in row]
    return KernelResult(values=values, status=KernelStatus.COMPLETED)


__all__ = [
    "MatMulOptions",
    "matmul_square",
    "run_matmul",
]
