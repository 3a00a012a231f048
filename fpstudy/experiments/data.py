"""Synthetic problem instances for the precision study.

Every instance comes from a ProblemGenerator seeded with the trial seed,
so a (seed, size) pair always rebuilds the same data regardless of which
precisions or how many experiments ran before it.

Example:
    >>> gen = ProblemGenerator(seed=42)
    >>> A = gen.random_matrix(4, 4)
    >>> Q = ProblemGenerator(seed=42).spd_matrix(4)
    >>> bool(torch.allclose(Q, Q.T))
    True
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

import torch
from torch import Tensor


class ProblemGenerator:
    """Seeded source of normally distributed float64 vectors and matrices.

    Uses its own torch.Generator so global RNG state is untouched.

    Attributes:
        seed: Seed the generator was created with
        generator: Underlying torch.Generator
    """

    def __init__(self, seed: int):
        self.seed = int(seed)
        self.generator = torch.Generator()
        self.generator.manual_seed(self.seed)

    def random_vector(self, n: int, scale: float = 1.0) -> Tensor:
        """n samples from N(0, scale^2)."""
        return torch.randn(n, generator=self.generator, dtype=torch.float64) * scale

    def random_matrix(self, rows: int, cols: int, ill_conditioned: bool = False) -> Tensor:
        """rows x cols samples from N(0, 1).

        With ill_conditioned, the first column is scaled by 1e-6.
        """
        matrix = torch.randn(rows, cols, generator=self.generator, dtype=torch.float64)
        if ill_conditioned and cols > 0:
            matrix[:, 0] *= 1e-6
        return matrix

    def spd_matrix(self, dim: int, ill_conditioned: bool = False) -> Tensor:
        """Symmetric positive definite M^T M + 0.1 * dim * I."""
        factor = self.random_matrix(dim, dim, ill_conditioned)
        return factor.T @ factor + 0.1 * dim * torch.eye(dim, dtype=torch.float64)


def _cube_minus_two(x):
    return x * x * x - 2.0


def _cube_minus_two_derivative(x):
    return 3.0 * x * x


def _square_minus_two(x):
    return x * x - 2.0


def _square_minus_two_derivative(x):
    return 2.0 * x


# Newton test functions, evaluated in float64: name -> (f, f')
NEWTON_FUNCTIONS: Dict[str, Tuple[Callable[[float], float], Callable[[float], float]]] = {
    "x3_minus_2": (_cube_minus_two, _cube_minus_two_derivative),
    "x2_minus_2": (_square_minus_two, _square_minus_two_derivative),
}


__all__ = [
    "ProblemGenerator",
    "NEWTON_FUNCTIONS",
]
