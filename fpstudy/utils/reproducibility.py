"""Seed setup for reproducible precision studies.

Synthetic problems come from per-trial ProblemGenerator instances, but any
code that touches the global generators (Python, NumPy, PyTorch) still gets
a fixed starting state so that reruns of a study are identical.

Example:
    >>> from fpstudy.utils import set_seed_for_reproducibility
    >>> set_seed_for_reproducibility(42)
    >>> x1 = torch.randn(10)
    >>> set_seed_for_reproducibility(42)
    >>> x2 = torch.randn(10)
    >>> assert torch.equal(x1, x2)
"""

from __future__ import annotations

import random

import numpy as np
import torch


def set_seed_for_reproducibility(seed: int) -> None:
    """Set all random seeds for a reproducible study.

    Sets seeds for:
    - Python's random module
    - NumPy's global random generator
    - PyTorch's CPU generator

    Args:
        seed: Random seed to use (e.g., 42)
    """
    random.seed(seed)
    np.random.seed(seed % 2**32)
    torch.manual_seed(seed)


__all__ = [
    "set_seed_for_reproducibility",
]
