"""Utility functions for precision study runs.

Key functions:
- set_seed_for_reproducibility: Set all RNG sources for reproducible runs
"""

from fpstudy.utils.reproducibility import set_seed_for_reproducibility

__all__ = [
    "set_seed_for_reproducibility",
]
