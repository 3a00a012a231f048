"""Kernel result record and termination states."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class KernelStatus(Enum):
    """Terminal state of a kernel run.

    Iterative kernels run until they end in CONVERGED, MAX_ITERATIONS,
    or (Newton only) DERIVATIVE_ZERO. Direct kernels report COMPLETED.
    """

    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"
    DERIVATIVE_ZERO = "derivative_zero"
    COMPLETED = "completed"


@dataclass
class KernelResult:
    """Output of one kernel run in the kernel's working precision.

    Attributes:
        values: Output values in order (row-major for matrices)
        iterations: Iteration index at termination (0 for direct kernels)
        converged: Whether the stopping criterion was met
        status: Terminal state
    """

    values: List[Any] = field(default_factory=list)
    iterations: int = 0
    converged: bool = True
    status: KernelStatus = KernelStatus.COMPLETED

    @property
    def root(self) -> Any:
        """Single output of a scalar kernel (Newton)."""
        return self.values[0]


__all__ = [
    "KernelStatus",
    "KernelResult",
]
