"""fpstudy: Floating-point precision study framework.

Runs the same numerical kernels (dense matmul, FIR convolution, gradient
descent, Newton root finding) under FP64, FP32, TF32, BF16 and a packed
8-bit format, and measures how precision affects accuracy, convergence
and runtime.

Subpackages:
    formats: 8-bit codec, precision value types, precision registry
    algorithms: Precision-generic kernels with Kahan/wide accumulation
    experiments: Config, problem generation, metrics, sinks, study runner
    analysis: Result loading and precision comparison

Example:
    >>> import fpstudy
    >>> from fpstudy.formats import P3109Number, quantize
    >>> quantize(1.0)
    48
    >>> float(P3109Number(1.5) + P3109Number(1.5))
    3.0
"""

__version__ = "0.1.0"

from fpstudy import formats

__all__ = [
    "formats",
    "__version__",
]
