"""Analysis of precision study results.

Submodules:
    data_loader: Metrics CSV loading with algorithm/precision filtering
    comparisons: Precision ranking, summary tables and degradation ratios

Example:
    >>> from fpstudy.analysis import load_results, PrecisionComparator
    >>> df = load_results("results/smoke.csv")
    >>> print(PrecisionComparator().summarize(df))
"""

from fpstudy.analysis.data_loader import load_results
from fpstudy.analysis.comparisons import PrecisionComparator

__all__ = [
    "load_results",
    "PrecisionComparator",
]
