"""Precision comparison over study results.

Provides PrecisionComparator for ranking precisions by a metric and
building per-(algorithm, precision) summary tables from the metrics rows.

Example:
    >>> from fpstudy.analysis import PrecisionComparator, load_results
    >>> df = load_results("results/smoke.csv")
    >>> comparator = PrecisionComparator()
    >>> comparator.rank_by_metric(df[df["algo"] == "matmul"], "rel_error")
"""

from __future__ import annotations

from typing import Dict

import pandas as pd


class PrecisionComparator:
    """Compare precisions across study runs.

    Works with DataFrames from load_results or MemorySink.to_dataframe().

    Example:
        >>> comparator = PrecisionComparator()
        >>> rankings = comparator.rank_by_metric(df, "rel_error", ascending=True)
        >>> summary = comparator.summarize(df)
    """

    def rank_by_metric(
        self,
        df: pd.DataFrame,
        metric: str,
        ascending: bool = True,
        group_by: str = "precision",
    ) -> pd.DataFrame:
        """Rank precisions by the mean of a metric.

        Lower rank = better (rank 1 is best).

        Args:
            df: DataFrame with study rows
            metric: Column name to rank by (e.g., "rel_error", "elapsed_ms")
            ascending: If True, lower values are better
            group_by: Column to group by before ranking

        Returns:
            DataFrame with columns: [group_by, metric + "_mean", metric + "_std",
                                     "count", "rank"]

        Raises:
            ValueError: If the metric column is missing
        """
        if metric not in df.columns:
            raise ValueError(f"Metric '{metric}' not found in DataFrame columns: {df.columns.tolist()}")

        agg_df = df.groupby(group_by).agg(
            **{
                f"{metric}_mean": (metric, "mean"),
                f"{metric}_std": (metric, "std"),
                "count": (metric, "count"),
            }
        ).reset_index()

        # Single sample groups have NaN std
        agg_df[f"{metric}_std"] = agg_df[f"{metric}_std"].fillna(0)

        agg_df["rank"] = agg_df[f"{metric}_mean"].rank(
            ascending=ascending, method="min"
        ).astype(int)

        return agg_df.sort_values("rank").reset_index(drop=True)

    def summarize(self, df: pd.DataFrame) -> pd.DataFrame:
        """Summary table per (algo, precision).

        Returns:
            DataFrame with columns: algo, precision, runs, mean_rel_error,
            max_rel_error, convergence_rate, mean_iters, total_nan,
            total_inf, mean_elapsed_ms
        """
        converged = df["converged"].astype(bool).astype(float)
        summary = (
            df.assign(converged_rate=converged)
            .groupby(["algo", "precision"], sort=False)
            .agg(
                runs=("rel_error", "count"),
                mean_rel_error=("rel_error", "mean"),
                max_rel_error=("rel_error", "max"),
                convergence_rate=("converged_rate", "mean"),
                mean_iters=("iters", "mean"),
                total_nan=("n_nan", "sum"),
                total_inf=("n_inf", "sum"),
                mean_elapsed_ms=("elapsed_ms", "mean"),
            )
            .reset_index()
        )
        return summary

    def compute_degradation(
        self,
        df: pd.DataFrame,
        baseline: str,
        comparison: str,
        metric: str = "rel_error",
    ) -> Dict[str, float]:
        """Compare the mean of a metric between two precisions.

        Args:
            df: DataFrame with study rows
            baseline: Reference precision name (e.g., "fp32")
            comparison: Precision being evaluated (e.g., "p3109_8")
            metric: Metric to compare

        Returns:
            Dictionary with baseline_mean, comparison_mean, absolute_diff and
            ratio (comparison / baseline; inf when the baseline mean is 0 and
            the comparison is not)
        """
        baseline_mean = float(df[df["precision"] == baseline][metric].mean())
        comparison_mean = float(df[df["precision"] == comparison][metric].mean())

        if baseline_mean != 0:
            ratio = comparison_mean / baseline_mean
        elif comparison_mean == 0:
            ratio = 1.0
        else:
            ratio = float("inf")

        return {
            "baseline": baseline,
            "comparison": comparison,
            "metric": metric,
            "baseline_mean": baseline_mean,
            "comparison_mean": comparison_mean,
            "absolute_diff": comparison_mean - baseline_mean,
            "ratio": ratio,
        }


__all__ = [
    "PrecisionComparator",
]
