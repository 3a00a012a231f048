"""Command-line entry point for precision studies.

Example:
    fpstudy --config experiments/configs/smoke.yaml
    fpstudy --config experiments/configs/smoke.yaml --quiet --summary
"""

from __future__ import annotations

import argparse
from typing import List, Optional

import pandas as pd

from fpstudy.analysis import PrecisionComparator, load_results
from fpstudy.experiments import StudyRunner, load_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a floating-point precision study")
    parser.add_argument("--config", "-c", required=True, help="Path to study config (YAML or JSON)")
    parser.add_argument("--quiet", action="store_true", help="Suppress per-run output")
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a per-(algo, precision) summary table after the study",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Load a study config, run it, and write the metrics CSV.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    verbose = not args.quiet
    if verbose:
        print(f"Loaded config: {args.config}")
        print(f"  Seed: {config.seed}")
        print(f"  Output: {config.out_csv}")
        print(f"  Experiments: {', '.join(e.algo for e in config.experiments)}")
        print("\nStarting study...")

    rows = StudyRunner(config, verbose=verbose).run()

    if verbose:
        print(f"\nStudy complete: {rows} runs written to {config.out_csv}")

    if args.summary:
        summary = PrecisionComparator().summarize(load_results(config.out_csv))
        with pd.option_context("display.width", 160, "display.max_columns", None):
            print("\n" + "=" * 60)
            print("SUMMARY")
            print("=" * 60)
            print(summary.to_string(index=False))
    return 0


__all__ = [
    "build_parser",
    "main",
]
