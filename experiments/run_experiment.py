#!/usr/bin/env python
"""Run a floating-point precision study.

Loads a YAML (or JSON) study configuration, sweeps every experiment across
its precisions, and appends one metrics row per run to the output CSV.

Example:
    python experiments/run_experiment.py --config experiments/configs/smoke.yaml
    python experiments/run_experiment.py --config experiments/configs/smoke.yaml --quiet --summary
"""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fpstudy.cli import main


if __name__ == "__main__":
    sys.exit(main())
