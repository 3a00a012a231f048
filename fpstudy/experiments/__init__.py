"""Experiment infrastructure for precision studies.

Provides configuration, synthetic problem generation, metrics, sinks and
the study runner that sweeps each algorithm across precisions.

Submodules:
    config: StudyConfig/ExperimentConfig with YAML load/save
    data: ProblemGenerator and Newton test functions
    metrics: RunMetrics, relative_error, NaN/inf counts, Timer
    sink: CsvMetricsSink and MemorySink
    runner: StudyRunner and run_study

Example:
    >>> from fpstudy.experiments import load_config, StudyRunner
    >>> config = load_config("experiments/configs/smoke.yaml")
    >>> StudyRunner(config, verbose=True).run()
"""

from fpstudy.experiments.config import (
    ALGORITHMS,
    ConfigError,
    ExperimentConfig,
    StudyConfig,
    load_config,
    save_config,
)
from fpstudy.experiments.data import NEWTON_FUNCTIONS, ProblemGenerator
from fpstudy.experiments.metrics import (
    RunMetrics,
    Timer,
    count_inf,
    count_nan,
    relative_error,
    vector_norm,
)
from fpstudy.experiments.sink import (
    CSV_COLUMNS,
    CsvMetricsSink,
    MemorySink,
    MetricsSink,
)
from fpstudy.experiments.runner import StudyRunner, run_study

__all__ = [
    # Config
    "ALGORITHMS",
    "ConfigError",
    "ExperimentConfig",
    "StudyConfig",
    "load_config",
    "save_config",
    # Data
    "NEWTON_FUNCTIONS",
    "ProblemGenerator",
    # Metrics
    "RunMetrics",
    "Timer",
    "count_inf",
    "count_nan",
    "relative_error",
    "vector_norm",
    # Sinks
    "CSV_COLUMNS",
    "CsvMetricsSink",
    "MemorySink",
    "MetricsSink",
    # Runner
    "StudyRunner",
    "run_study",
]
