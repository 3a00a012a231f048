"""Study runner: sweeps every configured experiment across precisions.

For each problem instance the runner:
  1. Builds data from a ProblemGenerator seeded with the trial seed
  2. Runs the kernel in FP64 without wide accumulation (the truth run)
  3. Casts the data into each configured precision and reruns the kernel
  4. Records relative error against truth, iterations, convergence,
     NaN/inf counts and elapsed time as one row in the metrics sink

Wide accumulation is always passed to the kernels explicitly; the global
accumulation policy is never read or changed here.

Example:
    >>> from fpstudy.experiments import StudyRunner, load_config, MemorySink
    >>> config = load_config('experiments/configs/smoke.yaml')
    >>> sink = MemorySink()
    >>> StudyRunner(config, sink).run()
    >>> sink.to_dataframe().groupby('precision')['rel_error'].mean()
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

from fpstudy.algorithms import (
    FIROptions,
    GradientDescentOptions,
    KernelResult,
    MatMulOptions,
    NewtonOptions,
    gradient_descent_quadratic,
    newton_raphson,
    run_fir,
    run_matmul,
)
from fpstudy.experiments.config import ExperimentConfig, StudyConfig
from fpstudy.experiments.data import NEWTON_FUNCTIONS, ProblemGenerator
from fpstudy.experiments.metrics import (
    RunMetrics,
    Timer,
    count_inf,
    count_nan,
    relative_error,
)
from fpstudy.experiments.sink import CsvMetricsSink, MetricsSink
from fpstudy.formats.registry import (
    Precision,
    cast_matrix,
    cast_tensor,
    numeric_type,
    precision_to_string,
    to_float64_list,
)
from fpstudy.utils.reproducibility import set_seed_for_reproducibility


class StudyRunner:
    """Run a StudyConfig and write one metrics row per kernel run.

    Attributes:
        config: Study configuration
        sink: Destination for metrics rows (CSV at config.out_csv by default)
        verbose: Print one console line per run
        runs_recorded: Rows written so far
    """

    def __init__(
        self,
        config: StudyConfig,
        sink: Optional[MetricsSink] = None,
        verbose: bool = False,
    ):
        self.config = config
        self.sink = sink if sink is not None else CsvMetricsSink(config.out_csv)
        self.verbose = verbose
        self.runs_recorded = 0

        self._handlers: Dict[str, Callable[[ExperimentConfig], None]] = {
            "matmul": self._run_matmul,
            "fir": self._run_fir,
            "gd_quadratic": self._run_gd_quadratic,
            "newton": self._run_newton,
        }

    def run(self) -> int:
        """Run every experiment in order.

        Returns:
            Number of metrics rows recorded
        """
        set_seed_for_reproducibility(self.config.seed)
        for experiment in self.config.experiments:
            self._handlers[experiment.algo](experiment)
        return self.runs_recorded

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _emit(
        self,
        algo: str,
        size: str,
        precision: Precision,
        seed: int,
        params: Dict[str, Any],
        truth: List[float],
        result: KernelResult,
        elapsed_ms: float,
    ) -> RunMetrics:
        values = to_float64_list(result.values)
        metrics = RunMetrics(
            relative_error=relative_error(truth, values),
            iterations=result.iterations,
            converged=result.converged,
            nan_count=count_nan(values),
            inf_count=count_inf(values),
            elapsed_ms=elapsed_ms,
        )

        name = precision_to_string(precision)
        params_json = json.dumps(
            {**params, "precision": name}, sort_keys=True, separators=(",", ":")
        )
        self.sink.record({
            "algo": algo,
            "size": size,
            "precision": name,
            "seed": seed,
            "params_json": params_json,
            "rel_error": metrics.relative_error,
            "iters": metrics.iterations,
            "converged": int(metrics.converged),
            "n_nan": metrics.nan_count,
            "n_inf": metrics.inf_count,
            "elapsed_ms": metrics.elapsed_ms,
        })
        self.runs_recorded += 1

        if self.verbose:
            print(
                f"[{algo}] size={size} precision={name} "
                f"rel_error={metrics.relative_error:.3e} iters={metrics.iterations} "
                f"converged={metrics.converged} nan={metrics.nan_count} "
                f"inf={metrics.inf_count} ({metrics.elapsed_ms:.1f} ms)"
            )
        return metrics

    # ------------------------------------------------------------------
    # Experiments
    # ------------------------------------------------------------------

    def _run_matmul(self, experiment: ExperimentConfig) -> None:
        for size in experiment.sizes:
            for trial in range(experiment.trials):
                trial_seed = self.config.seed + size * 997 + trial
                gen = ProblemGenerator(trial_seed)
                A = gen.random_matrix(size, size)
                B = gen.random_matrix(size, size)

                truth_options = MatMulOptions(experiment.kahan, False)
                truth = to_float64_list(
                    run_matmul(
                        cast_matrix(A, Precision.FP64),
                        cast_matrix(B, Precision.FP64),
                        truth_options,
                    ).values
                )

                for accumulate in experiment.accumulate_in_fp32:
                    params = {
                        "size": size,
                        "trial": trial,
                        "accumulate_in_fp32": accumulate,
                        "kahan": experiment.kahan,
                    }
                    for precision in experiment.precision_list:
                        wide = False if precision is Precision.FP64 else accumulate
                        A_p = cast_matrix(A, precision)
                        B_p = cast_matrix(B, precision)
                        timer = Timer()
                        result = run_matmul(A_p, B_p, MatMulOptions(experiment.kahan, wide))
                        elapsed = timer.elapsed_ms()
                        self._emit("matmul", str(size), precision, trial_seed,
                                   params, truth, result, elapsed)

    def _run_fir(self, experiment: ExperimentConfig) -> None:
        taps = experiment.taps
        for size in experiment.sizes:
            for trial in range(experiment.trials):
                trial_seed = self.config.seed + size * 389 + taps * 7 + trial
                gen = ProblemGenerator(trial_seed)
                h = gen.random_vector(taps)
                x = gen.random_vector(size)

                truth = to_float64_list(
                    run_fir(
                        cast_tensor(h, Precision.FP64),
                        cast_tensor(x, Precision.FP64),
                        FIROptions(experiment.kahan, False),
                    ).values
                )

                for accumulate in experiment.accumulate_in_fp32:
                    params = {
                        "size": size,
                        "taps": taps,
                        "trial": trial,
                        "accumulate_in_fp32": accumulate,
                        "kahan": experiment.kahan,
                    }
                    for precision in experiment.precision_list:
                        wide = False if precision is Precision.FP64 else accumulate
                        h_p = cast_tensor(h, precision)
                        x_p = cast_tensor(x, precision)
                        timer = Timer()
                        result = run_fir(h_p, x_p, FIROptions(experiment.kahan, wide))
                        elapsed = timer.elapsed_ms()
                        self._emit("fir", str(size), precision, trial_seed,
                                   params, truth, result, elapsed)

    def _run_gd_quadratic(self, experiment: ExperimentConfig) -> None:
        dim = experiment.dim
        defaults = GradientDescentOptions()
        step_size = experiment.step_size
        max_iters = experiment.max_iters if experiment.max_iters is not None else defaults.max_iters
        tol = experiment.tol if experiment.tol is not None else defaults.tol

        for trial in range(experiment.trials):
            trial_seed = self.config.seed + dim * 577 + trial * 31
            Q = ProblemGenerator(trial_seed + dim * 13).spd_matrix(
                dim, experiment.ill_conditioned
            )
            b = ProblemGenerator(trial_seed).random_vector(dim)
            x0 = [0.0] * dim

            def options(wide: bool) -> GradientDescentOptions:
                return GradientDescentOptions(
                    step_size=step_size,
                    max_iters=max_iters,
                    tol=tol,
                    use_kahan=experiment.kahan,
                    accumulate_in_fp32=wide,
                )

            truth = to_float64_list(
                gradient_descent_quadratic(
                    cast_matrix(Q, Precision.FP64),
                    cast_tensor(b, Precision.FP64),
                    x0,
                    options(False),
                ).values
            )

            for accumulate in experiment.accumulate_in_fp32:
                params = {
                    "dim": dim,
                    "trial": trial,
                    "step_size": step_size,
                    "tol": tol,
                    "max_iters": max_iters,
                    "ill_conditioned": experiment.ill_conditioned,
                    "accumulate_in_fp32": accumulate,
                    "kahan": experiment.kahan,
                }
                for precision in experiment.precision_list:
                    wide = False if precision is Precision.FP64 else accumulate
                    Q_p = cast_matrix(Q, precision)
                    b_p = cast_tensor(b, precision)
                    x0_p = [numeric_type(precision)(v) for v in x0]
                    timer = Timer()
                    result = gradient_descent_quadratic(Q_p, b_p, x0_p, options(wide))
                    elapsed = timer.elapsed_ms()
                    self._emit("gd_quadratic", str(dim), precision, trial_seed,
                               params, truth, result, elapsed)

    def _run_newton(self, experiment: ExperimentConfig) -> None:
        f64, df64 = NEWTON_FUNCTIONS[experiment.function]
        defaults = NewtonOptions()
        options = NewtonOptions(
            max_iters=experiment.max_iters if experiment.max_iters is not None else defaults.max_iters,
            tol=experiment.tol if experiment.tol is not None else defaults.tol,
        )

        for initial in experiment.initials:
            trial_seed = self.config.seed + int(initial * 101)
            truth_result = newton_raphson(float(initial), f64, df64, options)
            truth = to_float64_list(truth_result.values)
            params = {
                "function": experiment.function,
                "initial": initial,
                "tol": options.tol,
                "max_iters": options.max_iters,
            }

            for precision in experiment.precision_list:
                scalar = numeric_type(precision)

                def f(x, scalar=scalar):
                    return scalar(f64(float(x)))

                def df(x, scalar=scalar):
                    return scalar(df64(float(x)))

                timer = Timer()
                result = newton_raphson(scalar(initial), f, df, options)
                elapsed = timer.elapsed_ms()
                self._emit("newton", "1", precision, trial_seed,
                           params, truth, result, elapsed)


def run_study(
    config: StudyConfig,
    sink: Optional[MetricsSink] = None,
    verbose: bool = False,
) -> int:
    """Run a study and return the number of metrics rows recorded."""
    return StudyRunner(config, sink, verbose).run()


__all__ = [
    "StudyRunner",
    "run_study",
]
