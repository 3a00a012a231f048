"""Tests for experiment infrastructure: problem data, metrics, sinks, seeding.

Tests validate:
1. ProblemGenerator determinism and SPD construction
2. relative_error, NaN/inf counting and the timer
3. CSV sink header and row layout
4. Seed setup for Python, NumPy and PyTorch
"""

import math
import random

import numpy as np
import pandas as pd
import pytest
import torch

from fpstudy.experiments.data import NEWTON_FUNCTIONS, ProblemGenerator
from fpstudy.experiments.metrics import (
    RunMetrics,
    Timer,
    count_inf,
    count_nan,
    relative_error,
)
from fpstudy.experiments.sink import CSV_COLUMNS, CsvMetricsSink, MemorySink
from fpstudy.utils import set_seed_for_reproducibility


def _row(**overrides):
    row = {
        "algo": "matmul",
        "size": "4",
        "precision": "bf16",
        "seed": 42,
        "params_json": '{"precision":"bf16","size":4}',
        "rel_error": 1.5e-3,
        "iters": 0,
        "converged": 1,
        "n_nan": 0,
        "n_inf": 0,
        "elapsed_ms": 0.25,
    }
    row.update(overrides)
    return row


class TestProblemGenerator:
    """Test seeded synthetic problems."""

    def test_same_seed_same_data(self):
        a = ProblemGenerator(7).random_matrix(3, 3)
        b = ProblemGenerator(7).random_matrix(3, 3)
        assert torch.equal(a, b)

    def test_different_seed_different_data(self):
        a = ProblemGenerator(7).random_vector(10)
        b = ProblemGenerator(8).random_vector(10)
        assert not torch.equal(a, b)

    def test_global_rng_untouched(self):
        torch.manual_seed(0)
        expected = torch.randn(3)
        torch.manual_seed(0)
        ProblemGenerator(5).random_vector(100)
        assert torch.equal(torch.randn(3), expected)

    def test_shapes_and_dtype(self):
        gen = ProblemGenerator(1)
        assert gen.random_vector(5).shape == (5,)
        matrix = gen.random_matrix(2, 3)
        assert matrix.shape == (2, 3)
        assert matrix.dtype == torch.float64

    def test_vector_scale(self):
        a = ProblemGenerator(3).random_vector(4)
        b = ProblemGenerator(3).random_vector(4, scale=2.0)
        assert torch.allclose(b, 2.0 * a)

    def test_ill_conditioned_scales_first_column(self):
        plain = ProblemGenerator(3).random_matrix(4, 4)
        ill = ProblemGenerator(3).random_matrix(4, 4, ill_conditioned=True)
        assert torch.allclose(ill[:, 0], plain[:, 0] * 1e-6)
        assert torch.equal(ill[:, 1:], plain[:, 1:])

    def test_spd_matrix(self):
        Q = ProblemGenerator(11).spd_matrix(5)
        assert torch.allclose(Q, Q.T)
        eigenvalues = torch.linalg.eigvalsh(Q)
        # M^T M is PSD, so the shift bounds the spectrum from below
        assert eigenvalues.min().item() >= 0.5 - 1e-9

    def test_newton_functions(self):
        f, df = NEWTON_FUNCTIONS["x3_minus_2"]
        assert f(2.0) == 6.0
        assert df(2.0) == 12.0
        f, df = NEWTON_FUNCTIONS["x2_minus_2"]
        assert f(2.0) == 2.0
        assert df(2.0) == 4.0


class TestMetrics:
    """Test accuracy metrics."""

    def test_relative_error_zero(self):
        assert relative_error([1.0, 2.0], [1.0, 2.0]) == 0.0

    def test_relative_error_value(self):
        assert relative_error([3.0, 4.0], [3.0, 3.0]) == pytest.approx(0.2)

    def test_relative_error_zero_truth_uses_eps(self):
        assert relative_error([0.0], [1e-12]) == pytest.approx(1.0)

    def test_relative_error_length_mismatch(self):
        with pytest.raises(ValueError, match="mismatch"):
            relative_error([1.0], [1.0, 2.0])

    def test_relative_error_nan(self):
        assert math.isnan(relative_error([1.0], [float("nan")]))

    def test_counts(self):
        values = [1.0, float("nan"), float("inf"), float("-inf"), np.float32("nan")]
        assert count_nan(values) == 2
        assert count_inf(values) == 2

    def test_timer(self):
        timer = Timer()
        sum(range(1000))
        assert timer.elapsed_ms() >= 0.0

    def test_run_metrics_to_dict(self):
        metrics = RunMetrics(relative_error=0.5, iterations=3, converged=True)
        assert metrics.to_dict()["iterations"] == 3


class TestSinks:
    """Test CSV and in-memory sinks."""

    def test_csv_header(self, tmp_path):
        path = tmp_path / "results" / "out.csv"
        CsvMetricsSink(str(path))
        header = path.read_text().splitlines()[0]
        assert header == "algo,size,precision,seed,params_json,rel_error,iters,converged,n_nan,n_inf,elapsed_ms"

    def test_csv_rows(self, tmp_path):
        path = tmp_path / "out.csv"
        sink = CsvMetricsSink(str(path))
        sink.record(_row())
        sink.record(_row(precision="fp32", rel_error=2e-7))

        df = pd.read_csv(path)
        assert sink.rows_written == 2
        assert list(df.columns) == CSV_COLUMNS
        assert df["precision"].tolist() == ["bf16", "fp32"]
        assert df["params_json"][0] == '{"precision":"bf16","size":4}'

    def test_csv_append(self, tmp_path):
        path = tmp_path / "out.csv"
        CsvMetricsSink(str(path)).record(_row())
        CsvMetricsSink(str(path), append=True).record(_row())
        assert len(pd.read_csv(path)) == 2

    def test_csv_overwrites_without_append(self, tmp_path):
        path = tmp_path / "out.csv"
        CsvMetricsSink(str(path)).record(_row())
        CsvMetricsSink(str(path))
        assert len(pd.read_csv(path)) == 0

    def test_missing_column_raises(self):
        row = _row()
        del row["elapsed_ms"]
        with pytest.raises(ValueError, match="elapsed_ms"):
            MemorySink().record(row)

    def test_memory_sink_orders_columns(self):
        sink = MemorySink()
        sink.record(dict(reversed(list(_row().items()))))
        assert list(sink.rows[0]) == CSV_COLUMNS
        assert list(sink.to_dataframe().columns) == CSV_COLUMNS


class TestReproducibility:
    """Test set_seed_for_reproducibility()."""

    def test_torch(self):
        set_seed_for_reproducibility(42)
        x1 = torch.randn(100)
        set_seed_for_reproducibility(42)
        x2 = torch.randn(100)
        assert torch.equal(x1, x2)

    def test_numpy(self):
        set_seed_for_reproducibility(42)
        x1 = np.random.randn(100)
        set_seed_for_reproducibility(42)
        x2 = np.random.randn(100)
        assert np.array_equal(x1, x2)

    def test_python_random(self):
        set_seed_for_reproducibility(42)
        x1 = [random.random() for _ in range(10)]
        set_seed_for_reproducibility(42)
        x2 = [random.random() for _ in range(10)]
        assert x1 == x2
