"""Tests for the precision-generic kernels: matmul and FIR.

Tests validate:
1. Reference results in 64-bit
2. Shape checks
3. Same kernel runs over every precision scalar type
4. Kahan summation beats plain summation on large-plus-tiny sums
5. Non-finite values propagate instead of raising
"""

import math

import numpy as np
import pytest

from fpstudy.algorithms import (
    FIROptions,
    KernelStatus,
    MatMulOptions,
    fir_filter,
    matmul_square,
    reduce_sum,
    run_fir,
    run_matmul,
)
from fpstudy.formats import Precision, all_precisions, cast_matrix, cast_values


def _floats(rows):
    return [[float(v) for v in row] for row in rows]


class TestMatMul:
    """Test matmul_square."""

    A = [[1.0, 2.0], [3.0, 4.0]]
    B = [[5.0, 6.0], [7.0, 8.0]]

    def test_reference_fp64(self):
        C = matmul_square(cast_matrix(self.A, Precision.FP64), cast_matrix(self.B, Precision.FP64))
        assert _floats(C) == [[19.0, 22.0], [43.0, 50.0]]

    def test_plain_python_floats(self):
        assert _floats(matmul_square(self.A, self.B)) == [[19.0, 22.0], [43.0, 50.0]]

    @pytest.mark.parametrize("use_kahan", [False, True])
    @pytest.mark.parametrize("precision", [Precision.FP32, Precision.TF32, Precision.BF16])
    def test_exact_in_wider_formats(self, precision, use_kahan):
        """Small integers are exact in every format with >= 7 mantissa bits."""
        A = cast_matrix(self.A, precision)
        B = cast_matrix(self.B, precision)
        C = matmul_square(A, B, MatMulOptions(use_kahan=use_kahan, accumulate_in_fp32=False))
        assert _floats(C) == [[19.0, 22.0], [43.0, 50.0]]

    @pytest.mark.parametrize("wide", [False, True])
    def test_p3109_saturates(self, wide):
        """Every cell exceeds 15.5, so every cell saturates (never inf)."""
        A = cast_matrix(self.A, Precision.P3109_8)
        B = cast_matrix(self.B, Precision.P3109_8)
        C = matmul_square(A, B, MatMulOptions(accumulate_in_fp32=wide))
        assert _floats(C) == [[15.5, 15.5], [15.5, 15.5]]

    def test_identity(self):
        for precision in all_precisions():
            identity = cast_matrix([[1.0, 0.0], [0.0, 1.0]], precision)
            M = cast_matrix([[0.5, -1.5], [2.0, 3.0]], precision)
            assert _floats(matmul_square(identity, M)) == [[0.5, -1.5], [2.0, 3.0]]

    def test_result_type_follows_inputs(self):
        A = cast_matrix(self.A, Precision.BF16)
        C = matmul_square(A, A, MatMulOptions(accumulate_in_fp32=True))
        assert type(C[0][0]) is type(A[0][0])

    def test_non_square_raises(self):
        with pytest.raises(ValueError):
            matmul_square([[1.0, 2.0]], [[1.0], [2.0]])

    def test_size_mismatch_raises(self):
        with pytest.raises(ValueError):
            matmul_square(self.A, [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])

    def test_empty(self):
        assert matmul_square([], []) == []

    def test_nan_propagates(self):
        A = cast_matrix([[float("nan"), 0.0], [0.0, 1.0]], Precision.FP32)
        C = matmul_square(A, cast_matrix(self.B, Precision.FP32))
        assert math.isnan(float(C[0][0]))
        assert float(C[1][1]) == 8.0

    def test_run_matmul_result(self):
        result = run_matmul(self.A, self.B)
        assert [float(v) for v in result.values] == [19.0, 22.0, 43.0, 50.0]
        assert result.iterations == 0
        assert result.converged is True
        assert result.status is KernelStatus.COMPLETED


class TestFIR:
    """Test fir_filter."""

    def test_reference(self):
        y = fir_filter([0.5, 0.5], [1.0, 2.0, 3.0, 4.0])
        assert [float(v) for v in y] == [0.5, 1.5, 2.5, 3.5]

    def test_identity_filter(self):
        for precision in all_precisions():
            x = cast_values([1.0, 2.0, 3.0], precision)
            y = fir_filter(cast_values([1.0], precision), x)
            assert [float(v) for v in y] == [1.0, 2.0, 3.0]

    def test_output_length_matches_input(self):
        y = fir_filter([1.0, 1.0, 1.0, 1.0, 1.0], [1.0, 1.0])
        assert [float(v) for v in y] == [1.0, 2.0]

    def test_empty_signal(self):
        assert fir_filter([1.0], []) == []

    def test_kahan_beats_plain(self):
        """One large tap then many tiny ones, summed in float32."""
        h = cast_values([1.0] + [1e-8] * 199, Precision.FP32)
        x = cast_values([1.0] * 200, Precision.FP32)
        truth = 1.0 + 199 * 1e-8

        plain = float(fir_filter(h, x, FIROptions(use_kahan=False))[-1])
        kahan = float(fir_filter(h, x, FIROptions(use_kahan=True))[-1])

        assert plain == 1.0
        assert abs(kahan - truth) < abs(plain - truth)

    def test_run_fir_result(self):
        result = run_fir([0.5, 0.5], [1.0, 2.0])
        assert [float(v) for v in result.values] == [0.5, 1.5]
        assert result.status is KernelStatus.COMPLETED


class TestReduceSum:
    """Test the shared reduction helper."""

    def test_plain_sum(self):
        assert reduce_sum([1.0, 2.0, 3.0], 0.0) == 6.0

    def test_empty_returns_zero(self):
        assert reduce_sum([], np.float32(0.0), use_kahan=True) == 0.0

    def test_kahan_float32(self):
        terms = [np.float32(1.0)] + [np.float32(1e-8)] * 1000
        plain = reduce_sum(terms, np.float32(0.0))
        kahan = reduce_sum(terms, np.float32(0.0), use_kahan=True)
        assert plain == np.float32(1.0)
        assert abs(float(kahan) - (1.0 + 1e-5)) < 1e-6
