"""Tests for precision value types and the accumulation policy.

Tests validate:
1. P3109Number construction, codes and requantizing arithmetic
2. Unguarded division (inf / NaN follow the 32-bit result)
3. TF32 / BF16 round-to-nearest-even, overflow and flush
4. Accumulation policy setters, context manager and resolution
"""

import math

import numpy as np
import pytest

from fpstudy.formats.codec import canonical_codes
from fpstudy.formats.numbers import (
    BF16,
    TF32,
    P3109Number,
    accumulation_policy,
    get_accumulation_policy,
    resolve_accumulation,
    round_to_mantissa,
    set_accumulation_policy,
)


@pytest.fixture(autouse=True)
def restore_policy():
    """Restore the process-wide accumulation policy after each test."""
    previous = get_accumulation_policy()
    yield
    set_accumulation_policy(previous)


class TestP3109Number:
    """Test the 8-bit value type."""

    def test_construction_quantizes(self):
        assert P3109Number(1.0).code == 0x30
        assert float(P3109Number(3.3)) == 3.25

    def test_default_is_zero(self):
        assert P3109Number().code == 0x00

    def test_from_code(self):
        assert float(P3109Number.from_code(0x6F)) == 15.5
        with pytest.raises(ValueError):
            P3109Number.from_code(300)

    def test_construct_from_value_type(self):
        x = P3109Number(2.5)
        assert P3109Number(x) == x

    def test_addition(self):
        assert float(P3109Number(1.5) + P3109Number(1.5)) == 3.0

    def test_result_is_requantized(self):
        """1.0 + 0.25 = 1.25 is representable; 8.0 + 0.25 ties upward."""
        assert float(P3109Number(1.0) + P3109Number(0.25)) == 1.25
        assert float(P3109Number(8.0) + P3109Number(0.25)) == 8.5

    def test_overflow_saturates(self):
        assert float(P3109Number(15.5) * P3109Number(4.0)) == 15.5

    def test_mixed_operands(self):
        assert float(P3109Number(2.0) * 3) == 6.0
        assert float(3 - P3109Number(1.0)) == 2.0
        assert float(1.0 + P3109Number(1.0)) == 2.0

    def test_division_by_zero_gives_infinity(self):
        result = P3109Number(1.0) / P3109Number(0.0)
        assert math.isinf(float(result))
        assert float(result) > 0

    def test_zero_over_zero_gives_nan(self):
        assert math.isnan(float(P3109Number(0.0) / P3109Number(0.0)))

    def test_nan_propagates(self):
        assert math.isnan(float(P3109Number(float("nan")) + P3109Number(1.0)))

    def test_equality_compares_codes(self):
        assert P3109Number(1.0) == P3109Number(1.01)
        assert P3109Number(0.0) != P3109Number(-0.0)
        assert P3109Number(float("nan")) == P3109Number(float("nan"))
        assert hash(P3109Number(1.0)) == hash(P3109Number(1.01))

    def test_negation_is_involution(self):
        for code in canonical_codes():
            x = P3109Number.from_code(code)
            assert -(-x) == x

    def test_abs(self):
        assert float(abs(P3109Number(-2.5))) == 2.5


class TestReducedFloat:
    """Test TF32 / BF16 rounding and arithmetic."""

    def test_bf16_tie_rounds_to_even(self):
        """1 + 2^-8 is halfway between 1.0 and 1 + 2^-7."""
        assert float(BF16(1.0 + 2.0 ** -8)) == 1.0
        assert float(BF16(1.0 + 3 * 2.0 ** -8)) == 1.0 + 2.0 ** -6

    def test_tf32_tie_rounds_to_even(self):
        assert float(TF32(1.0 + 2.0 ** -11)) == 1.0
        assert float(TF32(1.0 + 2.0 ** -10)) == 1.0 + 2.0 ** -10

    def test_overflow_to_infinity(self):
        assert float(BF16(1e39)) == math.inf
        assert float(BF16(-1e39)) == -math.inf

    def test_flush_to_zero(self):
        assert float(BF16(1e-40)) == 0.0
        assert math.copysign(1.0, float(BF16(-1e-40))) == -1.0

    def test_specials_pass_through(self):
        assert math.isnan(float(TF32(float("nan"))))
        assert float(TF32(float("inf"))) == math.inf

    def test_arithmetic_keeps_type(self):
        result = BF16(1.0) + 1.0
        assert isinstance(result, BF16)
        assert float(result) == 2.0

    def test_small_addend_is_lost(self):
        assert float(BF16(1.0) + BF16(2.0 ** -9)) == 1.0
        assert float(TF32(1.0) + TF32(2.0 ** -9)) == 1.0 + 2.0 ** -9

    def test_division_by_zero(self):
        assert float(TF32(1.0) / TF32(0.0)) == math.inf

    def test_types_do_not_compare_equal(self):
        assert TF32(1.0) != BF16(1.0)

    def test_round_to_mantissa_matches_float32(self):
        """23 mantissa bits reproduce float32 rounding for normal values."""
        for value in [0.1, 1.0 / 3.0, 123.456, -7.77e10]:
            assert round_to_mantissa(value, 23) == float(np.float32(value))


class TestAccumulationPolicy:
    """Test the process-wide accumulation policy."""

    def test_default_is_wide(self):
        assert get_accumulation_policy() is True

    def test_set_and_get(self):
        set_accumulation_policy(False)
        assert get_accumulation_policy() is False
        set_accumulation_policy(True)
        assert get_accumulation_policy() is True

    def test_context_manager_restores(self):
        set_accumulation_policy(True)
        with accumulation_policy(False):
            assert get_accumulation_policy() is False
        assert get_accumulation_policy() is True

    def test_context_manager_restores_on_error(self):
        set_accumulation_policy(True)
        with pytest.raises(RuntimeError):
            with accumulation_policy(False):
                raise RuntimeError("boom")
        assert get_accumulation_policy() is True

    def test_resolution(self):
        """Explicit requests win; only the 8-bit type reads the policy."""
        with accumulation_policy(False):
            assert resolve_accumulation(P3109Number, None) is False
            assert resolve_accumulation(P3109Number, True) is True
        with accumulation_policy(True):
            assert resolve_accumulation(P3109Number, None) is True
            assert resolve_accumulation(np.float32, None) is False
            assert resolve_accumulation(BF16, None) is False
            assert resolve_accumulation(np.float32, True) is True
