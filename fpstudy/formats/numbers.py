"""Scalar value types for the emulated precisions.

Provides the arithmetic wrappers the generic kernels run on:

- P3109Number: owns one packed 8-bit code; every operator dequantizes both
  operands to 32-bit, computes in 32-bit, and requantizes the result
- TF32: 8-bit exponent, 10-bit mantissa (float32 with a short mantissa)
- BF16: 8-bit exponent, 7-bit mantissa

FP64 and FP32 use numpy's np.float64 and np.float32 directly.

Accumulation Policy:
    The process-wide flag decides whether kernels keep partial sums of
    P3109Number reductions in 32-bit working precision (True) or round-trip
    every add/multiply through the codec (False). Kernels read it only when
    the caller does not pass accumulate_in_fp32 explicitly.

Example:
    >>> from fpstudy.formats.numbers import P3109Number, accumulation_policy
    >>> a = P3109Number(1.5)
    >>> float(a + a)
    3.0
    >>> with accumulation_policy(False):
    ...     pass  # kernels called here requantize after every operation
"""

from __future__ import annotations

import math
import operator
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Protocol, Union

import numpy as np

from fpstudy.formats.codec import dequantize, quantize


class PrecisionScalar(Protocol):
    """Numeric capability every kernel value type provides."""

    def __add__(self, other): ...

    def __sub__(self, other): ...

    def __mul__(self, other): ...

    def __truediv__(self, other): ...

    def __neg__(self): ...

    def __float__(self) -> float: ...


Real = Union[int, float, np.floating]


# ---------------------------------------------------------------------------
# Accumulation policy
# ---------------------------------------------------------------------------

_accumulate_in_fp32 = True


def set_accumulation_policy(flag: bool) -> None:
    """Set the process-wide accumulation policy for 8-bit reductions."""
    global _accumulate_in_fp32
    _accumulate_in_fp32 = bool(flag)


def get_accumulation_policy() -> bool:
    """Return the current process-wide accumulation policy."""
    return _accumulate_in_fp32


@contextmanager
def accumulation_policy(flag: bool) -> Iterator[None]:
    """Temporarily set the accumulation policy, restoring it on exit."""
    previous = get_accumulation_policy()
    set_accumulation_policy(flag)
    try:
        yield
    finally:
        set_accumulation_policy(previous)


def resolve_accumulation(numeric_type: type, requested: Optional[bool]) -> bool:
    """Decide whether a kernel accumulates in 32-bit working precision.

    An explicit request always wins. Otherwise P3109Number follows the
    global policy and every other type accumulates in its own precision.
    """
    if requested is not None:
        return bool(requested)
    if numeric_type is P3109Number:
        return get_accumulation_policy()
    return False


# ---------------------------------------------------------------------------
# 8-bit value type
# ---------------------------------------------------------------------------


def _fp32(value) -> np.float32:
    return np.float32(float(value))


class P3109Number:
    """Value type wrapping one packed 8-bit code.

    Binary operators dequantize both operands to np.float32, perform the
    operation in 32-bit, and quantize the result into a new value. Plain
    reals on either side are quantized first. Division by zero is not
    guarded: the 32-bit inf/NaN result is quantized like any other value.

    Equality compares codes, so 0.0 and -0.0 are distinct and NaN equals
    itself.
    """

    __slots__ = ("_code",)

    def __init__(self, value: Real = 0.0):
        self._code = quantize(float(value))

    @classmethod
    def from_code(cls, code: int) -> "P3109Number":
        """Wrap an existing packed code without rounding."""
        code = int(code)
        if not 0 <= code <= 255:
            raise ValueError(f"code must be in [0, 255], got {code}")
        number = cls.__new__(cls)
        number._code = code
        return number

    @property
    def code(self) -> int:
        return self._code

    def __float__(self) -> float:
        return dequantize(self._code)

    def _coerce(self, other) -> "P3109Number":
        if isinstance(other, P3109Number):
            return other
        return P3109Number(other)

    def _binary(self, lhs, rhs, op: Callable) -> "P3109Number":
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            result = op(_fp32(lhs), _fp32(rhs))
        return P3109Number(result)

    def __add__(self, other):
        return self._binary(self, self._coerce(other), operator.add)

    def __radd__(self, other):
        return self._binary(self._coerce(other), self, operator.add)

    def __sub__(self, other):
        return self._binary(self, self._coerce(other), operator.sub)

    def __rsub__(self, other):
        return self._binary(self._coerce(other), self, operator.sub)

    def __mul__(self, other):
        return self._binary(self, self._coerce(other), operator.mul)

    def __rmul__(self, other):
        return self._binary(self._coerce(other), self, operator.mul)

    def __truediv__(self, other):
        return self._binary(self, self._coerce(other), operator.truediv)

    def __rtruediv__(self, other):
        return self._binary(self._coerce(other), self, operator.truediv)

    def __neg__(self) -> "P3109Number":
        return P3109Number(-dequantize(self._code))

    def __pos__(self) -> "P3109Number":
        return self

    def __abs__(self) -> "P3109Number":
        return P3109Number(abs(dequantize(self._code)))

    def __eq__(self, other) -> bool:
        if isinstance(other, P3109Number):
            return self._code == other._code
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("P3109Number", self._code))

    def __repr__(self) -> str:
        return f"P3109Number({float(self)!r}, code=0x{self._code:02X})"


# ---------------------------------------------------------------------------
# Reduced-mantissa float32 emulations
# ---------------------------------------------------------------------------

# float32 exponent range shared by TF32 and BF16
_EXPONENT_BIAS = 127
_MIN_NORMAL = math.ldexp(1.0, 1 - _EXPONENT_BIAS)


def round_to_mantissa(value: float, mantissa_bits: int) -> float:
    """Round a real to a float32-range format with a shorter mantissa.

    Uses round-to-nearest-even on the significand. Results above the
    largest finite value overflow to infinity; results below the smallest
    normal flush to signed zero. NaN and infinities pass through.

    Args:
        value: Real number to round
        mantissa_bits: Explicit mantissa bits kept (10 for TF32, 7 for BF16)

    Returns:
        The nearest representable value as a Python float
    """
    value = float(value)
    if math.isnan(value) or math.isinf(value) or value == 0.0:
        return value

    mant, exp = math.frexp(value)
    # Python round() is round-half-even and exact on a scaled double
    rounded = round(math.ldexp(mant, mantissa_bits + 1))
    result = math.ldexp(rounded, exp - mantissa_bits - 1)

    max_finite = math.ldexp(2.0 - math.ldexp(1.0, -mantissa_bits), _EXPONENT_BIAS)
    if abs(result) > max_finite:
        return math.copysign(math.inf, value)
    if abs(result) < _MIN_NORMAL:
        return math.copysign(0.0, value)
    return result


class ReducedFloat:
    """Base for float32-range values with a reduced mantissa.

    Operators compute in 64-bit and round once to the target format, which
    is the correctly rounded result for these short mantissas.
    """

    __slots__ = ("_value",)

    MANTISSA_BITS = 23
    NAME = "reduced"

    def __init__(self, value: Real = 0.0):
        self._value = round_to_mantissa(float(value), self.MANTISSA_BITS)

    def __float__(self) -> float:
        return self._value

    def _binary(self, lhs, rhs, op: Callable):
        with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            result = op(np.float64(float(lhs)), np.float64(float(rhs)))
        return type(self)(result)

    def __add__(self, other):
        return self._binary(self, other, operator.add)

    def __radd__(self, other):
        return self._binary(other, self, operator.add)

    def __sub__(self, other):
        return self._binary(self, other, operator.sub)

    def __rsub__(self, other):
        return self._binary(other, self, operator.sub)

    def __mul__(self, other):
        return self._binary(self, other, operator.mul)

    def __rmul__(self, other):
        return self._binary(other, self, operator.mul)

    def __truediv__(self, other):
        return self._binary(self, other, operator.truediv)

    def __rtruediv__(self, other):
        return self._binary(other, self, operator.truediv)

    def __neg__(self):
        return type(self)(-self._value)

    def __pos__(self):
        return self

    def __abs__(self):
        return type(self)(abs(self._value))

    def __eq__(self, other) -> bool:
        if isinstance(other, ReducedFloat):
            return type(self) is type(other) and self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.NAME, self._value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class TF32(ReducedFloat):
    """TensorFloat-32: 1 sign, 8 exponent, 10 mantissa bits."""

    __slots__ = ()

    MANTISSA_BITS = 10
    NAME = "tf32"


class BF16(ReducedFloat):
    """bfloat16: 1 sign, 8 exponent, 7 mantissa bits."""

    __slots__ = ()

    MANTISSA_BITS = 7
    NAME = "bf16"


__all__ = [
    "PrecisionScalar",
    "set_accumulation_policy",
    "get_accumulation_policy",
    "accumulation_policy",
    "resolve_accumulation",
    "P3109Number",
    "round_to_mantissa",
    "ReducedFloat",
    "TF32",
    "BF16",
]
