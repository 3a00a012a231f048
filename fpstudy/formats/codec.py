"""P3109 8-bit format layout with bit-level transfer functions.

This module provides the mathematical foundation for the 8-bit format.
The bit-index <-> real value mapping is precisely defined and total: every
real maps to a code and every code maps to a real.

Packed Code Structure:
- 8 bits total: sign (1) + exponent (3) + mantissa (4), exponent bias 3
- Exponent field 0 encodes signed zero (no denormalized numbers)
- Exponent fields 1..6 encode normals: (-1)^s * (1 + m/16) * 2^(e - 3)
- 0x7F is +inf, 0xFE is -inf, 0xFF is NaN

Rounding:
- Mantissa rounds half away from zero
- Exponent overflow saturates to the largest finite magnitude (0x6F, 15.5)
- Exponent underflow flushes to signed zero (below 0.25)

Transfer Functions:
- quantize(value): Convert real value to packed code
- dequantize(code): Convert packed code to real value
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class P3109Layout:
    """Specification for the packed 8-bit layout.

    Attributes:
        exponent_bits: Number of exponent bits
        mantissa_bits: Number of explicit mantissa bits
        exponent_bias: Exponent bias for normalized numbers
    """

    exponent_bits: int = 3
    mantissa_bits: int = 4
    exponent_bias: int = 3

    @property
    def mantissa_mask(self) -> int:
        return (1 << self.mantissa_bits) - 1

    @property
    def exponent_mask(self) -> int:
        return (1 << self.exponent_bits) - 1

    @property
    def max_exponent(self) -> int:
        """Largest exponent field quantization produces (top one is reserved)."""
        return (1 << self.exponent_bits) - 2

    @property
    def min_exponent(self) -> int:
        return 1

    @property
    def pos_inf_code(self) -> int:
        return (self.exponent_mask << self.mantissa_bits) | self.mantissa_mask

    @property
    def neg_inf_code(self) -> int:
        return 0x80 | (self.pos_inf_code - 1)

    @property
    def nan_code(self) -> int:
        return 0x80 | self.pos_inf_code

    @property
    def max_finite_code(self) -> int:
        """Positive code with max exponent and all-ones mantissa."""
        return ((self.max_exponent + 1) << self.mantissa_bits) - 1

    @property
    def max_finite_value(self) -> float:
        """Maximum finite positive value quantization can produce."""
        mantissa_value = 1.0 + self.mantissa_mask / (1 << self.mantissa_bits)
        return math.ldexp(mantissa_value, self.max_exponent - self.exponent_bias)

    @property
    def min_normal_value(self) -> float:
        """Smallest positive nonzero value."""
        return math.ldexp(1.0, self.min_exponent - self.exponent_bias)

    def quantize(self, value: float) -> int:
        """Convert real value to the nearest packed code.

        Args:
            value: Real number to quantize (any float, including NaN/inf)

        Returns:
            Integer in range [0, 255] holding the packed code
        """
        value = float(value)
        if math.isnan(value):
            return self.nan_code
        if math.isinf(value):
            return self.pos_inf_code if value > 0 else self.neg_inf_code

        sign = 0x80 if math.copysign(1.0, value) < 0 else 0x00
        abs_value = abs(value)
        if abs_value == 0.0:
            return sign

        # abs_value = mant * 2^exp with mant in [0.5, 1)
        mant, exp = math.frexp(abs_value)
        exp_val = exp + self.exponent_bias - 1

        if exp_val > self.max_exponent:
            return sign | self.max_finite_code
        if exp_val < self.min_exponent:
            return sign

        scaled = (mant * 2.0 - 1.0) * (1 << self.mantissa_bits)
        mantissa = _round_half_away(scaled)
        if mantissa > self.mantissa_mask:
            # Mantissa overflow rounds up to the next exponent
            mantissa = 0
            exp_val += 1
            if exp_val > self.max_exponent:
                return sign | self.max_finite_code

        return sign | (exp_val << self.mantissa_bits) | mantissa

    def dequantize(self, code: int) -> float:
        """Convert packed code to real value.

        Args:
            code: Integer in range [0, 255] holding the packed code

        Returns:
            Real number represented by this code
        """
        code = int(code)
        if not 0 <= code <= 255:
            raise ValueError(f"code must be in [0, 255], got {code}")

        if code == self.nan_code:
            return math.nan
        if code == self.pos_inf_code:
            return math.inf
        if code == self.neg_inf_code:
            return -math.inf

        negative = bool(code & 0x80)
        exponent = (code >> self.mantissa_bits) & self.exponent_mask
        mantissa = code & self.mantissa_mask

        if exponent == 0:
            return -0.0 if negative else 0.0

        mantissa_value = 1.0 + mantissa / (1 << self.mantissa_bits)
        value = math.ldexp(mantissa_value, exponent - self.exponent_bias)
        return -value if negative else value

    def is_special(self, code: int) -> bool:
        """True for the NaN and infinity codes."""
        return code in (self.nan_code, self.pos_inf_code, self.neg_inf_code)

    def is_reserved(self, code: int) -> bool:
        """True for codes quantization never produces.

        Covers the non-finite codes, every code with the all-ones exponent
        field, and zero-exponent codes with a nonzero mantissa (aliases of
        signed zero).
        """
        exponent = (code >> self.mantissa_bits) & self.exponent_mask
        mantissa = code & self.mantissa_mask
        if self.is_special(code) or exponent == self.exponent_mask:
            return True
        return exponent == 0 and mantissa != 0

    def canonical_codes(self) -> List[int]:
        """All codes c with quantize(dequantize(c)) == c, ascending."""
        return [code for code in range(256) if not self.is_reserved(code)]


def _round_half_away(value: float) -> int:
    """Round a non-negative float to nearest integer, ties away from zero."""
    return int(math.floor(value + 0.5))


# The one layout this package studies
P3109_LAYOUT = P3109Layout()

NAN_CODE = P3109_LAYOUT.nan_code
POS_INF_CODE = P3109_LAYOUT.pos_inf_code
NEG_INF_CODE = P3109_LAYOUT.neg_inf_code
MAX_FINITE_CODE = P3109_LAYOUT.max_finite_code
MAX_FINITE_VALUE = P3109_LAYOUT.max_finite_value
MIN_NORMAL_VALUE = P3109_LAYOUT.min_normal_value


def quantize(value: float, layout: P3109Layout = P3109_LAYOUT) -> int:
    """Quantize a real value to a packed 8-bit code.

    Never raises: NaN, infinities, overflow and underflow all map to
    defined codes.

    Example:
        >>> quantize(1.0)
        48
        >>> hex(quantize(1e6))
        '0x6f'
    """
    return layout.quantize(value)


def dequantize(code: int, layout: P3109Layout = P3109_LAYOUT) -> float:
    """Dequantize a packed 8-bit code back to a real value.

    Example:
        >>> dequantize(0x30)
        1.0
    """
    return layout.dequantize(code)


def is_special(code: int, layout: P3109Layout = P3109_LAYOUT) -> bool:
    return layout.is_special(code)


def is_reserved(code: int, layout: P3109Layout = P3109_LAYOUT) -> bool:
    return layout.is_reserved(code)


def canonical_codes(layout: P3109Layout = P3109_LAYOUT) -> List[int]:
    return layout.canonical_codes()


__all__ = [
    "P3109Layout",
    "P3109_LAYOUT",
    "NAN_CODE",
    "POS_INF_CODE",
    "NEG_INF_CODE",
    "MAX_FINITE_CODE",
    "MAX_FINITE_VALUE",
    "MIN_NORMAL_VALUE",
    "quantize",
    "dequantize",
    "is_special",
    "is_reserved",
    "canonical_codes",
]
