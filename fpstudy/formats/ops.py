"""Vectorized codec and rounding operations on torch tensors.

Element-wise equivalents of the scalar transfer functions in
fpstudy.formats.codec and fpstudy.formats.numbers, used to cast whole
problem instances into a precision in one pass instead of a Python loop.

Every function here produces exactly what the scalar path produces for the
same input, including NaN, infinities, saturation and flush-to-zero.

Simulated Quantization Pattern:
  1. codes = quantize_tensor(x)       # uint8 packed codes
  2. x_q = dequantize_tensor(codes)   # float32 representable values
  3. fake_quantize(x) == x_q          # round-trip in one call
"""

from __future__ import annotations

import math

import torch
from torch import Tensor

from fpstudy.formats.codec import P3109_LAYOUT, P3109Layout


def _pow2(exponent: Tensor) -> Tensor:
    """2^exponent as float64 for an integer-valued tensor."""
    return torch.pow(2.0, exponent.to(torch.float64))


def quantize_tensor(x: Tensor, layout: P3109Layout = P3109_LAYOUT) -> Tensor:
    """Quantize a tensor to packed 8-bit codes.

    Args:
        x: Input tensor (any shape, any floating dtype)
        layout: Packed layout specification

    Returns:
        uint8 tensor of the same shape holding packed codes

    Example:
        >>> quantize_tensor(torch.tensor([1.0, -2.5, 1e6]))
        tensor([ 48, 196, 111], dtype=torch.uint8)
    """
    original_shape = x.shape
    x_flat = x.detach().flatten().to(torch.float64)

    negative = torch.signbit(x_flat)
    sign = negative.to(torch.int64) << 7
    abs_x = torch.abs(x_flat)

    # Keep NaN/inf/zero out of frexp; they are overwritten below
    regular = torch.isfinite(x_flat) & (abs_x != 0)
    safe = torch.where(regular, abs_x, torch.ones_like(abs_x))

    mant, exp = torch.frexp(safe)
    exp_val = exp.to(torch.int64) + layout.exponent_bias - 1

    scaled = (mant * 2.0 - 1.0) * float(1 << layout.mantissa_bits)
    # Round half away from zero (scaled is non-negative)
    mantissa = torch.floor(scaled + 0.5).to(torch.int64)

    # Mantissa overflow rounds up to the next exponent
    carry = mantissa > layout.mantissa_mask
    mantissa = torch.where(carry, torch.zeros_like(mantissa), mantissa)
    exp_val = exp_val + carry.to(torch.int64)

    field = torch.clamp(exp_val, 0, layout.exponent_mask) << layout.mantissa_bits
    codes = sign | field | mantissa

    codes = torch.where(exp_val > layout.max_exponent, sign | layout.max_finite_code, codes)
    codes = torch.where(exp_val < layout.min_exponent, sign, codes)
    codes = torch.where(abs_x == 0, sign, codes)

    inf_mask = torch.isinf(x_flat)
    codes = torch.where(
        inf_mask & ~negative, torch.full_like(codes, layout.pos_inf_code), codes
    )
    codes = torch.where(
        inf_mask & negative, torch.full_like(codes, layout.neg_inf_code), codes
    )
    codes = torch.where(
        torch.isnan(x_flat), torch.full_like(codes, layout.nan_code), codes
    )

    return codes.to(torch.uint8).reshape(original_shape)


def dequantize_tensor(codes: Tensor, layout: P3109Layout = P3109_LAYOUT) -> Tensor:
    """Dequantize packed 8-bit codes to float32 values.

    Args:
        codes: Integer tensor of packed codes in [0, 255]
        layout: Packed layout specification

    Returns:
        float32 tensor of the same shape
    """
    original_shape = codes.shape
    c = codes.flatten().to(torch.int64)

    negative = (c & 0x80) != 0
    exponent = (c >> layout.mantissa_bits) & layout.exponent_mask
    mantissa = c & layout.mantissa_mask

    significand = 1.0 + mantissa.to(torch.float64) / float(1 << layout.mantissa_bits)
    magnitude = significand * _pow2(exponent - layout.exponent_bias)
    magnitude = torch.where(exponent == 0, torch.zeros_like(magnitude), magnitude)
    values = torch.where(negative, -magnitude, magnitude)

    values = torch.where(
        c == layout.pos_inf_code, torch.full_like(values, math.inf), values
    )
    values = torch.where(
        c == layout.neg_inf_code, torch.full_like(values, -math.inf), values
    )
    values = torch.where(
        c == layout.nan_code, torch.full_like(values, math.nan), values
    )

    return values.to(torch.float32).reshape(original_shape)


def fake_quantize(x: Tensor, layout: P3109Layout = P3109_LAYOUT) -> Tensor:
    """Round a tensor onto the 8-bit grid, stored as float32."""
    return dequantize_tensor(quantize_tensor(x, layout), layout)


def round_mantissa_tensor(x: Tensor, mantissa_bits: int) -> Tensor:
    """Round a tensor to a float32-range format with a shorter mantissa.

    Round-to-nearest-even, overflow to infinity, flush below the smallest
    normal to signed zero. Matches numbers.round_to_mantissa element-wise.

    Args:
        x: Input tensor (any shape)
        mantissa_bits: Explicit mantissa bits kept (10 for TF32, 7 for BF16)

    Returns:
        float64 tensor of the same shape holding representable values
    """
    x64 = x.detach().to(torch.float64)
    regular = torch.isfinite(x64) & (x64 != 0)
    safe = torch.where(regular, x64, torch.ones_like(x64))

    mant, exp = torch.frexp(safe)
    # torch.round is round-half-to-even
    rounded = torch.round(mant * float(1 << (mantissa_bits + 1)))
    result = rounded * _pow2(exp.to(torch.int64) - mantissa_bits - 1)

    max_finite = math.ldexp(2.0 - math.ldexp(1.0, -mantissa_bits), 127)
    min_normal = math.ldexp(1.0, -126)
    result = torch.where(
        torch.abs(result) > max_finite,
        torch.copysign(torch.full_like(result, math.inf), safe),
        result,
    )
    result = torch.where(
        torch.abs(result) < min_normal,
        torch.copysign(torch.zeros_like(result), safe),
        result,
    )

    return torch.where(regular, result, x64)


__all__ = [
    "quantize_tensor",
    "dequantize_tensor",
    "fake_quantize",
    "round_mantissa_tensor",
]
