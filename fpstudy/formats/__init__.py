"""Precision formats, the 8-bit codec, and the precision registry.

This package provides the precision abstraction layer: the packed 8-bit
codec with its bit-level transfer functions, scalar value types for the
emulated formats, vectorized torch versions of the codec, and the registry
mapping precision names to scalar types.

Codec:
    quantize: Convert a real to a packed 8-bit code (saturating, flush-to-zero)
    dequantize: Convert a packed code back to a real
    P3109Layout: Layout specification (1 sign, 3 exponent, 4 mantissa, bias 3)

Value Types:
    P3109Number: Packed 8-bit value with requantizing arithmetic
    TF32, BF16: Reduced-mantissa float32 emulations
    set_accumulation_policy / get_accumulation_policy: Global 8-bit policy

Registry:
    Precision: FP64, FP32, TF32, BF16, P3109_8
    precision_from_string / precision_to_string: Name <-> enum
    numeric_type: Enum -> scalar type dispatch

Example:
    >>> from fpstudy.formats import quantize, dequantize, P3109Number
    >>> dequantize(quantize(3.3))
    3.25
    >>> float(P3109Number(2.0) * P3109Number(1.5))
    3.0
"""

from fpstudy.formats.codec import (
    P3109Layout,
    P3109_LAYOUT,
    NAN_CODE,
    POS_INF_CODE,
    NEG_INF_CODE,
    MAX_FINITE_CODE,
    MAX_FINITE_VALUE,
    MIN_NORMAL_VALUE,
    quantize,
    dequantize,
    is_special,
    is_reserved,
    canonical_codes,
)
from fpstudy.formats.numbers import (
    PrecisionScalar,
    P3109Number,
    ReducedFloat,
    TF32,
    BF16,
    round_to_mantissa,
    set_accumulation_policy,
    get_accumulation_policy,
    accumulation_policy,
    resolve_accumulation,
)
from fpstudy.formats.ops import (
    quantize_tensor,
    dequantize_tensor,
    fake_quantize,
    round_mantissa_tensor,
)
from fpstudy.formats.registry import (
    Precision,
    UnknownFormatError,
    PrecisionRegistryError,
    precision_to_string,
    precision_from_string,
    all_precisions,
    numeric_type,
    cast_tensor,
    cast_values,
    cast_matrix,
    to_float64_list,
)

__all__ = [
    # Codec
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
    # Value types
    "PrecisionScalar",
    "P3109Number",
    "ReducedFloat",
    "TF32",
    "BF16",
    "round_to_mantissa",
    "set_accumulation_policy",
    "get_accumulation_policy",
    "accumulation_policy",
    "resolve_accumulation",
    # Vectorized ops
    "quantize_tensor",
    "dequantize_tensor",
    "fake_quantize",
    "round_mantissa_tensor",
    # Registry
    "Precision",
    "UnknownFormatError",
    "PrecisionRegistryError",
    "precision_to_string",
    "precision_from_string",
    "all_precisions",
    "numeric_type",
    "cast_tensor",
    "cast_values",
    "cast_matrix",
    "to_float64_list",
]
