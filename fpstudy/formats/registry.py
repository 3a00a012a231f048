"""Precision registry: the five studied representations.

Maps each logical precision to a canonical lowercase name and to the
concrete scalar type the generic kernels run on. This table is the single
dispatch point between configuration/reporting and arithmetic: adding a
representation means adding a member here and a value type in numbers.py.

Precisions:
    FP64:    np.float64 (the truth run)
    FP32:    np.float32
    TF32:    numbers.TF32 (10-bit mantissa)
    BF16:    numbers.BF16 (7-bit mantissa)
    P3109_8: numbers.P3109Number (packed 8-bit code)

Example:
    >>> from fpstudy.formats.registry import precision_from_string, numeric_type
    >>> p = precision_from_string("BFloat16")
    >>> numeric_type(p).__name__
    'BF16'
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Sequence, Union

import numpy as np
import torch

from fpstudy.formats.numbers import BF16, TF32, P3109Number
from fpstudy.formats.ops import quantize_tensor, round_mantissa_tensor


class UnknownFormatError(ValueError):
    """Raised when a precision name is not recognised."""


class PrecisionRegistryError(RuntimeError):
    """Raised when the enum and the registry tables disagree."""


class Precision(Enum):
    FP64 = "fp64"
    FP32 = "fp32"
    TF32 = "tf32"
    BF16 = "bf16"
    P3109_8 = "p3109_8"


_CANONICAL_NAMES: Dict[Precision, str] = {
    Precision.FP64: "fp64",
    Precision.FP32: "fp32",
    Precision.TF32: "tf32",
    Precision.BF16: "bf16",
    Precision.P3109_8: "p3109_8",
}

_NAME_LOOKUP: Dict[str, Precision] = {
    "fp64": Precision.FP64,
    "float64": Precision.FP64,
    "fp32": Precision.FP32,
    "float32": Precision.FP32,
    "tf32": Precision.TF32,
    "tensorfloat32": Precision.TF32,
    "bf16": Precision.BF16,
    "bfloat16": Precision.BF16,
    "p3109": Precision.P3109_8,
    "p3109_8": Precision.P3109_8,
}

_NUMERIC_TYPES: Dict[Precision, type] = {
    Precision.FP64: np.float64,
    Precision.FP32: np.float32,
    Precision.TF32: TF32,
    Precision.BF16: BF16,
    Precision.P3109_8: P3109Number,
}


def precision_to_string(precision: Precision) -> str:
    """Canonical lowercase name of a precision.

    Raises:
        PrecisionRegistryError: If the precision has no registered name
    """
    try:
        return _CANONICAL_NAMES[precision]
    except KeyError:
        raise PrecisionRegistryError(f"Unknown precision enum: {precision!r}") from None


def precision_from_string(name: str) -> Precision:
    """Look up a precision by name, case-insensitively, accepting synonyms.

    Raises:
        UnknownFormatError: If the name is not recognised
    """
    precision = _NAME_LOOKUP.get(str(name).strip().lower())
    if precision is None:
        raise UnknownFormatError(f"Unknown precision string: {name}")
    return precision


def all_precisions() -> List[Precision]:
    """All precisions in study order (truth first)."""
    return list(Precision)


def numeric_type(precision: Precision) -> type:
    """Scalar type the kernels use for a precision."""
    try:
        return _NUMERIC_TYPES[precision]
    except KeyError:
        raise PrecisionRegistryError(f"No numeric type for {precision!r}") from None


def cast_tensor(values: torch.Tensor, precision: Precision) -> list:
    """Cast a tensor of reals into a flat list of precision scalars.

    Uses the vectorized codec/rounding ops for the emulated formats.
    """
    flat = values.detach().flatten().to(torch.float64)
    if precision is Precision.FP64:
        return [np.float64(v) for v in flat.tolist()]
    if precision is Precision.FP32:
        return [np.float32(v) for v in flat.to(torch.float32).tolist()]
    if precision is Precision.TF32:
        return [TF32(v) for v in round_mantissa_tensor(flat, TF32.MANTISSA_BITS).tolist()]
    if precision is Precision.BF16:
        return [BF16(v) for v in round_mantissa_tensor(flat, BF16.MANTISSA_BITS).tolist()]
    if precision is Precision.P3109_8:
        return [P3109Number.from_code(c) for c in quantize_tensor(flat).tolist()]
    raise PrecisionRegistryError(f"No cast for {precision!r}")


def cast_values(values: Iterable[float], precision: Precision) -> list:
    """Cast a flat sequence of reals into precision scalars."""
    return cast_tensor(torch.as_tensor(list(values), dtype=torch.float64), precision)


def cast_matrix(
    rows: Union[torch.Tensor, Sequence[Sequence[float]]], precision: Precision
) -> List[list]:
    """Cast a 2-D tensor or nested n x m sequence into nested scalar lists.

    Raises:
        ValueError: If the input is not 2-D (an empty sequence casts to [])
    """
    if isinstance(rows, torch.Tensor):
        tensor = rows.detach().to(torch.float64)
    else:
        tensor = torch.as_tensor([list(row) for row in rows], dtype=torch.float64)
    if tensor.numel() == 0 and tensor.dim() < 2:
        return []
    if tensor.dim() != 2:
        raise ValueError(f"expected a 2-D matrix, got {tensor.dim()}-D")
    cols = tensor.shape[1]
    flat = cast_tensor(tensor, precision)
    return [flat[i * cols:(i + 1) * cols] for i in range(tensor.shape[0])]


def to_float64_list(values: Iterable) -> List[float]:
    """Convert precision scalars back to Python floats (lossless)."""
    return [float(v) for v in values]


__all__ = [
    "UnknownFormatError",
    "PrecisionRegistryError",
    "Precision",
    "precision_to_string",
    "precision_from_string",
    "all_precisions",
    "numeric_type",
    "cast_tensor",
    "cast_values",
    "cast_matrix",
    "to_float64_list",
]
