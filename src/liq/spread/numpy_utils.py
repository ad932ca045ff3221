"""NumPy conversion helpers for price vectors.

Missing observations are carried as an explicit mask (``numpy.ma``) rather
than as NaN, so every reduction decides on its own whether to skip or
propagate them. ``None``, NaN and polars nulls on input all become masked
entries; masked entries on output become polars nulls or ``None``.
"""

from __future__ import annotations

import math
from typing import Any, Sequence

import numpy as np
import polars as pl


def to_masked_float64(
    data: Sequence[Any] | np.ndarray | pl.Series,
    *,
    allow_2d: bool = False,
) -> np.ma.MaskedArray:
    """Convert price-like data to a float64 masked array.

    Args:
        data: List, tuple, numpy (masked) array or polars Series.
        allow_2d: Accept 2-D input (one column per quantity).

    Returns:
        Masked array where missing and non-finite values are masked.

    Raises:
        ValueError: If the input has the wrong number of dimensions.
    """
    if isinstance(data, pl.Series):
        arr = np.ma.asarray(data.cast(pl.Float64).to_numpy())
    elif isinstance(data, np.ma.MaskedArray):
        arr = data.astype(np.float64)
    else:
        arr = np.ma.asarray(np.asarray(data, dtype=np.float64))

    max_ndim = 2 if allow_2d else 1
    if arr.ndim == 0 or arr.ndim > max_ndim:
        raise ValueError(f"Expected {max_ndim}-D input at most, got {arr.ndim}-D")
    return np.ma.masked_invalid(arr)


def to_optional_float(value: Any) -> float | None:
    """Convert a numpy scalar (possibly masked) to ``float`` or ``None``."""
    if value is np.ma.masked or np.ma.is_masked(value):
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def from_optional(values: Sequence[float | None]) -> np.ma.MaskedArray:
    """Build a masked vector from optional floats (``None`` is masked)."""
    return np.ma.masked_array(
        [0.0 if v is None else v for v in values],
        mask=[v is None for v in values],
        dtype=np.float64,
    )


def to_series(values: np.ma.MaskedArray, name: str) -> pl.Series:
    """Convert a 1-D masked array to a Float64 polars Series with nulls."""
    filled = np.ma.masked_invalid(values).filled(np.nan)
    return pl.Series(name, filled, dtype=pl.Float64, nan_to_null=True)
