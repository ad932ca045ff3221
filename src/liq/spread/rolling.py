"""Rolling sums and means over variable windows with explicit missing values.

Every window specification is first resolved into per-position half-open
row ranges ``[start, stop)``; a single cumulative-sum reduction then serves
all of them in O(N) per column.

Window specifications:
    - ``int`` width ``w``: position ``i`` covers rows ``i - w + 1 .. i``
      (clipped at the first row).
    - sequence of length N: positive per-position widths, e.g. ``range(1, N + 1)``
      for an expanding window.
    - any other sequence: strictly increasing endpoints ``e_1 < ... < e_k``.
      Positions in ``(e_{j-1}, e_j]`` share the segment ``e_{j-1} .. e_j``;
      positions up to ``e_1`` and after ``e_k`` have no window.

``shift`` drops the first ``shift`` rows of every window. The spread
estimator uses ``shift=1`` because the first period of a window only
provides lagged prices.

Example:
    >>> import numpy as np
    >>> from liq.spread.rolling import rolling_mean
    >>> rolling_mean(np.ma.array([1.0, 2.0, 3.0, 4.0]), width=2).tolist()
    [1.0, 1.5, 2.5, 3.5]
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from liq.spread.exceptions import ConfigurationError
from liq.spread.logging_config import get_logger, log_invalid_parameter
from liq.spread.numpy_utils import to_masked_float64

logger = get_logger("rolling")

WindowSpec = int | Sequence[int] | np.ndarray


def _invalid(
    message: str, value: Any, valid_range: str, parameter: str = "width"
) -> ConfigurationError:
    error = ConfigurationError(message, parameter=parameter, value=value, valid_range=valid_range)
    log_invalid_parameter(logger, error)
    return error


def _as_int_array(width: Any) -> np.ndarray:
    """Coerce a window specification to an int64 array, rejecting non-integers."""
    if isinstance(width, (bool, np.bool_)):
        raise _invalid("Window width must be an integer", width, "integers")

    arr = np.asarray(width)
    if arr.dtype == np.bool_:
        raise _invalid("Window width must be an integer", width, "integers")
    if np.issubdtype(arr.dtype, np.integer):
        return arr.astype(np.int64)
    if np.issubdtype(arr.dtype, np.floating):
        if not np.all(np.isfinite(arr)) or not np.all(arr == np.floor(arr)):
            raise _invalid("Window width must be integral", width, "integers")
        return arr.astype(np.int64)
    raise _invalid("Window width must be numeric", width, "integers")


def resolve_windows(
    width: WindowSpec,
    n: int,
    shift: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Resolve a window specification into per-position row ranges.

    Args:
        width: Integer width, per-position widths or endpoints.
        n: Number of positions.
        shift: Rows dropped from the start of every window.

    Returns:
        Tuple ``(start, stop)`` of int64 arrays of length ``n``. Position
        ``i`` covers rows ``start[i]:stop[i]``; ``start == stop`` means an
        empty window.

    Raises:
        ConfigurationError: If the specification is malformed.
    """
    if shift < 0:
        raise _invalid("Shift must be non-negative", shift, ">= 0", parameter="shift")

    spec = _as_int_array(width)
    index = np.arange(n, dtype=np.int64)

    if spec.ndim == 0:
        if spec < 1:
            raise _invalid("Window width must be positive", int(spec), ">= 1")
        start = np.maximum(index - int(spec) + 1 + shift, 0)
        stop = index + 1
    elif spec.ndim != 1:
        raise _invalid("Window specification must be 1-D", spec.shape, "1-D sequence")
    elif len(spec) == n:
        if np.any(spec < 1):
            raise _invalid("Window widths must be positive", int(spec.min()), ">= 1")
        start = np.maximum(index - spec + 1 + shift, 0)
        stop = index + 1
    else:
        start, stop = _resolve_endpoints(spec, n, shift)

    return np.minimum(start, stop), stop


def _resolve_endpoints(endpoints: np.ndarray, n: int, shift: int) -> tuple[np.ndarray, np.ndarray]:
    if len(endpoints) == 0:
        raise _invalid("Endpoints must not be empty", [], "non-empty sequence")
    if np.any(np.diff(endpoints) <= 0):
        raise _invalid(
            "Endpoints must be strictly increasing", endpoints.tolist()[:10], "strictly increasing"
        )
    if endpoints[0] < 0 or endpoints[-1] >= n:
        raise _invalid(
            "Endpoints must be valid positions", endpoints.tolist()[:10], f"[0, {n - 1}]"
        )

    start = np.zeros(n, dtype=np.int64)
    stop = np.zeros(n, dtype=np.int64)
    segment = np.searchsorted(endpoints, np.arange(n), side="left")
    covered = (segment > 0) & (segment < len(endpoints))
    start[covered] = endpoints[segment[covered] - 1] + shift
    stop[covered] = endpoints[segment[covered]] + 1
    return start, stop


def _reduce(
    x: Any,
    width: WindowSpec,
    shift: int,
    na_rm: bool,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return window sums, valid counts and a missing mask for every position."""
    values = to_masked_float64(x, allow_2d=True)
    n = values.shape[0]
    start, stop = resolve_windows(width, n, shift=shift)

    valid = ~np.ma.getmaskarray(values)
    pad = np.zeros((1,) + values.shape[1:])
    csum = np.concatenate([pad, np.cumsum(values.filled(0.0), axis=0)])
    ccount = np.concatenate([pad, np.cumsum(valid, axis=0)])

    sums = csum[stop] - csum[start]
    counts = ccount[stop] - ccount[start]

    size = (stop - start).reshape((-1,) + (1,) * (values.ndim - 1))
    missing = counts == 0
    if not na_rm:
        missing |= counts < size
    return sums, counts, missing


def rolling_sum(
    x: Any,
    width: WindowSpec,
    shift: int = 0,
    na_rm: bool = False,
) -> np.ma.MaskedArray:
    """Rolling sum of ``x`` over the windows described by ``width``.

    Args:
        x: 1-D values or 2-D array (reduced column-wise). ``None``/NaN and
            masked entries are missing.
        width: Window specification (see module docstring).
        shift: Rows dropped from the start of every window.
        na_rm: Ignore missing values instead of propagating them.

    Returns:
        Masked array with the same shape as ``x``. Empty windows, windows
        with no valid values and (when ``na_rm`` is False) windows holding
        any missing value are masked.
    """
    sums, _, missing = _reduce(x, width, shift, na_rm)
    return np.ma.masked_array(sums, mask=missing)


def rolling_mean(
    x: Any,
    width: WindowSpec,
    shift: int = 0,
    na_rm: bool = False,
) -> np.ma.MaskedArray:
    """Rolling mean of ``x``; missing-value rules as in :func:`rolling_sum`."""
    sums, counts, missing = _reduce(x, width, shift, na_rm)
    means = sums / np.maximum(counts, 1)
    return np.ma.masked_array(means, mask=missing)
