"""Efficient bid-ask spread estimator from open, high, low and close prices.

Implements the estimator of Ardia, Guidotti & Kroencke (2024), "Efficient
Estimation of Bid-Ask Spreads from Open, High, Low, and Close Prices",
Journal of Financial Economics 161, 103916.
https://doi.org/10.1016/j.jfineco.2024.103916

Two estimates of the squared spread are built from log-returns that pair
each period's open, close and high/low midpoint with the previous period,
then combined with inverse-variance weights. Estimates are fractions:
0.01 is a spread of 1%.

Prices must be sorted in ascending order of time. Missing or non-positive
prices are treated as missing observations; windows without enough price
movement yield a missing estimate (``None`` or a null).

Example:
    >>> from liq.spread import edge, edge_rolling, sim
    >>> bars = sim(n=1000, spread=0.01, seed=7)
    >>> edge(bars["open"], bars["high"], bars["low"], bars["close"])  # close to 0.01
    >>> s = edge_rolling(bars["open"], bars["high"], bars["low"], bars["close"], width=21)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Sequence

import numpy as np
import polars as pl

from liq.spread.exceptions import InputLengthError
from liq.spread.logging_config import (
    get_logger,
    log_call,
    log_degenerate_window,
    log_window_tally,
)
from liq.spread.numpy_utils import from_optional, to_masked_float64, to_optional_float, to_series
from liq.spread.rolling import WindowSpec, rolling_mean, rolling_sum

logger = get_logger("edge")

PriceLike = Sequence[Any] | np.ndarray | pl.Series


@dataclass(frozen=True)
class EdgeComponents:
    """Intermediate quantities of a single-window estimate.

    Attributes:
        pt: Share of periods with price movement (tau).
        po: Probability that the open differs from the high or the low.
        pc: Probability that the previous close differs from the previous
            high or low.
        e1: First estimate of the squared spread.
        e2: Second estimate of the squared spread.
        v1: Variance of the first estimate.
        v2: Variance of the second estimate.
        s2: Combined squared spread.
        spread: Final (signed or unsigned) spread estimate.
    """

    pt: float | None = None
    po: float | None = None
    pc: float | None = None
    e1: float | None = None
    e2: float | None = None
    v1: float | None = None
    v2: float | None = None
    s2: float | None = None
    spread: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return asdict(self)


def _check_lengths(open: PriceLike, high: PriceLike, low: PriceLike, close: PriceLike) -> int:
    n = len(open)
    if len(high) != n or len(low) != n or len(close) != n:
        raise InputLengthError(
            "open, high, low, close must have the same length",
            lengths={"open": n, "high": len(high), "low": len(low), "close": len(close)},
        )
    return n


def _log_prices(*prices: PriceLike) -> list[np.ma.MaskedArray]:
    # np.ma.log masks non-positive values
    return [np.ma.log(to_masked_float64(p)) for p in prices]


def _lag(x: np.ma.MaskedArray) -> np.ma.MaskedArray:
    lagged = np.ma.masked_all(x.shape, dtype=np.float64)
    lagged[1:] = x[:-1]
    return lagged


def _indicator(condition: np.ma.MaskedArray) -> np.ma.MaskedArray:
    return condition.astype(np.float64)


def _spread_from_moments(
    e1: np.ma.MaskedArray,
    e2: np.ma.MaskedArray,
    v1: np.ma.MaskedArray,
    v2: np.ma.MaskedArray,
    sign: bool,
) -> tuple[np.ma.MaskedArray, np.ma.MaskedArray]:
    """Combine the two squared-spread estimates and take the (signed) root.

    Inverse-variance weights are used when the total variance is positive,
    equal weights otherwise (including when it is missing).
    """
    vt = v1 + v2
    weighted = (vt > 0).filled(False)
    s2 = np.ma.where(weighted, (v2 * e1 + v1 * e2) / vt, (e1 + e2) / 2.0)
    s = np.ma.sqrt(np.ma.abs(s2))
    if sign:
        s = np.ma.where(s2 < 0, -s, s)
    return s2, s


def edge_components(
    open: PriceLike,
    high: PriceLike,
    low: PriceLike,
    close: PriceLike,
    sign: bool = False,
) -> EdgeComponents:
    """Estimate the spread over one window and return intermediate values.

    Args:
        open: Open prices.
        high: High prices.
        low: Low prices.
        close: Close prices.
        sign: Whether to return a signed estimate.

    Returns:
        EdgeComponents; fields that cannot be computed are ``None``.

    Raises:
        InputLengthError: If the price vectors have different lengths.
    """
    n = _check_lengths(open, high, low, close)
    log_call(logger, "edge", n=n, sign=sign)

    if n < 3:
        logger.debug(f"No estimate from {n} bars; at least 3 are needed")
        return EdgeComponents()

    o, h, l, c = _log_prices(open, high, low, close)
    m = (h + l) / 2.0

    # pair periods 2..n with their predecessor
    h1, l1, c1, m1 = h[:-1], l[:-1], c[:-1], m[:-1]
    o, h, l, m = o[1:], h[1:], l[1:], m[1:]

    r1 = m - o
    r2 = o - m1
    r3 = m - c1
    r4 = c1 - m1
    r5 = o - c1

    tau = _indicator((h != l) | (l != c1))
    po1 = tau * _indicator(o != h)
    po2 = tau * _indicator(o != l)
    pc1 = tau * _indicator(c1 != h1)
    pc2 = tau * _indicator(c1 != l1)

    pt = to_optional_float(tau.mean())
    po = to_optional_float(po1.mean() + po2.mean())
    pc = to_optional_float(pc1.mean() + pc2.mean())

    nt = float(tau.sum()) if tau.count() else 0.0
    if nt < 2 or po is None or po == 0 or pc is None or pc == 0:
        log_degenerate_window(logger, n, nt, po, pc)
        return EdgeComponents(pt=pt, po=po, pc=pc)

    d1 = r1 - tau * (r1.mean() / pt)
    d3 = r3 - tau * (r3.mean() / pt)
    d5 = r5 - tau * (r5.mean() / pt)

    x1 = -4.0 / po * d1 * r2 + -4.0 / pc * d3 * r4
    x2 = -4.0 / po * d1 * r5 + -4.0 / pc * d5 * r4

    e1 = to_optional_float(x1.mean())
    e2 = to_optional_float(x2.mean())
    v1 = to_optional_float((x1**2).mean() - x1.mean() ** 2)
    v2 = to_optional_float((x2**2).mean() - x2.mean() ** 2)

    s2, s = _spread_from_moments(*(from_optional([v]) for v in (e1, e2, v1, v2)), sign=sign)
    result = EdgeComponents(
        pt=pt,
        po=po,
        pc=pc,
        e1=e1,
        e2=e2,
        v1=v1,
        v2=v2,
        s2=to_optional_float(s2[0]),
        spread=to_optional_float(s[0]),
    )
    logger.debug(f"Estimated spread {result.spread} over {n} bars (s2={result.s2})")
    return result


def edge(
    open: PriceLike,
    high: PriceLike,
    low: PriceLike,
    close: PriceLike,
    sign: bool = False,
) -> float | None:
    """Efficient estimate of the bid-ask spread from OHLC prices.

    Args:
        open: Open prices.
        high: High prices.
        low: Low prices.
        close: Close prices.
        sign: Whether to return a signed estimate.

    Returns:
        The spread estimate (0.01 is a spread of 1%), or ``None`` when there
        are fewer than 3 observations or not enough price movement.

    Raises:
        InputLengthError: If the price vectors have different lengths.
    """
    return edge_components(open, high, low, close, sign=sign).spread


def _edge_rolling(
    open: PriceLike,
    high: PriceLike,
    low: PriceLike,
    close: PriceLike,
    width: WindowSpec,
    sign: bool,
    na_rm: bool,
) -> tuple[np.ma.MaskedArray, np.ndarray]:
    o, h, l, c = _log_prices(open, high, low, close)
    m = (h + l) / 2.0

    h1 = _lag(h)
    l1 = _lag(l)
    c1 = _lag(c)
    m1 = _lag(m)

    r1 = m - o
    r2 = o - m1
    r3 = m - c1
    r4 = c1 - m1
    r5 = o - c1

    tau = _indicator((h != l) | (l != c1))
    po1 = tau * _indicator(o != h)
    po2 = tau * _indicator(o != l)
    pc1 = tau * _indicator(c1 != h1)
    pc2 = tau * _indicator(c1 != l1)

    r12 = r1 * r2
    r15 = r1 * r5
    r34 = r3 * r4
    r45 = r4 * r5
    tr1 = tau * r1
    tr2 = tau * r2
    tr4 = tau * r4
    tr5 = tau * r5

    # every product whose window mean enters e1, e2, v1 or v2
    columns = {
        "r12": r12,
        "r34": r34,
        "r15": r15,
        "r45": r45,
        "tau": tau,
        "r1": r1,
        "tr2": tr2,
        "r3": r3,
        "tr4": tr4,
        "r5": r5,
        "r12_r12": r12**2,
        "r34_r34": r34**2,
        "r15_r15": r15**2,
        "r45_r45": r45**2,
        "r12_r34": r12 * r34,
        "r15_r45": r15 * r45,
        "tr2_r2": tr2 * r2,
        "tr4_r4": tr4 * r4,
        "tr5_r5": tr5 * r5,
        "tr2_r12": tr2 * r12,
        "tr4_r34": tr4 * r34,
        "tr5_r15": tr5 * r15,
        "tr4_r45": tr4 * r45,
        "tr4_r12": tr4 * r12,
        "tr2_r34": tr2 * r34,
        "tr2_r4": tr2 * r4,
        "tr1_r45": tr1 * r45,
        "tr5_r45": tr5 * r45,
        "tr4_r5": tr4 * r5,
        "tr5": tr5,
        "po1": po1,
        "po2": po2,
        "pc1": pc1,
        "pc2": pc2,
    }
    x = np.ma.column_stack(list(columns.values()))

    # the first row has no lagged prices
    x[0] = np.ma.masked
    means = rolling_mean(x, width=width, shift=1, na_rm=na_rm)
    index = {name: i for i, name in enumerate(columns)}

    po = means[:, index["po1"]] + means[:, index["po2"]]
    pc = means[:, index["pc1"]] + means[:, index["pc2"]]
    nt = rolling_sum(x[:, index["tau"]], width=width, shift=1, na_rm=True)

    # fewer than two periods with tau=1, or po or pc equal to zero
    degenerate = (nt < 2).filled(True) | (po == 0).filled(False) | (pc == 0).filled(False)
    means[degenerate] = np.ma.masked

    mu = {name: means[:, i] for name, i in index.items()}
    pt = mu["tau"]
    po = mu["po1"] + mu["po2"]
    pc = mu["pc1"] + mu["pc2"]

    a1 = -4.0 / po
    a2 = -4.0 / pc
    a3 = mu["r1"] / pt
    a4 = mu["tr4"] / pt
    a5 = mu["r3"] / pt
    a6 = mu["r5"] / pt
    a12 = 2 * a1 * a2
    a11 = a1**2
    a22 = a2**2
    a33 = a3**2
    a55 = a5**2
    a66 = a6**2

    e1 = a1 * (mu["r12"] - a3 * mu["tr2"]) + a2 * (mu["r34"] - a4 * mu["r3"])
    e2 = a1 * (mu["r15"] - a3 * mu["tr5"]) + a2 * (mu["r45"] - a4 * mu["r5"])

    v1 = -(e1**2) + (
        a11 * (mu["r12_r12"] - 2 * a3 * mu["tr2_r12"] + a33 * mu["tr2_r2"])
        + a22 * (mu["r34_r34"] - 2 * a5 * mu["tr4_r34"] + a55 * mu["tr4_r4"])
        + a12 * (mu["r12_r34"] - a3 * mu["tr2_r34"] - a5 * mu["tr4_r12"] + a3 * a5 * mu["tr2_r4"])
    )
    v2 = -(e2**2) + (
        a11 * (mu["r15_r15"] - 2 * a3 * mu["tr5_r15"] + a33 * mu["tr5_r5"])
        + a22 * (mu["r45_r45"] - 2 * a6 * mu["tr4_r45"] + a66 * mu["tr4_r4"])
        + a12 * (mu["r15_r45"] - a3 * mu["tr5_r45"] - a6 * mu["tr1_r45"] + a3 * a6 * mu["tr4_r5"])
    )

    _, s = _spread_from_moments(e1, e2, v1, v2, sign=sign)
    return s, degenerate


def edge_rolling(
    open: PriceLike,
    high: PriceLike,
    low: PriceLike,
    close: PriceLike,
    width: WindowSpec,
    sign: bool = False,
    na_rm: bool = False,
) -> pl.Series:
    """Rolling estimates of the bid-ask spread from OHLC prices.

    Args:
        open: Open prices.
        high: High prices.
        low: Low prices.
        close: Close prices.
        width: If an integer, the width of the rolling window. If a sequence
            with the same length as the prices, the (positive) width of the
            window for each observation. Otherwise, a sequence of 0-based endpoints:
            the estimate at endpoint ``e_j`` uses prices
            ``e_{j-1}..e_j`` (inclusive).
        sign: Whether to return signed estimates.
        na_rm: Whether to ignore missing values inside a window.

    Returns:
        Float64 Series named ``"edge"`` with the same length as the prices;
        positions without an estimate are null.

    Raises:
        InputLengthError: If the price vectors have different lengths.
        ConfigurationError: If ``width`` is malformed.

    Example:
        >>> ep = [2, 34, 99]
        >>> s = edge_rolling(o, h, l, c, width=ep)
        >>> s[34] == edge(o[2:35], h[2:35], l[2:35], c[2:35])
    """
    n = _check_lengths(open, high, low, close)
    log_call(logger, "edge_rolling", n=n, width=width, sign=sign, na_rm=na_rm)

    if n == 0:
        return pl.Series("edge", [], dtype=pl.Float64)

    s, degenerate = _edge_rolling(open, high, low, close, width=width, sign=sign, na_rm=na_rm)
    log_window_tally(logger, "edge_rolling", n, int(s.count()), int(degenerate.sum()))
    return to_series(s, "edge")


def edge_expanding(
    open: PriceLike,
    high: PriceLike,
    low: PriceLike,
    close: PriceLike,
    sign: bool = False,
    na_rm: bool = True,
) -> pl.Series:
    """Expanding-window estimates of the bid-ask spread from OHLC prices.

    Equivalent to :func:`edge_rolling` with ``width=range(1, n + 1)``.

    Returns:
        Float64 Series named ``"edge"`` with the same length as the prices.
    """
    n = _check_lengths(open, high, low, close)
    return edge_rolling(
        open, high, low, close, width=np.arange(1, n + 1), sign=sign, na_rm=na_rm
    )
