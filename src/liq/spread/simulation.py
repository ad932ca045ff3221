"""Simulation of open, high, low and close prices with a known spread.

Each period consists of ``trades`` trades. The efficient price follows a
geometric random walk with per-trade volatility ``volatility / sqrt(trades)``
plus an overnight jump on the first trade of every period. Every trade is a
bid or an ask with equal probability, i.e. the efficient price times
``1 -/+ spread / 2``, and is observed with probability ``prob``.

High and low are the highest and lowest observed prices of the period,
open and close the first and last. A period without observed trades repeats
the previous close for all four prices.

Example:
    >>> from liq.spread.simulation import sim
    >>> bars = sim(n=10, spread=0.01, seed=42)
    >>> bars.columns
    ['open', 'high', 'low', 'close']
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

import numpy as np
import polars as pl

from liq.spread.exceptions import ConfigurationError
from liq.spread.logging_config import get_logger, log_call, log_invalid_parameter

logger = get_logger("simulation")

# Time unit -> polars interval
UNIT_INTERVALS: dict[str, str] = {
    "sec": "1s",
    "min": "1m",
    "hour": "1h",
    "day": "1d",
    "week": "1w",
    "month": "1mo",
    "year": "1y",
}

# Upper bound on the length of one unit, used to size the timestamp range
_UNIT_SPAN: dict[str, timedelta] = {
    "sec": timedelta(seconds=1),
    "min": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=31),
    "year": timedelta(days=366),
}

_INTRADAY_UNITS = ("sec", "min", "hour")


@dataclass(frozen=True)
class SimulationParams:
    """Validated simulator parameters.

    Attributes:
        n: Number of periods.
        trades: Number of trades per period.
        prob: Probability of observing a trade.
        spread: Bid-ask spread (0.01 is 1%).
        volatility: Open-to-close volatility per period.
        overnight: Close-to-open volatility.
        drift: Expected return per period.
        units: Time unit of a period, or None for no timestamps.
        sign: Return positive prices for buys and negative for sells.
    """

    n: int = 10000
    trades: int = 390
    prob: float = 1.0
    spread: float = 0.01
    volatility: float = 0.03
    overnight: float = 0.0
    drift: float = 0.0
    units: str | None = None
    sign: bool = False

    def __post_init__(self) -> None:
        if self.units == "minute":
            object.__setattr__(self, "units", "min")

        self._check(self.n >= 1, "n", self.n, ">= 1")
        self._check(self.trades >= 1, "trades", self.trades, ">= 1")
        self._check(0.0 <= self.prob <= 1.0, "prob", self.prob, "[0, 1]")
        self._check(self.spread >= 0, "spread", self.spread, ">= 0")
        self._check(self.volatility >= 0, "volatility", self.volatility, ">= 0")
        self._check(self.overnight >= 0, "overnight", self.overnight, ">= 0")
        self._check(
            self.units is None or self.units in UNIT_INTERVALS,
            "units",
            self.units,
            "one of " + ", ".join(UNIT_INTERVALS),
        )

    @staticmethod
    def _check(ok: bool, parameter: str, value: object, valid_range: str) -> None:
        if ok:
            return
        error = ConfigurationError(
            f"Invalid simulation parameter '{parameter}'",
            parameter=parameter,
            value=value,
            valid_range=valid_range,
        )
        log_invalid_parameter(logger, error)
        raise error


def _timestamps(n: int, units: str) -> pl.Series:
    interval = UNIT_INTERVALS[units]
    span = _UNIT_SPAN[units] * n
    if units in _INTRADAY_UNITS:
        start = datetime.now().replace(microsecond=0)
        ts = pl.datetime_range(start, start + span, interval=interval, eager=True)
    else:
        start = date.today()
        ts = pl.date_range(start, start + span, interval=interval, eager=True)
    return ts.head(n).alias("timestamp")


def _to_ohlc(prices: np.ndarray, observed: np.ndarray) -> np.ndarray:
    """Collapse a (periods, trades) grid of prices into OHLC rows."""
    n, trades = prices.shape
    rows = np.arange(n)
    magnitude = np.abs(prices)

    first = np.argmax(observed, axis=1)
    last = trades - 1 - np.argmax(observed[:, ::-1], axis=1)
    high = np.argmax(np.where(observed, magnitude, -np.inf), axis=1)
    low = np.argmin(np.where(observed, magnitude, np.inf), axis=1)

    ohlc = np.column_stack(
        [prices[rows, first], prices[rows, high], prices[rows, low], prices[rows, last]]
    )

    # periods without observed trades repeat the previous close
    has_trades = observed.any(axis=1)
    previous = prices[0, 0]
    for i in range(n):
        if not has_trades[i]:
            ohlc[i] = previous
        previous = ohlc[i, 3]
    return ohlc


def sim(
    n: int = 10000,
    trades: int = 390,
    prob: float = 1.0,
    spread: float = 0.01,
    volatility: float = 0.03,
    overnight: float = 0.0,
    drift: float = 0.0,
    units: str | None = None,
    sign: bool = False,
    seed: int | np.random.Generator | None = None,
) -> pl.DataFrame:
    """Simulate open, high, low and close prices.

    Args:
        n: Number of periods to simulate.
        trades: Number of trades per period.
        prob: Probability to observe a trade.
        spread: Bid-ask spread.
        volatility: Open-to-close volatility.
        overnight: Close-to-open volatility.
        drift: Expected return per period.
        units: Units of the time period, one of ``sec``, ``min``, ``hour``,
            ``day``, ``week``, ``month``, ``year``. When given, a leading
            ``timestamp`` column is added.
        sign: Whether to return positive prices for buys and negative
            prices for sells.
        seed: Seed or numpy Generator for reproducible draws.

    Returns:
        DataFrame with columns ``open``, ``high``, ``low``, ``close``
        (and ``timestamp`` when ``units`` is set).

    Raises:
        ConfigurationError: If a parameter is out of range or ``units`` is
            unknown.
    """
    params = SimulationParams(
        n=n,
        trades=trades,
        prob=prob,
        spread=spread,
        volatility=volatility,
        overnight=overnight,
        drift=drift,
        units=units,
        sign=sign,
    )
    log_call(logger, "sim", **vars(params))
    if params.prob == 0:
        logger.warning(
            f"No trades can be observed; all {params.n} periods repeat the first price"
        )

    rng = np.random.default_rng(seed)
    size = params.n * params.trades

    # close-to-close returns, plus close-to-open jumps on the first trade of each period
    returns = rng.normal(
        params.drift / params.trades, params.volatility / np.sqrt(params.trades), size
    )
    returns[:: params.trades] += rng.normal(0.0, params.overnight, params.n)

    z = params.spread * (rng.binomial(1, 0.5, size) - 0.5)
    prices = np.exp(np.cumsum(returns)) * (1 + z)
    if params.sign:
        prices = prices * np.sign(z)

    observed = rng.binomial(1, params.prob, size).astype(bool)
    ohlc = _to_ohlc(
        prices.reshape(params.n, params.trades),
        observed.reshape(params.n, params.trades),
    )

    bars = pl.DataFrame(
        {
            "open": ohlc[:, 0],
            "high": ohlc[:, 1],
            "low": ohlc[:, 2],
            "close": ohlc[:, 3],
        }
    )
    if params.units is not None:
        bars = bars.insert_column(0, _timestamps(params.n, params.units))
    return bars
