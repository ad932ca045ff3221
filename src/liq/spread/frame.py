"""Spread estimates on polars OHLC DataFrames.

Thin wrappers that pull ``open``, ``high``, ``low`` and ``close`` columns
(case-insensitive) out of a DataFrame and hand them to the estimators.

Example:
    >>> from liq.spread.frame import compute_edge, compute_edge_rolling
    >>> spread = compute_edge(bars)
    >>> bars = compute_edge_rolling(bars, width=21)
    >>> bars["edge"].tail()
"""

from __future__ import annotations

import polars as pl

from liq.spread.edge import edge, edge_expanding, edge_rolling
from liq.spread.rolling import WindowSpec

OHLC_COLUMNS = ("open", "high", "low", "close")


def _ohlc(df: pl.DataFrame) -> list[pl.Series]:
    lookup = {name.lower(): name for name in df.columns}
    missing = [col for col in OHLC_COLUMNS if col not in lookup]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")
    return [df[lookup[col]] for col in OHLC_COLUMNS]


def compute_edge(df: pl.DataFrame, sign: bool = False) -> float | None:
    """Estimate the spread over the whole DataFrame.

    Args:
        df: DataFrame with open, high, low and close columns.
        sign: Whether to return a signed estimate.

    Returns:
        Spread estimate, or None if it cannot be computed.

    Raises:
        ValueError: If required OHLC columns are missing.
    """
    return edge(*_ohlc(df), sign=sign)


def compute_edge_rolling(
    df: pl.DataFrame,
    width: WindowSpec | None = None,
    sign: bool = False,
    na_rm: bool | None = None,
    alias: str = "edge",
) -> pl.DataFrame:
    """Add rolling (or expanding) spread estimates as a new column.

    Args:
        df: DataFrame with open, high, low and close columns, sorted by time.
        width: Window specification; ``None`` for an expanding window.
        sign: Whether to return signed estimates.
        na_rm: Ignore missing values inside windows. Defaults to False for
            rolling and True for expanding windows.
        alias: Name of the output column.

    Returns:
        DataFrame with an additional spread column.

    Raises:
        ValueError: If required OHLC columns are missing.
    """
    prices = _ohlc(df)
    if width is None:
        spread = edge_expanding(*prices, sign=sign, na_rm=True if na_rm is None else na_rm)
    else:
        spread = edge_rolling(*prices, width=width, sign=sign, na_rm=bool(na_rm))
    return df.with_columns(spread.alias(alias))
