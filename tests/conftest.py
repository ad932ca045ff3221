"""Pytest configuration and shared fixtures for liq-spread tests."""

from pathlib import Path

import polars as pl
import pytest

from liq.spread.simulation import sim

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def sample_ohlc() -> dict[str, list[float]]:
    """Ten bars with price movement in every period.

    Period 5 opens at its low and period 7 closes at its high, so the
    open/close indicators are not all one.
    """
    return {
        "open": [100.0, 101.2, 100.6, 102.3, 101.2, 103.4, 102.8, 104.1, 103.5, 104.9],
        "high": [101.5, 102.0, 102.4, 103.0, 103.6, 104.2, 104.0, 105.0, 104.8, 105.5],
        "low": [99.2, 100.4, 100.1, 101.5, 101.2, 102.6, 102.1, 103.3, 102.9, 104.0],
        "close": [101.0, 100.9, 102.1, 102.0, 103.3, 102.9, 104.0, 103.6, 104.7, 105.1],
    }


@pytest.fixture
def sample_ohlc_df(sample_ohlc: dict[str, list[float]]) -> pl.DataFrame:
    """The sample bars as a polars DataFrame."""
    return pl.DataFrame(sample_ohlc)


@pytest.fixture
def constant_ohlc() -> dict[str, list[float]]:
    """Bars without any price movement."""
    return {col: [50.0] * 20 for col in ("open", "high", "low", "close")}


@pytest.fixture(scope="session")
def simulated_bars() -> pl.DataFrame:
    """Simulated bars with a 1% spread (seeded)."""
    return sim(n=500, trades=100, spread=0.01, seed=42)


@pytest.fixture(scope="session")
def reference_bars() -> pl.DataFrame:
    """Published simulated OHLC data (390 trades, 1% observation probability, 1% spread).

    Skips when ``tests/data/ohlc.csv`` is not available.
    """
    path = DATA_DIR / "ohlc.csv"
    if not path.exists():
        pytest.skip("reference OHLC fixture not available")
    df = pl.read_csv(path)
    return df.rename({name: name.lower() for name in df.columns})

