"""Bid-ask spread estimation from open, high, low and close prices.

This package provides:
- The efficient EDGE estimator (Ardia, Guidotti & Kroencke, 2024)
- Rolling, endpoint and expanding window estimates
- Rolling sums/means over variable windows with explicit missing values
- A simulator of OHLC bars with a known spread
- Polars DataFrame helpers and a Typer CLI

Example:
    >>> from liq.spread import edge, edge_rolling, edge_expanding, sim
    >>>
    >>> bars = sim(n=1000, spread=0.01, seed=1)
    >>> o, h, l, c = bars["open"], bars["high"], bars["low"], bars["close"]
    >>>
    >>> # Single estimate over all bars
    >>> spread = edge(o, h, l, c)
    >>>
    >>> # Estimates over a 21-bar rolling window
    >>> rolling = edge_rolling(o, h, l, c, width=21)
    >>>
    >>> # Estimates over an expanding window
    >>> expanding = edge_expanding(o, h, l, c)
"""

from liq.spread.edge import (
    EdgeComponents,
    edge,
    edge_components,
    edge_expanding,
    edge_rolling,
)
from liq.spread.exceptions import ConfigurationError, InputLengthError, SpreadError
from liq.spread.frame import compute_edge, compute_edge_rolling
from liq.spread.rolling import resolve_windows, rolling_mean, rolling_sum
from liq.spread.simulation import SimulationParams, sim

__all__ = [
    # Estimators
    "edge",
    "edge_components",
    "edge_rolling",
    "edge_expanding",
    "EdgeComponents",
    # DataFrame helpers
    "compute_edge",
    "compute_edge_rolling",
    # Rolling reductions
    "resolve_windows",
    "rolling_sum",
    "rolling_mean",
    # Simulation
    "sim",
    "SimulationParams",
    # Exceptions
    "SpreadError",
    "InputLengthError",
    "ConfigurationError",
]
