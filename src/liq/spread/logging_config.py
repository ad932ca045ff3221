"""Logging for the spread estimators.

All loggers live under ``liq.spread`` (``liq.spread.edge``,
``liq.spread.rolling``, ``liq.spread.simulation``, ``liq.spread.cli``).
The library never installs handlers; applications (or the CLI) do.

What gets logged:
    - DEBUG: estimator calls, degenerate windows and, for rolling
      estimates, how many positions produced an estimate.
    - WARNING: simulator settings that cannot produce price movement.
    - ERROR: malformed window specifications and simulator parameters,
      right before the ConfigurationError is raised.
"""

from __future__ import annotations

import logging
from typing import Any

from liq.spread.exceptions import ConfigurationError

# Package logger
logger = logging.getLogger("liq.spread")


def get_logger(name: str) -> logging.Logger:
    """Get the child logger of a submodule (e.g. "edge" -> liq.spread.edge)."""
    return logging.getLogger(f"liq.spread.{name}")


def _summarize(value: Any) -> Any:
    # price vectors are logged by size, never by content
    if isinstance(value, (int, float, str, bool, type(None))):
        return value
    if isinstance(value, list) and len(value) <= 10:
        return value
    if hasattr(value, "__len__") and not isinstance(value, dict):
        return f"<{type(value).__name__} len={len(value)}>"
    return f"<{type(value).__name__}>"


def log_call(log: logging.Logger, func_name: str, **params: Any) -> None:
    """Log an estimator call at DEBUG, e.g. ``Entering edge(n=250, sign=False)``."""
    if not log.isEnabledFor(logging.DEBUG):
        return
    param_str = ", ".join(f"{k}={_summarize(v)}" for k, v in params.items())
    log.debug(f"Entering {func_name}({param_str})")


def log_degenerate_window(
    log: logging.Logger,
    n: int,
    nt: float,
    po: float | None,
    pc: float | None,
) -> None:
    """Log a window without an estimate.

    Args:
        log: Logger instance.
        n: Number of bars in the window.
        nt: Number of periods with price movement (tau = 1).
        po: Open-differs-from-extremes probability.
        pc: Previous-close-differs-from-extremes probability.
    """
    log.debug(f"Degenerate window over {n} bars: nt={nt:g}, po={po}, pc={pc}")


def log_window_tally(
    log: logging.Logger,
    func_name: str,
    n: int,
    estimated: int,
    degenerate: int,
) -> None:
    """Log how many rolling positions produced an estimate.

    Args:
        log: Logger instance.
        func_name: Estimator name.
        n: Number of positions.
        estimated: Positions with an estimate.
        degenerate: Positions whose window had too little price movement
            or data.
    """
    log.debug(
        f"{func_name}: {estimated}/{n} positions estimated, {degenerate} degenerate windows"
    )


def log_invalid_parameter(log: logging.Logger, error: ConfigurationError) -> None:
    """Log a configuration error at ERROR before it is raised."""
    expected = f", expected {error.valid_range}" if error.valid_range else ""
    log.error(f"Invalid {error.parameter}: {error.message} (got {error.value!r}{expected})")
