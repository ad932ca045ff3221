"""Typer CLI for spread estimation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn, Optional

import polars as pl
import typer
from rich.console import Console
from rich.table import Table

from liq.spread.edge import edge_components
from liq.spread.exceptions import SpreadError
from liq.spread.frame import OHLC_COLUMNS, compute_edge_rolling
from liq.spread.logging_config import get_logger
from liq.spread.simulation import UNIT_INTERVALS, sim

app = typer.Typer(help="liq-spread CLI")
console = Console()
logger = get_logger("cli")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Estimate bid-ask spreads from OHLC bars."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s - %(name)s - %(message)s",
    )


@app.command("estimate")
def estimate(
    data_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Bars file (CSV/Parquet) with open, high, low, close"
    ),
    sign: bool = typer.Option(False, "--sign", help="Return a signed estimate"),
) -> None:
    """Estimate the spread over the whole file."""
    df = _load_bars(data_path)
    try:
        components = edge_components(*(df[col] for col in OHLC_COLUMNS), sign=sign)
    except SpreadError as exc:
        _fail(exc)

    table = Table(title=f"EDGE spread estimate ({df.height} bars)")
    table.add_column("Quantity", style="cyan")
    table.add_column("Value", style="green")
    for name, value in components.to_dict().items():
        table.add_row(name, "NA" if value is None else f"{value:.10g}")
    console.print(table)
    logger.info(f"Estimated spread for {data_path} over {df.height} bars: {components.spread}")


@app.command("rolling")
def rolling(
    data_path: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Bars file (CSV/Parquet) with open, high, low, close"
    ),
    width: Optional[int] = typer.Option(None, "--width", "-w", help="Rolling window width"),
    endpoints: Optional[str] = typer.Option(
        None, "--endpoints", help="Comma-separated 0-based window endpoints, e.g. 2,34,99"
    ),
    expanding: bool = typer.Option(False, "--expanding", help="Use an expanding window"),
    sign: bool = typer.Option(False, "--sign", help="Return signed estimates"),
    na_rm: Optional[bool] = typer.Option(
        None,
        "--na-rm/--keep-na",
        help="Ignore missing values in windows (default: keep for rolling, ignore for expanding)",
    ),
    output: Optional[Path] = typer.Option(None, help="Write bars with an 'edge' column (CSV/Parquet)"),
) -> None:
    """Compute rolling, endpoint or expanding spread estimates."""
    chosen = sum(spec is not None for spec in (width, endpoints)) + int(expanding)
    if chosen != 1:
        raise typer.BadParameter("Provide exactly one of --width, --endpoints or --expanding")

    spec = width if width is not None else _parse_endpoints(endpoints)
    df = _load_bars(data_path)
    try:
        result = compute_edge_rolling(df, width=spec, sign=sign, na_rm=na_rm)
    except SpreadError as exc:
        _fail(exc)

    if output:
        _write_bars(result, output)
        console.print(f"[green]Wrote {result.height} estimates to {output}[/green]")
    else:
        console.print(result.tail(10))


@app.command("simulate")
def simulate(
    output: Path = typer.Option(..., help="Where to write simulated bars (CSV/Parquet)"),
    n: int = typer.Option(10000, "--n", help="Number of periods"),
    trades: int = typer.Option(390, help="Trades per period"),
    prob: float = typer.Option(1.0, help="Probability to observe a trade"),
    spread: float = typer.Option(0.01, help="Bid-ask spread (0.01 = 1%)"),
    volatility: float = typer.Option(0.03, help="Open-to-close volatility"),
    overnight: float = typer.Option(0.0, help="Close-to-open volatility"),
    drift: float = typer.Option(0.0, help="Expected return per period"),
    units: Optional[str] = typer.Option(
        None, help=f"Time unit: {'|'.join(UNIT_INTERVALS)} (adds a timestamp column)"
    ),
    sign: bool = typer.Option(False, "--sign", help="Negative prices for sells"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
) -> None:
    """Simulate OHLC bars with a known spread."""
    try:
        bars = sim(
            n=n,
            trades=trades,
            prob=prob,
            spread=spread,
            volatility=volatility,
            overnight=overnight,
            drift=drift,
            units=units,
            sign=sign,
            seed=seed,
        )
    except SpreadError as exc:
        _fail(exc)
    _write_bars(bars, output)
    console.print(f"[green]Simulated {bars.height} bars to {output}[/green]")


def _fail(exc: SpreadError) -> NoReturn:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1)


def _parse_endpoints(raw: str | None) -> list[int] | None:
    if raw is None:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise typer.BadParameter(f"Endpoints must be integers: {raw}") from exc


def _load_bars(path: Path) -> pl.DataFrame:
    if path.suffix.lower() == ".parquet":
        df = pl.read_parquet(path)
    elif path.suffix.lower() == ".csv":
        df = pl.read_csv(path)
    else:
        raise typer.BadParameter("Unsupported file type; use Parquet or CSV")
    df = df.rename({name: name.lower() for name in df.columns})
    missing = [col for col in OHLC_COLUMNS if col not in df.columns]
    if missing:
        raise typer.BadParameter(f"Missing required columns: {missing}")
    return df


def _write_bars(df: pl.DataFrame, path: Path) -> None:
    if path.suffix.lower() == ".parquet":
        df.write_parquet(path)
    else:
        df.write_csv(path)


if __name__ == "__main__":
    app()
