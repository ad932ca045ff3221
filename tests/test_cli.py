"""CLI tests for liq-spread commands."""

from pathlib import Path

import polars as pl
import pytest
from typer.testing import CliRunner

from liq.spread.cli import app

runner = CliRunner()


@pytest.fixture
def bars_csv(tmp_path: Path, simulated_bars: pl.DataFrame) -> Path:
    path = tmp_path / "bars.csv"
    simulated_bars.write_csv(path)
    return path


class TestEstimateCLI:
    """Tests for the estimate command."""

    def test_estimate_csv(self, tmp_path: Path, sample_ohlc_df: pl.DataFrame) -> None:
        """Test estimate prints every component."""
        path = tmp_path / "sample.csv"
        sample_ohlc_df.write_csv(path)

        result = runner.invoke(app, ["estimate", str(path)])
        assert result.exit_code == 0
        assert "spread" in result.output
        assert "0.004897349" in result.output

    def test_estimate_parquet_uppercase(
        self, tmp_path: Path, sample_ohlc_df: pl.DataFrame
    ) -> None:
        """Test Parquet input with capitalized columns."""
        path = tmp_path / "sample.parquet"
        sample_ohlc_df.rename({col: col.upper() for col in sample_ohlc_df.columns}).write_parquet(
            path
        )
        result = runner.invoke(app, ["estimate", str(path)])
        assert result.exit_code == 0
        assert "0.004897349" in result.output

    def test_estimate_missing_shows_na(
        self, tmp_path: Path, constant_ohlc: dict[str, list[float]]
    ) -> None:
        """Test estimates that cannot be computed are shown as NA."""
        path = tmp_path / "flat.csv"
        pl.DataFrame(constant_ohlc).write_csv(path)
        result = runner.invoke(app, ["estimate", str(path)])
        assert result.exit_code == 0
        assert "NA" in result.output

    def test_estimate_verbose(self, bars_csv: Path) -> None:
        """Test the verbose flag is accepted."""
        result = runner.invoke(app, ["--verbose", "estimate", str(bars_csv), "--sign"])
        assert result.exit_code == 0

    def test_unsupported_file(self, tmp_path: Path) -> None:
        """Test unsupported file types are rejected."""
        path = tmp_path / "bars.txt"
        path.write_text("open,high,low,close\n")
        result = runner.invoke(app, ["estimate", str(path)])
        assert result.exit_code != 0
        assert "Unsupported file type" in result.output

    def test_nonexistent_file(self, tmp_path: Path) -> None:
        """Test a missing bars file is a usage error."""
        result = runner.invoke(app, ["estimate", str(tmp_path / "missing.csv")])
        assert result.exit_code == 2

    def test_missing_columns(self, tmp_path: Path) -> None:
        """Test files without OHLC columns are rejected."""
        path = tmp_path / "bars.csv"
        pl.DataFrame({"open": [1.0, 2.0], "close": [1.5, 2.5]}).write_csv(path)
        result = runner.invoke(app, ["estimate", str(path)])
        assert result.exit_code != 0
        assert "Missing required columns" in result.output


class TestRollingCLI:
    """Tests for the rolling command."""

    def test_rolling_width_output(self, tmp_path: Path, bars_csv: Path) -> None:
        """Test rolling estimates are written next to the bars."""
        out = tmp_path / "out.csv"
        result = runner.invoke(app, ["rolling", str(bars_csv), "--width", "21", "--output", str(out)])
        assert result.exit_code == 0
        written = pl.read_csv(out)
        assert "edge" in written.columns
        assert written.height == 500
        assert written["edge"][:20].null_count() == 20

    def test_rolling_endpoints(self, tmp_path: Path, bars_csv: Path) -> None:
        """Test endpoint windows from a comma-separated list."""
        out = tmp_path / "out.parquet"
        result = runner.invoke(
            app, ["rolling", str(bars_csv), "--endpoints", "2,34,99", "--output", str(out)]
        )
        assert result.exit_code == 0
        written = pl.read_parquet(out)
        assert written["edge"][34] is not None
        assert written["edge"][100:].null_count() == 400

    def test_rolling_expanding(self, tmp_path: Path, bars_csv: Path) -> None:
        """Test expanding estimates."""
        out = tmp_path / "out.csv"
        result = runner.invoke(app, ["rolling", str(bars_csv), "--expanding", "--output", str(out)])
        assert result.exit_code == 0
        written = pl.read_csv(out)
        assert written["edge"].null_count() < 5

    def test_rolling_prints_tail(self, bars_csv: Path) -> None:
        """Test estimates are printed without an output file."""
        result = runner.invoke(app, ["rolling", str(bars_csv), "-w", "10", "--na-rm"])
        assert result.exit_code == 0
        assert "edge" in result.output

    def test_rolling_requires_one_window(self, bars_csv: Path) -> None:
        """Test a window option is required."""
        result = runner.invoke(app, ["rolling", str(bars_csv)])
        assert result.exit_code != 0

    def test_rolling_rejects_two_windows(self, bars_csv: Path) -> None:
        """Test window options are mutually exclusive."""
        result = runner.invoke(app, ["rolling", str(bars_csv), "--width", "5", "--expanding"])
        assert result.exit_code != 0

    def test_rolling_bad_endpoints(self, bars_csv: Path) -> None:
        """Test non-integer endpoints are rejected."""
        result = runner.invoke(app, ["rolling", str(bars_csv), "--endpoints", "2,x,9"])
        assert result.exit_code != 0

    def test_rolling_invalid_width(self, bars_csv: Path) -> None:
        """Test an invalid width exits with an error message."""
        result = runner.invoke(app, ["rolling", str(bars_csv), "--width", "0"])
        assert result.exit_code == 1
        assert "positive" in result.output


class TestSimulateCLI:
    """Tests for the simulate command."""

    def test_simulate_csv(self, tmp_path: Path) -> None:
        """Test simulated bars are written to CSV."""
        out = tmp_path / "sim.csv"
        result = runner.invoke(
            app, ["simulate", "--output", str(out), "--n", "50", "--trades", "20", "--seed", "1"]
        )
        assert result.exit_code == 0
        written = pl.read_csv(out)
        assert written.columns == ["open", "high", "low", "close"]
        assert written.height == 50

    def test_simulate_parquet_with_units(self, tmp_path: Path) -> None:
        """Test units add a timestamp column."""
        out = tmp_path / "sim.parquet"
        result = runner.invoke(
            app,
            ["simulate", "--output", str(out), "--n", "30", "--trades", "10", "--units", "day"],
        )
        assert result.exit_code == 0
        written = pl.read_parquet(out)
        assert written.columns[0] == "timestamp"
        assert written.height == 30

    def test_simulate_seed_reproducible(self, tmp_path: Path) -> None:
        """Test the seed option gives identical files."""
        first = tmp_path / "a.csv"
        second = tmp_path / "b.csv"
        for out in (first, second):
            runner.invoke(
                app, ["simulate", "--output", str(out), "--n", "20", "--trades", "5", "--seed", "9"]
            )
        assert first.read_text() == second.read_text()

    def test_simulate_invalid_parameter(self, tmp_path: Path) -> None:
        """Test invalid parameters exit with an error message."""
        out = tmp_path / "sim.csv"
        result = runner.invoke(app, ["simulate", "--output", str(out), "--prob", "1.5"])
        assert result.exit_code == 1
        assert "prob" in result.output
        assert not out.exists()
