"""
Tests for the typer CLI (stock_forecaster/cli.py).

Every command runs against a temporary config using the offline fixture
data source, so no network access or API key is needed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from stock_forecaster.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI commands attach handlers to the runner's stdout; drop them afterwards."""
    yield
    logging.captureWarnings(False)
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


@pytest.fixture
def cli_config(tmp_path, monkeypatch) -> Path:
    for name in ("STOCK_FORECASTER_DATA_SOURCE", "STOCK_FORECASTER_REGRESSOR"):
        monkeypatch.delenv(name, raising=False)
    out_dir = (tmp_path / "outputs").as_posix()
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[data]
source = "fixture"
output_dir = "{out_dir}"
outputsize = 40

[forecast]
window_size = 5
num_days_to_predict = 3
default_symbols = ["AAPL"]

[model]
regressor = "ridge"

[logging]
level = "WARNING"
log_file = ""
""",
        encoding="utf-8",
    )
    return path


# ── validate-config ───────────────────────────────────────────────────────────

class TestValidateConfig:
    def test_valid(self, cli_config):
        result = runner.invoke(app, ["validate-config", "--config", str(cli_config)])
        assert result.exit_code == 0, result.output
        assert "Data source:      fixture" in result.output
        assert "Min history:      8 rows" in result.output
        assert "[WARN]" not in result.output
        assert "[OK]" in result.output

    def test_warns_when_outputsize_below_min_history(self, cli_config):
        cli_config.write_text(
            cli_config.read_text(encoding="utf-8").replace("outputsize = 40", "outputsize = 6"),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["validate-config", "--config", str(cli_config)])
        assert result.exit_code == 0, result.output
        assert "[WARN] data.outputsize=6 is below the 8 rows" in result.output

    def test_full_dump(self, cli_config):
        result = runner.invoke(app, ["validate-config", "--config", str(cli_config), "--full"])
        assert result.exit_code == 0
        assert '"regressor": "ridge"' in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "no.toml")])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


# ── forecast ──────────────────────────────────────────────────────────────────

class TestForecastCommand:
    def test_forecast_prints_report_and_exports(self, cli_config, tmp_path):
        result = runner.invoke(app, ["forecast", "--config", str(cli_config), "-s", "AAPL", "-s", "MSFT"])
        assert result.exit_code == 0, result.output
        assert "Predicted Prices (next 3 days)" in result.output
        assert "MSFT | source=fixture | regressor=ridge" in result.output
        assert "[FIXTURE DATA]" in result.output
        assert "[OK] Forecast complete." in result.output
        assert len(list((tmp_path / "outputs").glob("forecast_*.csv"))) == 2

    def test_no_export(self, cli_config, tmp_path):
        result = runner.invoke(app, ["forecast", "--config", str(cli_config), "--no-export"])
        assert result.exit_code == 0, result.output
        assert not (tmp_path / "outputs").exists()

    def test_regressor_override(self, cli_config):
        result = runner.invoke(
            app, ["forecast", "--config", str(cli_config), "--regressor", "lightgbm", "--no-export"]
        )
        assert result.exit_code == 0, result.output
        assert "regressor=lightgbm" in result.output

    def test_unknown_regressor_rejected(self, cli_config):
        result = runner.invoke(app, ["forecast", "--config", str(cli_config), "-r", "arima"])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_days_override(self, cli_config):
        result = runner.invoke(
            app, ["forecast", "--config", str(cli_config), "--days", "7", "--no-export"]
        )
        assert result.exit_code == 0, result.output
        assert "Predicted Prices (next 7 days)" in result.output

    def test_short_csv_fails(self, cli_config, tmp_path):
        csv_path = tmp_path / "short.csv"
        csv_path.write_text(
            "date,open,high,low,close,volume\n"
            "2024-01-02,1,2,0.5,1.5,10\n"
            "2024-01-03,1,2,0.5,1.6,10\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["forecast", "--config", str(cli_config), "--csv", str(csv_path)])
        assert result.exit_code == 1
        assert "Need at least 8 data points" in result.output

    def test_csv_with_several_symbols_rejected(self, cli_config, tmp_path):
        csv_path = tmp_path / "aapl.csv"
        csv_path.write_text("date,open,high,low,close,volume\n", encoding="utf-8")
        result = runner.invoke(
            app,
            ["forecast", "--config", str(cli_config), "--csv", str(csv_path), "-s", "AAPL", "-s", "MSFT"],
        )
        assert result.exit_code == 1
        assert "single symbol" in result.output


# ── fetch-history ─────────────────────────────────────────────────────────────

class TestFetchHistory:
    def test_writes_csv(self, cli_config, tmp_path):
        out = tmp_path / "aapl.csv"
        result = runner.invoke(
            app, ["fetch-history", "--config", str(cli_config), "--symbol", "aapl", "-o", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert "Rows written: 40" in result.output
        assert out.exists()

    def test_symbol_required(self, cli_config):
        result = runner.invoke(app, ["fetch-history", "--config", str(cli_config)])
        assert result.exit_code != 0

    def test_outputsize_override(self, cli_config, tmp_path):
        out = tmp_path / "short.csv"
        result = runner.invoke(
            app,
            ["fetch-history", "--config", str(cli_config), "-s", "MSFT", "--outputsize", "12", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert "Rows written: 12" in result.output
