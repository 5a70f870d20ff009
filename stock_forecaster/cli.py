"""
Stock Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Apply command-line overrides.
  3. Configure logging.
  4. Execute the pipeline stage.
  5. Report result to stdout.

Install and run::

    pip install -e .
    stock-forecaster --help
    stock-forecaster validate-config
    stock-forecaster fetch-history --symbol AAPL
    stock-forecaster forecast --symbol AAPL --symbol MSFT --days 5
    stock-forecaster forecast --csv data/outputs/history_AAPL_2024-06-03.csv
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="stock-forecaster",
    help="Rolling multi-step daily stock price forecaster.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from stock_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _apply_overrides_or_exit(
    config,
    regressor: Optional[str] = None,
    output_dir: Optional[str] = None,
    outputsize: Optional[int] = None,
):
    """Return a copy of ``config`` with CLI overrides applied and re-validated."""
    from stock_forecaster.config import DataConfig, ModelConfig

    try:
        updates = {}
        if regressor:
            updates["model"] = ModelConfig(
                **{**config.model.model_dump(), "regressor": regressor}
            )
        data_updates = {}
        if output_dir:
            data_updates["output_dir"] = output_dir
        if outputsize is not None:
            data_updates["outputsize"] = outputsize
        if data_updates:
            updates["data"] = DataConfig(**{**config.data.model_dump(), **data_updates})
    except Exception as exc:
        typer.echo(f"[ERROR] Invalid option: {exc}", err=True)
        raise typer.Exit(code=1)
    return config.model_copy(update=updates) if updates else config


def _configure_logging(config):
    """Set up logging from config."""
    from stock_forecaster.utils.logging import configure_logging
    configure_logging(config.logging)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    from stock_forecaster.ingestion.sources import API_KEY_ENV

    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Data source:      {config.data.source}")
    typer.echo(f"  Output dir:       {config.data.output_dir}")
    typer.echo(f"  Window size:      {config.forecast.window_size}")
    typer.echo(f"  Days to predict:  {config.forecast.num_days_to_predict}")
    typer.echo(f"  Min history:      {config.forecast.min_history} rows")
    typer.echo(f"  Default symbols:  {', '.join(config.forecast.default_symbols)}")
    typer.echo(f"  Regressor:        {config.model.regressor}")
    typer.echo(f"  API key set:      {bool(os.environ.get(API_KEY_ENV))}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if config.data.source != "csv" and config.data.outputsize < config.forecast.min_history:
        typer.echo("")
        typer.echo(
            f"[WARN] data.outputsize={config.data.outputsize} is below the "
            f"{config.forecast.min_history} rows a forecast needs; every symbol will fail."
        )

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("fetch-history")
def fetch_history(
    symbol: str = typer.Option(
        ...,
        "--symbol",
        "-s",
        help="Ticker to fetch (e.g. AAPL).",
    ),
    outputsize: Optional[int] = typer.Option(
        None,
        "--outputsize",
        help="Number of most recent daily bars to fetch (default from config).",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output CSV path (default: <output_dir>/history_<SYMBOL>_<date>.csv).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Download daily history for one symbol and save it as CSV.

    The file can be fed back to ``forecast --csv`` for offline runs.
    """
    from stock_forecaster.pipeline.fetch import FetchStage

    config = _load_config_or_exit(config_path)
    config = _apply_overrides_or_exit(config, outputsize=outputsize)
    _configure_logging(config)

    stage = FetchStage(config=config)
    try:
        run = stage.run(symbol=symbol, output_path=Path(output) if output else None)
    except Exception as exc:
        typer.echo(f"[ERROR] fetch-history failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Rows written: {run.rows_processed}")
    typer.echo(f"  File:         {stage.written}")
    typer.echo(f"[OK] History saved for {symbol.upper()}.")


@app.command("forecast")
def forecast(
    symbols: Optional[list[str]] = typer.Option(
        None,
        "--symbol",
        "-s",
        help="Ticker to forecast; repeat for several. Uses config defaults if omitted.",
    ),
    csv_path: Optional[str] = typer.Option(
        None,
        "--csv",
        help="Read history from this CSV instead of the configured source. Single symbol only: combine with at most one --symbol.",
    ),
    window_size: Optional[int] = typer.Option(
        None,
        "--window-size",
        "-w",
        min=1,
        help="Days of history per input window (default from config).",
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-n",
        min=1,
        help="Number of future days to predict (default from config).",
    ),
    regressor: Optional[str] = typer.Option(
        None,
        "--regressor",
        "-r",
        help="Regressor backend: mlp, lightgbm or ridge.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        help="Directory for CSV/JSON exports (default from config).",
    ),
    no_export: bool = typer.Option(
        False,
        "--no-export",
        help="Print the report only; write no files.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Train on each symbol's history and print a rolling N-day forecast.

    Each symbol gets a fresh model trained on its own history.  A symbol
    with too little history is reported and skipped; the command exits 1
    only if every symbol fails.
    """
    from stock_forecaster.pipeline.forecast import ForecastStage
    from stock_forecaster.reporting.formatters import (
        format_forecast_report,
        format_run_summary,
    )

    config = _load_config_or_exit(config_path)
    config = _apply_overrides_or_exit(config, regressor=regressor, output_dir=output_dir)
    _configure_logging(config)

    stage = ForecastStage(config=config)
    try:
        run = stage.run(
            symbols=symbols or None,
            csv_path=Path(csv_path) if csv_path else None,
            window_size=window_size,
            num_days_to_predict=days,
            export=not no_export,
        )
    except Exception as exc:
        for sym, msg in stage.failures.items():
            typer.echo(f"  [FAILED] {sym}: {msg}", err=True)
        typer.echo(f"[ERROR] forecast failed: {exc}", err=True)
        raise typer.Exit(code=1)

    for result in stage.results:
        typer.echo("")
        typer.echo(format_forecast_report(result))

    typer.echo("")
    typer.echo(format_run_summary(run, stage.failures))
    for path in stage.exported:
        typer.echo(f"  Wrote: {path}")
    typer.echo("[OK] Forecast complete.")


if __name__ == "__main__":
    app()
