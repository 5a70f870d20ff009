"""
ASCII terminal formatters for CLI output.

All formatters return plain multi-line strings suitable for ``typer.echo()``.
No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from stock_forecaster.models.forecast import ForecastResult
from stock_forecaster.models.meta import RunMetadata


def _fmt_volume(volume: float) -> str:
    return f"{volume:,.0f}"


def format_history_block(result: ForecastResult) -> str:
    """The last ``window_size`` real closes — the days the forecast was seeded from."""
    lines = [f"  Historical Data (last {result.window_size} closes)"]
    for obs in result.seed_window:
        lines.append(f"    {obs.date}  ${obs.close:>10.2f}  (Vol: {_fmt_volume(obs.volume)})")
    return "\n".join(lines)


def format_predictions_block(result: ForecastResult) -> str:
    """Predicted closes with the change versus the last real close."""
    lines = [f"  Predicted Prices (next {result.num_days_to_predict} days)"]
    base = result.last_close
    for obs in result.predictions:
        change = ((obs.close - base) / base * 100.0) if base else 0.0
        lines.append(
            f"    {obs.date}  ${obs.close:>10.2f}  "
            f"[{obs.low:.2f} - {obs.high:.2f}]  {change:+.2f}%"
        )
    return "\n".join(lines)


def format_forecast_report(result: ForecastResult) -> str:
    """Full terminal report for one symbol."""
    header = (
        f"{result.symbol} | source={result.data_source} | regressor={result.regressor_slug} | "
        f"window={result.window_size}d | horizon={result.num_days_to_predict}d | "
        f"history={len(result.history)} rows | examples={result.n_training_examples}"
    )
    if result.data_source == "fixture":
        header = f"{header} | [FIXTURE DATA]"
    return "\n".join(
        [
            header,
            "-" * len(header),
            format_history_block(result),
            "",
            format_predictions_block(result),
        ]
    )


def format_run_summary(run: RunMetadata, failures: dict[str, str] | None = None) -> str:
    """One-line status plus any per-symbol failures."""
    duration = f"{run.duration_s:.2f}s" if run.duration_s is not None else "n/a"
    lines = [
        f"status={run.status} | rows={run.rows_processed} | "
        f"symbols={', '.join(run.symbols) or '-'} | {duration}"
    ]
    for symbol, msg in (failures or {}).items():
        lines.append(f"  [FAILED] {symbol}: {msg}")
    return "\n".join(lines)
