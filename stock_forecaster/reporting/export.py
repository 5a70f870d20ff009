"""
Export helpers for forecast results.

All functions that write to disk return the written ``Path``.

CSV exports are flat (one row per day, history and predictions together,
told apart by ``is_prediction``) so they load directly in a spreadsheet or
charting tool.  The JSON export keeps the full ``ForecastResult`` structure,
including the scaling bounds, for reproducibility.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from stock_forecaster.models.forecast import ForecastResult

FORECAST_CSV_COLUMNS: list[str] = [
    "symbol", "date", "open", "high", "low", "close", "volume", "is_prediction",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def forecast_records_for_export(result: ForecastResult) -> list[dict]:
    """Flatten a result into one row per day, history first.

    Each row carries ``symbol``, ``date`` (ISO string), the five OHLCV
    values and ``is_prediction`` (``False`` for real history).
    """
    rows: list[dict] = []
    for is_prediction, series in ((False, result.history), (True, result.predictions)):
        for obs in series:
            rows.append(
                {
                    "symbol":        result.symbol,
                    "date":          obs.date.isoformat(),
                    "open":          obs.open,
                    "high":          obs.high,
                    "low":           obs.low,
                    "close":         obs.close,
                    "volume":        obs.volume,
                    "is_prediction": is_prediction,
                }
            )
    return rows


def export_forecast_result(result: ForecastResult, output_dir: Path) -> list[Path]:
    """Write ``forecast_<SYMBOL>_<date>.csv`` and ``.json`` under ``output_dir``.

    The date in the filename is the UTC generation date of the result.

    Returns:
        ``[csv_path, json_path]``.
    """
    stem = f"forecast_{result.symbol}_{result.generated_at.date().isoformat()}"
    csv_path = export_to_csv(
        forecast_records_for_export(result),
        output_dir / f"{stem}.csv",
        fieldnames=FORECAST_CSV_COLUMNS,
    )
    json_path = export_to_json(result.model_dump(mode="json"), output_dir / f"{stem}.json")
    return [csv_path, json_path]
