"""
CSV import / export of daily OHLCV history.

Format — comma delimited with a header row.
Required columns:
  date, open, high, low, close, volume

``date`` is ``YYYY-MM-DD`` (a trailing time part is ignored).  An empty
``volume`` cell is read as ``0.0``.  Extra columns are ignored.

Rows must already be in chronological order with strictly increasing
dates.  All rows are validated before any are returned; if any fail, one
``ValueError`` lists the first 10 failures.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from stock_forecaster.models.observation import OHLCV_FIELDS, Observation
from stock_forecaster.utils.time_utils import parse_observation_date

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = frozenset({"date", *OHLCV_FIELDS})
CSV_COLUMNS: list[str] = ["date", *OHLCV_FIELDS]


def parse_observation_csv(path: Path) -> list[Observation]:
    """Parse a CSV file of daily bars into validated observations.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        Observations in file order (chronological).

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If required columns are missing, any row fails
            validation, or dates are not strictly increasing.
    """
    if not path.exists():
        raise FileNotFoundError(f"History CSV file not found: {path}")

    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)

        if reader.fieldnames is None:
            raise ValueError(f"CSV file is empty or has no header row: {path}")

        actual_cols = {c.strip().lower() for c in reader.fieldnames}
        missing = REQUIRED_CSV_COLUMNS - actual_cols
        if missing:
            raise ValueError(
                f"CSV missing required columns: {sorted(missing)}\n"
                f"Found columns: {sorted(actual_cols)}"
            )

        rows = [
            {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}
            for row in reader
        ]

    if not rows:
        logger.warning("History CSV is empty (header only): %s", path)
        return []

    observations: list[Observation] = []
    errors: list[tuple[int, str]] = []

    for i, row in enumerate(rows):
        line_no = i + 2  # 1-based, skip header row
        try:
            obs = _row_to_observation(row)
        except (ValueError, ValidationError) as exc:
            errors.append((line_no, str(exc)))
            continue
        if observations and obs.date <= observations[-1].date:
            errors.append(
                (line_no, f"date {obs.date} is not after previous date {observations[-1].date}")
            )
            continue
        observations.append(obs)

    if errors:
        max_shown = 10
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:max_shown])
        suffix = f"\n  … and {len(errors) - max_shown} more" if len(errors) > max_shown else ""
        raise ValueError(
            f"{len(errors)} row(s) failed validation in {path.name}:\n{detail}{suffix}"
        )

    logger.info("Parsed %d observations from %s", len(observations), path.name)
    return observations


def write_observation_csv(observations: Sequence[Observation], path: Path) -> Path:
    """Write observations to ``path`` in the format ``parse_observation_csv`` reads.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for obs in observations:
            writer.writerow([obs.date.isoformat(), *(repr(getattr(obs, c)) for c in OHLCV_FIELDS)])
    logger.info("Wrote %d observations to %s", len(observations), path)
    return path


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_observation(row: dict[str, str]) -> Observation:
    """Convert a normalised CSV row dict to a validated ``Observation``.

    Raises:
        ValueError: On missing values or unparseable numbers / dates.
        pydantic.ValidationError: On non-finite values.
    """
    values: dict[str, float] = {}
    for col in OHLCV_FIELDS:
        raw = row.get(col, "")
        if raw == "":
            if col == "volume":
                values[col] = 0.0
                continue
            raise ValueError(f"Missing required field '{col}'.")
        try:
            values[col] = float(raw)
        except ValueError:
            raise ValueError(f"Invalid number for '{col}': {raw!r}.") from None

    return Observation(date=parse_observation_date(row.get("date", "")), **values)
