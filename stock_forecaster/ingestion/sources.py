"""
History source selection.

``load_history(config, symbol)`` returns chronological observations from the
source named by ``config.data.source``:

  twelvedata — live Twelve Data API; falls back to fixture data (with a
               warning) when ``TWELVE_DATA_API_KEY`` is not set.
  csv        — ``config.data.csv_path`` (or an explicit ``csv_path``).
  fixture    — deterministic synthetic series, no network.

Only the last ``config.data.outputsize`` rows of a CSV are used so every
source hands the trainer the same amount of history.

``resolve_source()`` reports which of the three was really used; forecast
results carry it so fixture-backed output is never mistaken for market data.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from stock_forecaster.config import AppConfig
from stock_forecaster.ingestion.csv_loader import parse_observation_csv
from stock_forecaster.ingestion.twelvedata_client import TwelveDataClient
from stock_forecaster.models.observation import Observation

logger = logging.getLogger(__name__)

API_KEY_ENV = "TWELVE_DATA_API_KEY"


def build_client(config: AppConfig) -> TwelveDataClient:
    """Construct a ``TwelveDataClient`` from config + the API key env var."""
    return TwelveDataClient(
        api_key=os.environ.get(API_KEY_ENV),
        timeout=config.data.request_timeout_s,
    )


def resolve_source(
    config: AppConfig,
    csv_path: Optional[Path] = None,
    client: Optional[TwelveDataClient] = None,
) -> str:
    """Name the source ``load_history`` will actually read from.

    Returns ``"csv"``, ``"fixture"`` or ``"twelvedata"``.  A ``twelvedata``
    config without an API key resolves to ``"fixture"``, so callers can tell
    synthetic history apart from live data.
    """
    if csv_path is not None:
        return "csv"
    source = config.data.source
    if source != "twelvedata":
        return source
    has_key = not client.is_fixture_mode if client is not None else bool(os.environ.get(API_KEY_ENV))
    return "twelvedata" if has_key else "fixture"


def load_history(
    config: AppConfig,
    symbol: str,
    csv_path: Optional[Path] = None,
    client: Optional[TwelveDataClient] = None,
) -> list[Observation]:
    """Load history for ``symbol`` from the configured source.

    Args:
        config:   Application config.
        symbol:   Ticker to load.
        csv_path: Explicit CSV path; forces the CSV source when given.
        client:   Pre-built client (tests inject one with a mock transport).

    Returns:
        Chronological observations.

    Raises:
        ValueError: CSV source selected without a path, or invalid CSV rows.
        FileNotFoundError: CSV path does not exist.
        TwelveDataError: Live API failure.
    """
    outputsize = config.data.outputsize

    if csv_path is not None or config.data.source == "csv":
        path = csv_path or (Path(config.data.csv_path) if config.data.csv_path else None)
        if path is None:
            raise ValueError("data.source is 'csv' but no csv_path was configured.")
        observations = parse_observation_csv(path)
        return observations[-outputsize:]

    client = client or build_client(config)

    if resolve_source(config, client=client) == "fixture":
        if config.data.source == "twelvedata":
            logger.warning(
                "%s not set; using fixture data for %s. Set the key in .env for live data.",
                API_KEY_ENV, symbol,
            )
        return client.get_fixture_history(symbol, outputsize=outputsize)

    return client.fetch_time_series(symbol, outputsize=outputsize)
