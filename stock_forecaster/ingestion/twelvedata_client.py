"""
Twelve Data client — daily OHLCV time series.

API:   https://api.twelvedata.com/time_series
Docs:  https://twelvedata.com/docs#time-series

Credential setup (.env, gitignored):
  TWELVE_DATA_API_KEY=your_key_here

Without a key the client runs in fixture mode: ``get_fixture_history()``
returns a deterministic synthetic series so the whole pipeline can run
offline.  ``ingestion.sources.load_history()`` makes that choice.

Response handling
-----------------
- Values arrive newest-first; they are reversed to chronological order.
- Numbers arrive as strings and are parsed to float.
- Instruments without volume (FX, some indices) get ``volume = 0.0``.
- HTTP errors and ``{"status": "error"}`` payloads raise ``TwelveDataError``
  carrying the provider's ``message``.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Any, ClassVar, Optional

import httpx
from pydantic import ValidationError

from stock_forecaster.models.observation import Observation
from stock_forecaster.utils.time_utils import is_strictly_increasing, parse_observation_date

logger = logging.getLogger(__name__)


class TwelveDataError(RuntimeError):
    """Raised when Twelve Data cannot return a usable series.

    Attributes:
        symbol:      Requested symbol.
        status_code: HTTP status, or ``None`` for transport / payload errors.
    """

    def __init__(self, message: str, symbol: str = "", status_code: Optional[int] = None) -> None:
        self.symbol      = symbol
        self.status_code = status_code
        super().__init__(message)


class TwelveDataClient:
    """Client for the Twelve Data ``time_series`` endpoint.

    Usage (fixture mode — no API key required)::

        client = TwelveDataClient()
        history = client.get_fixture_history("AAPL")

    Usage (real API)::

        client = TwelveDataClient(api_key=os.environ["TWELVE_DATA_API_KEY"])
        history = client.fetch_time_series("AAPL", outputsize=100)

    Attributes:
        api_key: Twelve Data API key, or ``None`` for fixture mode.
        base_url: API root.
        timeout: Per-request timeout in seconds.
    """

    BASE_URL: ClassVar[str] = "https://api.twelvedata.com"
    INTERVAL: ClassVar[str] = "1day"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialise the client.

        Args:
            api_key:   API key; ``None`` or empty means fixture mode.
            base_url:  API root (override for proxies / tests).
            timeout:   Request timeout in seconds.
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        """
        self.api_key = api_key or None
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport

    @property
    def is_fixture_mode(self) -> bool:
        return self.api_key is None

    # ── Real API ──────────────────────────────────────────────────────────────

    def fetch_time_series(self, symbol: str, outputsize: int = 100) -> list[Observation]:
        """Fetch up to ``outputsize`` daily bars for ``symbol``.

        Args:
            symbol:     Ticker, e.g. ``"AAPL"``.
            outputsize: Number of most recent bars to request.

        Returns:
            Observations in chronological order.

        Raises:
            TwelveDataError: No API key, transport failure, non-2xx response,
                error payload, or malformed values.
        """
        if self.api_key is None:
            raise TwelveDataError(
                "A Twelve Data API key is required. Set TWELVE_DATA_API_KEY in .env "
                "or use the fixture data source.",
                symbol=symbol,
            )

        params = {
            "symbol":     symbol,
            "interval":   self.INTERVAL,
            "outputsize": outputsize,
            "apikey":     self.api_key,
        }

        logger.info("Fetching %d daily bars for %s from Twelve Data", outputsize, symbol)
        try:
            with httpx.Client(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = client.get("/time_series", params=params)
        except httpx.HTTPError as exc:
            raise TwelveDataError(f"Request to Twelve Data failed: {exc}", symbol=symbol) from exc

        if not resp.is_success:
            raise TwelveDataError(
                f"Failed to fetch data: {resp.status_code} {resp.reason_phrase} - "
                f"{_error_message(resp)}",
                symbol=symbol,
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise TwelveDataError(f"Twelve Data returned invalid JSON: {exc}", symbol=symbol) from exc

        observations = parse_time_series_payload(payload, symbol)
        logger.info(
            "Received %d bars for %s (%s -> %s)",
            len(observations), symbol, observations[0].date, observations[-1].date,
        )
        return observations

    # ── Fixture mode ──────────────────────────────────────────────────────────

    def get_fixture_history(
        self,
        symbol: str,
        outputsize: int = 100,
        end_date: Optional[date] = None,
    ) -> list[Observation]:
        """Return a deterministic synthetic daily series for ``symbol``.

        Weekdays only, ending on ``end_date`` (default: today, or the
        preceding Friday).  The price path is a gentle trend plus a weekly
        and a monthly cycle, seeded from the symbol so different tickers
        produce different but repeatable series.

        Args:
            symbol:     Ticker (only used to seed the series).
            outputsize: Number of bars to return.
            end_date:   Last bar date.

        Returns:
            ``outputsize`` observations in chronological order.
        """
        end = end_date or date.today()
        while end.weekday() >= 5:
            end -= timedelta(days=1)

        dates: list[date] = []
        d = end
        while len(dates) < outputsize:
            if d.weekday() < 5:
                dates.append(d)
            d -= timedelta(days=1)
        dates.reverse()

        seed = sum(ord(c) for c in symbol.upper())
        base = 50.0 + seed % 200
        observations: list[Observation] = []
        for i, day in enumerate(dates):
            close = base * (1.0 + 0.002 * i) + 2.0 * math.sin(i / 5.0) + 1.0 * math.sin(i / 21.0 + seed)
            open_ = close - 0.5 * math.sin(i / 3.0)
            high  = max(open_, close) * 1.01
            low   = min(open_, close) * 0.99
            volume = float(1_000_000 + (seed * 7919 + i * 104_729) % 500_000)
            observations.append(
                Observation(date=day, open=open_, high=high, low=low, close=close, volume=volume)
            )

        logger.info("Fixture mode: generated %d synthetic bars for %s", len(observations), symbol)
        return observations


# ── Payload parsing ────────────────────────────────────────────────────────────

def parse_time_series_payload(payload: Any, symbol: str = "") -> list[Observation]:
    """Convert a ``time_series`` JSON payload into chronological observations.

    Raises:
        TwelveDataError: Error payload, missing ``values``, bad rows, or
            dates that are not strictly increasing once reversed.
    """
    if not isinstance(payload, dict) or payload.get("status") == "error" or not payload.get("values"):
        message = payload.get("message") if isinstance(payload, dict) else None
        raise TwelveDataError(
            message or "Invalid data received from Twelve Data API.",
            symbol=symbol,
            status_code=payload.get("code") if isinstance(payload, dict) else None,
        )

    observations: list[Observation] = []
    for item in reversed(payload["values"]):
        try:
            observations.append(_value_to_observation(item))
        except (KeyError, TypeError, ValueError, ValidationError) as exc:
            raise TwelveDataError(
                f"Malformed bar in Twelve Data response: {item!r} ({exc})", symbol=symbol
            ) from exc

    if not is_strictly_increasing([o.date for o in observations]):
        raise TwelveDataError(
            "Twelve Data returned bars whose dates are not strictly increasing.", symbol=symbol
        )
    return observations


def _value_to_observation(item: dict[str, Any]) -> Observation:
    volume = item.get("volume")
    return Observation(
        date=parse_observation_date(item["datetime"]),
        open=float(item["open"]),
        high=float(item["high"]),
        low=float(item["low"]),
        close=float(item["close"]),
        volume=float(volume) if volume not in (None, "") else 0.0,
    )


def _error_message(resp: httpx.Response) -> str:
    """Best-effort extraction of the provider's error message."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "Unknown error"
