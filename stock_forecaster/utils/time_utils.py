"""
Date helpers for observation series and forecast output.

Predicted days advance by one *calendar* day.  Weekends and exchange
holidays are not skipped, so a forecast seeded on a Friday produces a
Saturday observation.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone


def next_calendar_day(d: date) -> date:
    """Return the calendar day after ``d``."""
    return d + timedelta(days=1)


def parse_observation_date(value: str) -> date:
    """Parse a provider date string into a ``date``.

    Accepts ``YYYY-MM-DD`` and the ``YYYY-MM-DD HH:MM:SS`` form some
    providers use for daily bars; the time part is dropped.

    Raises:
        ValueError: If the string is not an ISO date.
    """
    value = value.strip()
    if not value:
        raise ValueError("Empty date string.")
    return date.fromisoformat(value[:10])


def is_strictly_increasing(dates: list[date]) -> bool:
    """True if every date is later than the one before it."""
    return all(a < b for a, b in zip(dates, dates[1:]))


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)
