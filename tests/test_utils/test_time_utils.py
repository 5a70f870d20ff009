"""Tests for stock_forecaster.utils.time_utils."""

from __future__ import annotations

from datetime import date

import pytest

from stock_forecaster.utils.time_utils import (
    is_strictly_increasing,
    next_calendar_day,
    parse_observation_date,
    utcnow,
)


def test_next_calendar_day_crosses_month() -> None:
    assert next_calendar_day(date(2024, 2, 28)) == date(2024, 2, 29)
    assert next_calendar_day(date(2024, 2, 29)) == date(2024, 3, 1)


def test_next_calendar_day_includes_weekend() -> None:
    assert next_calendar_day(date(2024, 6, 7)) == date(2024, 6, 8)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-01-02", date(2024, 1, 2)),
        (" 2024-01-02 ", date(2024, 1, 2)),
        ("2024-01-02 16:00:00", date(2024, 1, 2)),
    ],
)
def test_parse_observation_date(raw, expected) -> None:
    assert parse_observation_date(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "Jan 2 2024"])
def test_parse_observation_date_invalid(raw) -> None:
    with pytest.raises(ValueError):
        parse_observation_date(raw)


def test_is_strictly_increasing() -> None:
    assert is_strictly_increasing([date(2024, 1, 1), date(2024, 1, 2)])
    assert not is_strictly_increasing([date(2024, 1, 2), date(2024, 1, 2)])
    assert is_strictly_increasing([])


def test_utcnow_is_aware() -> None:
    assert utcnow().tzinfo is not None
