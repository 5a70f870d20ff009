"""
Shared pytest fixtures for the Stock Forecaster test suite.

Provides:
  - ``make_history``: factory building chronological observations from a
    list of closes.
  - ``sample_history``: 40 trading days with a trend and a cycle.
  - ``constant_regressor``: a ``Regressor`` that always predicts the same
    normalized value and counts its training calls.
  - ``app_config``: fixture-source config writing into ``tmp_path``.
  - ``sample_result``: a ``ForecastResult`` built from the above.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Optional, Sequence

import pytest

from stock_forecaster.config import AppConfig, DataConfig, LoggingConfig, ModelConfig
from stock_forecaster.models.forecast import ForecastResult
from stock_forecaster.models.observation import Observation


def _make_history(
    closes: Sequence[float],
    start: date = date(2024, 1, 1),
    volumes: Optional[Sequence[float]] = None,
) -> list[Observation]:
    """One observation per calendar day starting at ``start``."""
    rows = []
    for i, close in enumerate(closes):
        rows.append(
            Observation(
                date=start + timedelta(days=i),
                open=close - 0.5,
                high=close + 1.0,
                low=close - 1.0,
                close=float(close),
                volume=float(volumes[i]) if volumes is not None else 1_000.0 + 10.0 * i,
            )
        )
    return rows


class ConstantRegressor:
    """Always predicts ``value``; records every call it receives."""

    slug = "constant"

    def __init__(self, value: float = 0.5) -> None:
        self.value = value
        self.train_calls: list[int] = []
        self.run_inputs: list[list[float]] = []

    def train(self, examples, hyperparameters=None) -> dict[str, Any]:
        self.train_calls.append(len(examples))
        return {"value": self.value}

    def run(self, state, inputs) -> list[float]:
        self.run_inputs.append(list(inputs))
        return [state["value"]]


# ── Observation fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def make_history():
    """Factory: ``make_history(closes, start=..., volumes=...)``."""
    return _make_history


@pytest.fixture
def sample_history() -> list[Observation]:
    """40 days of closes drifting upwards around 100."""
    closes = [100.0 + 0.5 * i + 3.0 * math.sin(i / 4.0) for i in range(40)]
    return _make_history(closes)


# ── Regressor fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def constant_regressor() -> ConstantRegressor:
    return ConstantRegressor()


@pytest.fixture
def regressor_factory():
    """Factory: ``regressor_factory(value=0.5)`` -> ``ConstantRegressor``."""
    return ConstantRegressor


# ── Config / result fixtures ──────────────────────────────────────────────────

@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Offline config: fixture data, ridge regressor, outputs under tmp_path."""
    return AppConfig(
        data=DataConfig(source="fixture", output_dir=str(tmp_path / "outputs"), outputsize=60),
        model=ModelConfig(regressor="ridge"),
        logging=LoggingConfig(log_file=""),
    )


@pytest.fixture
def sample_result(app_config, sample_history, constant_regressor) -> ForecastResult:
    from stock_forecaster.ml.predictor import run_symbol_forecast

    return run_symbol_forecast(
        app_config,
        "AAPL",
        sample_history,
        regressor=constant_regressor,
        window_size=5,
        num_days_to_predict=5,
    )
