"""Tests for the Observation, ScalingBounds, ForecastResult and RunMetadata models."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from stock_forecaster.models.forecast import ForecastResult
from stock_forecaster.models.meta import RunMetadata
from stock_forecaster.models.observation import Observation, ScalingBounds


# ── Observation ───────────────────────────────────────────────────────────────

class TestObservation:
    def test_frozen(self, sample_history):
        with pytest.raises(ValidationError):
            sample_history[0].close = 1.0

    @pytest.mark.parametrize("bad", [math.nan, math.inf])
    def test_rejects_non_finite(self, bad):
        with pytest.raises(ValidationError):
            Observation(date=date(2024, 1, 1), open=1, high=1, low=1, close=bad, volume=0)


def test_unit_bounds() -> None:
    unit = ScalingBounds.unit()
    assert unit.volume.min == 0.0 and unit.volume.max == 1.0


# ── ForecastResult ────────────────────────────────────────────────────────────

class TestForecastResult:
    def test_seed_window_and_last_close(self, sample_result):
        assert sample_result.seed_window == sample_result.history[-5:]
        assert sample_result.last_close == sample_result.history[-1].close

    def test_prediction_count_enforced(self, sample_result):
        data = sample_result.model_dump()
        data["predictions"] = data["predictions"][:2]
        with pytest.raises(ValidationError, match="Expected 5 predictions"):
            ForecastResult(**data)

    def test_history_shorter_than_window_rejected(self, sample_result):
        data = sample_result.model_dump()
        data["history"] = data["history"][:3]
        with pytest.raises(ValidationError, match="shorter than"):
            ForecastResult(**data)


# ── RunMetadata ───────────────────────────────────────────────────────────────

class TestRunMetadata:
    def _run(self, **kwargs) -> RunMetadata:
        base = dict(
            run_slug="r1",
            pipeline_stage="forecast",
            config_snapshot={},
            started_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        base.update(kwargs)
        return RunMetadata(**base)

    def test_defaults(self):
        run = self._run()
        assert run.status == "started"
        assert run.duration_s is None

    def test_unknown_stage_rejected(self):
        with pytest.raises(ValidationError):
            self._run(pipeline_stage="backtest")

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            self._run(status="done")

    def test_is_mutable(self):
        run = self._run()
        run.status = "success"
        assert run.status == "success"
