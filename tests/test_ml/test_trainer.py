"""
Tests for stock_forecaster/ml/trainer.py.

What we test
------------
require_sufficient_history():
  - Accepts L == W + N; rejects L < W + N with the counts in the message.

train_forecast_model():
  - Short history is rejected BEFORE the regressor is trained.
  - Trains on exactly L - W examples and returns the bounds it used.
  - The returned model is fitted, bound to its regressor and reports a
    5 * W input width.
  - Per-call hyperparameters are forwarded to the regressor.
"""

from __future__ import annotations

import pytest

from stock_forecaster.features.scaling import compute_scaling_bounds
from stock_forecaster.ml.errors import ForecastError, InsufficientHistoryError
from stock_forecaster.ml.trainer import require_sufficient_history, train_forecast_model


class TestRequireSufficientHistory:
    def test_exact_minimum_passes(self):
        require_sufficient_history(10, 5, 5)

    def test_short_history_raises(self):
        with pytest.raises(InsufficientHistoryError) as exc_info:
            require_sufficient_history(5, 5, 5)
        err = exc_info.value
        assert err.required == 10
        assert err.available == 5
        assert "Need at least 10 data points" in str(err)
        assert "received 5" in str(err)

    def test_is_a_forecast_error(self):
        with pytest.raises(ForecastError):
            require_sufficient_history(0, 5, 1)


class TestTrainForecastModel:
    def test_rejects_short_history_before_training(self, make_history, constant_regressor):
        history = make_history([100.0 + i for i in range(5)])
        with pytest.raises(InsufficientHistoryError):
            train_forecast_model(history, 5, 5, constant_regressor)
        assert constant_regressor.train_calls == []

    def test_example_count(self, sample_history, constant_regressor):
        outcome = train_forecast_model(sample_history, 5, 5, constant_regressor)
        assert outcome.n_examples == len(sample_history) - 5
        assert constant_regressor.train_calls == [len(sample_history) - 5]

    def test_minimum_history_trains(self, make_history, constant_regressor):
        history = make_history([100.0 + i for i in range(10)])
        outcome = train_forecast_model(history, 5, 5, constant_regressor)
        assert outcome.n_examples == 5

    def test_bounds_from_history(self, sample_history, constant_regressor):
        outcome = train_forecast_model(sample_history, 5, 5, constant_regressor)
        assert outcome.bounds == compute_scaling_bounds(sample_history)

    def test_model_is_fitted_and_bound(self, sample_history, constant_regressor):
        outcome = train_forecast_model(sample_history, 5, 5, constant_regressor)
        model = outcome.model
        assert model.is_fitted
        assert model.regressor is constant_regressor
        assert model.input_size == 25
        assert model.run([0.0] * 25) == [0.5]

    def test_hyperparameters_forwarded(self, sample_history):
        received = {}

        class _Recording:
            slug = "recording"

            def train(self, examples, hyperparameters=None):
                received.update(hyperparameters or {})
                return object()

            def run(self, state, inputs):
                return [0.0]

        train_forecast_model(sample_history, 5, 5, _Recording(), hyperparameters={"alpha": 3.0})
        assert received == {"alpha": 3.0}
