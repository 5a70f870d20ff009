"""
Rolling (autoregressive) multi-step forecaster.

Each step predicts one normalized close from the current window, turns it
into a full synthetic observation, and slides that observation into the
window for the next step.  Later predictions therefore depend on earlier
predictions, and errors compound over the horizon.  Steps are strictly
sequential.

Synthetic observations
----------------------
For a predicted close ``c``:

  open = close = c
  high = c * 1.005
  low  = c * 0.995
  volume = volume of the last REAL observation in the seed window

The ±0.5% bracket and the reused volume are fixed placeholders, not
estimates.  Dates advance one calendar day per step (weekends included).

Failure semantics
-----------------
An untrained model or a seed window of the wrong length fails before the
first step; no partial forecast is ever returned.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Optional, Sequence

from stock_forecaster.features.scaling import denormalize_field
from stock_forecaster.features.windowing import flatten_window
from stock_forecaster.ml.errors import InvalidWindowError, UntrainedModelError
from stock_forecaster.ml.regressor import TrainedModel
from stock_forecaster.models.observation import (
    OHLCV_FIELDS,
    FieldBounds,
    Observation,
    ScalingBounds,
)
from stock_forecaster.utils.time_utils import next_calendar_day

logger = logging.getLogger(__name__)

HIGH_FACTOR = 1.005
LOW_FACTOR  = 0.995


def predict_next_close(
    model: TrainedModel,
    input_vector: Sequence[float],
    close_bounds: FieldBounds,
) -> float:
    """Run one prediction and return it in price units."""
    output = model.run(input_vector)
    return denormalize_field(output[0], close_bounds)


def synthesize_observation(
    predicted_close: float,
    previous: Observation,
    volume: float,
) -> Observation:
    """Build the pseudo-observation for the day after ``previous``."""
    return Observation(
        date=next_calendar_day(previous.date),
        open=predicted_close,
        high=predicted_close * HIGH_FACTOR,
        low=predicted_close * LOW_FACTOR,
        close=predicted_close,
        volume=volume,
    )


def forecast(
    model: Optional[TrainedModel],
    seed_window: Sequence[Observation],
    bounds: ScalingBounds,
    window_size: int,
    num_days_to_predict: int,
) -> list[Observation]:
    """Project ``num_days_to_predict`` synthetic days after ``seed_window``.

    Args:
        model:               Fitted model from ``train_forecast_model()``.
        seed_window:         The last ``window_size`` real observations,
                             oldest first.  Never mutated.
        bounds:              Scaling table the model was trained with.
        window_size:         Days per model input window.
        num_days_to_predict: Number of future days to produce.

    Returns:
        Exactly ``num_days_to_predict`` observations on consecutive calendar
        days starting the day after ``seed_window[-1].date``.

    Raises:
        UntrainedModelError: ``model`` is ``None`` or not fitted.
        InvalidWindowError:  ``len(seed_window) != window_size``, or the model
            was trained on a different input width.
        ValueError:          ``num_days_to_predict`` is negative.
    """
    if model is None or not model.is_fitted:
        raise UntrainedModelError()

    if window_size < 1 or len(seed_window) != window_size:
        raise InvalidWindowError(window_size, len(seed_window))

    expected_width = window_size * len(OHLCV_FIELDS)
    if model.input_size != expected_width:
        raise InvalidWindowError(
            window_size,
            len(seed_window),
            detail=(
                f"Model was trained on {model.input_size} inputs "
                f"({model.input_size // len(OHLCV_FIELDS)}-day windows)."
            ),
        )

    if num_days_to_predict < 0:
        raise ValueError(f"num_days_to_predict must be >= 0, got {num_days_to_predict}.")

    window: deque[Observation] = deque(seed_window, maxlen=window_size)
    last_real_volume = seed_window[-1].volume

    predictions: list[Observation] = []
    for step in range(num_days_to_predict):
        vector = flatten_window(window, bounds)
        predicted_close = predict_next_close(model, vector, bounds.close)

        day = synthesize_observation(predicted_close, window[-1], last_real_volume)
        predictions.append(day)
        window.append(day)  # maxlen drops the oldest entry

        logger.debug(
            "Step %d/%d: %s close=%.4f", step + 1, num_days_to_predict, day.date, day.close,
        )

    return predictions
