"""
Training orchestrator for one forecast run.

train_forecast_model() turns a symbol's history into a fitted model:

  1. require_sufficient_history() — reject short histories BEFORE any work.
  2. compute_scaling_bounds()     — fresh bounds from this history slice.
  3. build_training_examples()    — L - W sliding-window pairs.
  4. regressor.train()            — opaque fit, wrapped in a TrainedModel.

The returned bounds MUST be the ones passed to the rolling forecaster; the
model only understands inputs scaled with the table it was trained on.

Minimum history
---------------
A run needs ``window_size + num_days_to_predict`` observations.  That is
stricter than the ``window_size + 1`` the example builder itself needs, and
is checked first so an undersized request never reaches the regressor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from stock_forecaster.features.scaling import compute_scaling_bounds
from stock_forecaster.features.windowing import build_training_examples
from stock_forecaster.ml.errors import InsufficientHistoryError
from stock_forecaster.ml.regressor import Regressor, TrainedModel
from stock_forecaster.models.observation import Observation, ScalingBounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingOutcome:
    """Everything the forecaster needs from a training run.

    Attributes:
        model:      Fitted model bound to its regressor.
        bounds:     Scaling table the model was trained with.
        n_examples: Number of supervised pairs used.
    """

    model: TrainedModel
    bounds: ScalingBounds
    n_examples: int


def require_sufficient_history(
    available: int,
    window_size: int,
    num_days_to_predict: int,
) -> None:
    """Raise ``InsufficientHistoryError`` if ``available < W + N``.

    Raises:
        InsufficientHistoryError: History too short for the request.
    """
    if available < window_size + num_days_to_predict:
        raise InsufficientHistoryError(available, window_size, num_days_to_predict)


def train_forecast_model(
    observations: Sequence[Observation],
    window_size: int,
    num_days_to_predict: int,
    regressor: Regressor,
    hyperparameters: Optional[Mapping[str, Any]] = None,
) -> TrainingOutcome:
    """Scale, window and fit ``regressor`` on ``observations``.

    Args:
        observations:        Chronological history for one symbol.
        window_size:         Days per input window.
        num_days_to_predict: Horizon the model will be rolled over (checked
                             against the history length only).
        regressor:           Regressor to train (injected by the caller).
        hyperparameters:     Optional per-call overrides for the regressor.

    Returns:
        ``TrainingOutcome`` with the fitted model and its bounds.

    Raises:
        InsufficientHistoryError: If ``len(observations) < W + N``; raised
            before any example is built or any training call is made.
    """
    require_sufficient_history(len(observations), window_size, num_days_to_predict)

    bounds = compute_scaling_bounds(observations)
    examples = build_training_examples(observations, window_size, bounds)
    if not examples:
        raise InsufficientHistoryError(len(observations), window_size, num_days_to_predict)

    logger.info(
        "Training regressor=%s on %d examples (observations=%d, window_size=%d)",
        regressor.slug, len(examples), len(observations), window_size,
    )
    state = regressor.train(examples, hyperparameters)

    model = TrainedModel(
        regressor=regressor,
        state=state,
        input_size=len(examples[0].input),
        n_examples=len(examples),
    )
    return TrainingOutcome(model=model, bounds=bounds, n_examples=len(examples))
