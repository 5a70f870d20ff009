"""
Forecast output model.

``ForecastResult`` bundles everything one forecast run produced for a
symbol: the real history it was trained on, the synthetic predicted days,
and the scaling bounds and regressor that produced them. It is frozen;
reporting and export read from it, nothing writes back.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator

from stock_forecaster.models.observation import Observation, ScalingBounds


class ForecastResult(BaseModel):
    """Outcome of one rolling forecast for a single symbol.

    Attributes:
        symbol: Ticker the history was fetched for, e.g. ``"AAPL"``.
        window_size: Days per model input window.
        num_days_to_predict: Requested horizon.
        regressor_slug: Identifier of the regressor that was trained.
        history: Real observations, oldest first.
        predictions: Synthetic observations, oldest first.
        bounds: Scaling bounds computed from ``history``.
        n_training_examples: Supervised pairs the model was trained on.
        generated_at: UTC timestamp of the run.
        data_source: Where ``history`` came from: ``"twelvedata"``, ``"csv"``,
            ``"fixture"``, or ``"unknown"`` when the caller did not say.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    window_size: int
    num_days_to_predict: int
    regressor_slug: str
    history: list[Observation]
    predictions: list[Observation]
    bounds: ScalingBounds
    n_training_examples: int
    generated_at: datetime
    data_source: str = "unknown"

    @model_validator(mode="after")
    def validate_shape(self) -> "ForecastResult":
        if len(self.predictions) != self.num_days_to_predict:
            raise ValueError(
                f"Expected {self.num_days_to_predict} predictions, "
                f"got {len(self.predictions)}."
            )
        if len(self.history) < self.window_size:
            raise ValueError(
                f"history ({len(self.history)} rows) is shorter than "
                f"window_size ({self.window_size})."
            )
        return self

    @property
    def seed_window(self) -> list[Observation]:
        """The last ``window_size`` real observations the forecast started from."""
        return self.history[-self.window_size:]

    @property
    def last_close(self) -> float:
        """Close of the most recent real observation."""
        return self.history[-1].close
