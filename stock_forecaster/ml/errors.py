"""
Forecasting error types.

All three are caller-visible and not retryable without more data or a
different call; nothing in the package retries them.
"""

from __future__ import annotations


class ForecastError(RuntimeError):
    """Base class for errors raised by the training / forecasting core."""


class InsufficientHistoryError(ForecastError):
    """Raised before training when the history cannot support the request.

    Attributes:
        available:           Observations supplied.
        window_size:         Days per model input window.
        num_days_to_predict: Requested horizon.
    """

    def __init__(self, available: int, window_size: int, num_days_to_predict: int) -> None:
        self.available           = available
        self.window_size         = window_size
        self.num_days_to_predict = num_days_to_predict
        super().__init__(
            f"Need at least {self.required} data points "
            f"(window_size={window_size} + num_days_to_predict={num_days_to_predict}), "
            f"received {available}."
        )

    @property
    def required(self) -> int:
        return self.window_size + self.num_days_to_predict


class InvalidWindowError(ForecastError):
    """Raised when a seed window does not hold exactly ``window_size`` days.

    Attributes:
        expected: Required window length.
        actual:   Length that was supplied.
    """

    def __init__(self, expected: int, actual: int, detail: str = "") -> None:
        self.expected = expected
        self.actual   = actual
        msg = f"Seed window must contain exactly {expected} observations, got {actual}."
        if detail:
            msg = f"{msg} {detail}"
        super().__init__(msg)


class UntrainedModelError(ForecastError):
    """Raised when a forecast is requested without a fitted model."""

    def __init__(self, message: str = "Forecast requires a trained model; call train_forecast_model() first.") -> None:
        super().__init__(message)
