"""
Observation and scaling models.

``Observation`` is one trading day of OHLCV data. ``date`` is carried for
ordering and display only; it is never a model input.

``ScalingBounds`` holds a ``FieldBounds`` (``min``/``max``) pair for each of
the five numeric fields. Bounds are computed fresh from the slice of history
being modelled on every forecast run and are never reused across runs.

Both models are frozen. The forecaster builds new ``Observation`` objects
for predicted days instead of mutating history.
"""

from __future__ import annotations

import datetime as dt
import math

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# Order in which fields are flattened into model inputs. Changing this
# invalidates every trained model.
OHLCV_FIELDS: tuple[str, ...] = ("open", "high", "low", "close", "volume")


class Observation(BaseModel):
    """One day of OHLCV market data.

    Attributes:
        date: Calendar date of the bar.
        open: Opening price.
        high: Session high.
        low: Session low.
        close: Closing price.
        volume: Traded volume (``0.0`` when the provider has none).
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    open: float
    high: float
    low: float
    close: float
    volume: float

    @field_validator("open", "high", "low", "close", "volume")
    @classmethod
    def validate_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"OHLCV values must be finite, got {v}.")
        return v


class FieldBounds(BaseModel):
    """Closed ``[min, max]`` interval observed for one field."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @model_validator(mode="after")
    def validate_order(self) -> "FieldBounds":
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must be <= max ({self.max}).")
        return self

    @property
    def is_degenerate(self) -> bool:
        """True when the field was constant over the window (``min == max``)."""
        return self.min == self.max


_UNIT_BOUNDS = FieldBounds(min=0.0, max=1.0)


class ScalingBounds(BaseModel):
    """Per-field min/max table used to normalize and denormalize OHLCV values."""

    model_config = ConfigDict(frozen=True)

    open: FieldBounds
    high: FieldBounds
    low: FieldBounds
    close: FieldBounds
    volume: FieldBounds

    @classmethod
    def unit(cls) -> "ScalingBounds":
        """Bounds of ``{min: 0, max: 1}`` for every field (empty-input default)."""
        return cls(**{name: _UNIT_BOUNDS for name in OHLCV_FIELDS})

    def for_field(self, name: str) -> FieldBounds:
        """Return the bounds for field ``name`` (one of ``OHLCV_FIELDS``)."""
        if name not in OHLCV_FIELDS:
            raise KeyError(f"Unknown OHLCV field '{name}'.")
        return getattr(self, name)
