"""
Min/max scaling table for OHLCV fields.

Every numeric field is scaled independently into ``[0, 1]`` using the
minimum and maximum observed over the history being modelled::

    normalized = (value - min) / (max - min)

Degenerate fields
-----------------
When a field is constant over the window (``min == max``) there is no range
to scale by.  ``normalize_value`` returns the midpoint ``0.5`` for any input
in that case instead of dividing by zero.  ``denormalize_value`` is left as
the plain inverse formula, so a degenerate field always decodes to ``min``.

Empty input
-----------
``compute_scaling_bounds([])`` returns ``{min: 0, max: 1}`` for every field
so that downstream code never sees an undefined table.
"""

from __future__ import annotations

from typing import Sequence

from stock_forecaster.models.observation import (
    OHLCV_FIELDS,
    FieldBounds,
    Observation,
    ScalingBounds,
)


def compute_scaling_bounds(observations: Sequence[Observation]) -> ScalingBounds:
    """Compute per-field min/max bounds over ``observations``.

    Args:
        observations: Historical observations (any order).

    Returns:
        ``ScalingBounds`` with ``min <= max`` for every field, or unit bounds
        for an empty sequence.
    """
    if not observations:
        return ScalingBounds.unit()

    bounds: dict[str, FieldBounds] = {}
    for name in OHLCV_FIELDS:
        values = [getattr(obs, name) for obs in observations]
        bounds[name] = FieldBounds(min=min(values), max=max(values))
    return ScalingBounds(**bounds)


def normalize_value(value: float, min_value: float, max_value: float) -> float:
    """Scale ``value`` into ``[0, 1]`` relative to ``[min_value, max_value]``.

    Returns ``0.5`` when ``min_value == max_value``.  Values outside the
    interval map outside ``[0, 1]``; they are not clipped.
    """
    if max_value == min_value:
        return 0.5
    return (value - min_value) / (max_value - min_value)


def denormalize_value(normalized: float, min_value: float, max_value: float) -> float:
    """Inverse of ``normalize_value`` for a non-degenerate interval."""
    return normalized * (max_value - min_value) + min_value


def normalize_field(value: float, bounds: FieldBounds) -> float:
    """``normalize_value`` against a ``FieldBounds`` pair."""
    return normalize_value(value, bounds.min, bounds.max)


def denormalize_field(normalized: float, bounds: FieldBounds) -> float:
    """``denormalize_value`` against a ``FieldBounds`` pair."""
    return denormalize_value(normalized, bounds.min, bounds.max)
