"""
Sliding-window supervised examples for next-day close prediction.

How it works
------------
For a history of ``L`` observations and a window of ``W`` days, each start
index ``i`` in ``0 .. L - W - 1`` yields one example:

  input  = flatten(data[i : i + W])     — 5 * W normalized floats
  target = normalize(data[i + W].close) — the day right after the window

Flattening emits each day's fields in ``OHLCV_FIELDS`` order
(open, high, low, close, volume), days oldest first.  The rolling forecaster
uses the same ``flatten_window`` so training and inference inputs line up.

Exactly ``L - W`` examples are produced, in start-index order.  When
``L < W + 1`` there is no complete (window, next day) pair and an empty list
is returned; the caller decides whether that is an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from stock_forecaster.features.scaling import normalize_field
from stock_forecaster.models.observation import OHLCV_FIELDS, Observation, ScalingBounds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingExample:
    """One supervised pair: a flattened window and the next day's close.

    Attributes:
        input:  ``5 * window_size`` normalized values, oldest day first.
        target: Normalized close of the day following the window.
    """

    input: tuple[float, ...]
    target: float


def flatten_window(
    window: Iterable[Observation],
    bounds: ScalingBounds,
) -> list[float]:
    """Flatten observations into one normalized input vector.

    Args:
        window: Observations, oldest first.
        bounds: Scaling table applied to every field.

    Returns:
        ``5 * len(window)`` floats in ``OHLCV_FIELDS`` order per day.
    """
    field_bounds = [bounds.for_field(name) for name in OHLCV_FIELDS]
    vector: list[float] = []
    for obs in window:
        for name, fb in zip(OHLCV_FIELDS, field_bounds):
            vector.append(normalize_field(getattr(obs, name), fb))
    return vector


def build_training_examples(
    observations: Sequence[Observation],
    window_size: int,
    bounds: ScalingBounds,
) -> list[TrainingExample]:
    """Slide a ``window_size`` window across ``observations``.

    Args:
        observations: Chronological history.
        window_size:  Days per input window (``W``).
        bounds:       Scaling table, normally computed from ``observations``.

    Returns:
        ``max(0, L - W)`` examples in start-index order.

    Raises:
        ValueError: If ``window_size < 1``.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}.")

    n = len(observations)
    if n < window_size + 1:
        logger.warning(
            "Not enough observations (%d) for window_size=%d; no training examples built.",
            n, window_size,
        )
        return []

    close_bounds = bounds.close
    examples: list[TrainingExample] = []
    for i in range(n - window_size):
        window = observations[i : i + window_size]
        target = normalize_field(observations[i + window_size].close, close_bounds)
        examples.append(
            TrainingExample(input=tuple(flatten_window(window, bounds)), target=target)
        )

    logger.debug(
        "Built %d training examples (window_size=%d, input width=%d)",
        len(examples), window_size, window_size * len(OHLCV_FIELDS),
    )
    return examples
