"""
End-to-end forecast for one symbol: history in, ``ForecastResult`` out.

Flow
----
1. Check the history covers ``window_size + num_days_to_predict`` days.
2. Train a fresh model (new bounds, new examples) on the full history.
3. Seed the rolling forecaster with the last ``window_size`` real days.
4. Package history + predictions into a ``ForecastResult``.

Nothing is cached between calls.  Separate symbols share no state, so
callers can run them one after another (or in separate workers) freely.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from stock_forecaster.config import AppConfig
from stock_forecaster.ml.forecaster import forecast
from stock_forecaster.ml.regressor import Regressor, build_regressor
from stock_forecaster.ml.trainer import require_sufficient_history, train_forecast_model
from stock_forecaster.models.forecast import ForecastResult
from stock_forecaster.models.observation import Observation
from stock_forecaster.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def run_symbol_forecast(
    config: AppConfig,
    symbol: str,
    observations: Sequence[Observation],
    regressor: Optional[Regressor] = None,
    window_size: Optional[int] = None,
    num_days_to_predict: Optional[int] = None,
    data_source: str = "unknown",
) -> ForecastResult:
    """Train on ``observations`` and roll the model forward.

    Args:
        config:              Application config (forecast shape + model).
        symbol:              Ticker the history belongs to.
        observations:        Chronological history.
        regressor:           Regressor to use; built from ``config.model``
                             when omitted.
        window_size:         Override for ``config.forecast.window_size``.
        num_days_to_predict: Override for ``config.forecast.num_days_to_predict``.
        data_source:         Source label recorded on the result (see
                             ``ingestion.sources.resolve_source``).

    Returns:
        ``ForecastResult`` for ``symbol``.

    Raises:
        ValueError:               ``window_size`` or ``num_days_to_predict``
                                  is below 1.
        InsufficientHistoryError: History shorter than ``W + N``.
    """
    w = window_size if window_size is not None else config.forecast.window_size
    n = num_days_to_predict if num_days_to_predict is not None else config.forecast.num_days_to_predict
    if w < 1:
        raise ValueError(f"window_size must be >= 1, got {w}.")
    if n < 1:
        raise ValueError(f"num_days_to_predict must be >= 1, got {n}.")

    require_sufficient_history(len(observations), w, n)

    if regressor is None:
        regressor = build_regressor(config.model)

    history = list(observations)
    outcome = train_forecast_model(history, w, n, regressor)

    predictions = forecast(
        outcome.model,
        history[-w:],
        outcome.bounds,
        window_size=w,
        num_days_to_predict=n,
    )

    logger.info(
        "Forecast complete: symbol=%s regressor=%s last_close=%.4f -> %s",
        symbol, regressor.slug, history[-1].close,
        ", ".join(f"{p.date}:{p.close:.2f}" for p in predictions),
    )

    return ForecastResult(
        symbol=symbol,
        window_size=w,
        num_days_to_predict=n,
        regressor_slug=regressor.slug,
        history=history,
        predictions=predictions,
        bounds=outcome.bounds,
        n_training_examples=outcome.n_examples,
        generated_at=utcnow(),
        data_source=data_source,
    )
