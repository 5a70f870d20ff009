"""
LightGBM-based next-close regressor.

Model choice
------------
Gradient-boosted trees are a drop-in alternative to the feed-forward
network: no feature scaling assumptions, fast on the few hundred rows a
single symbol's history provides, and deterministic for a fixed seed.

Trees cannot extrapolate.  A boosted model never predicts a normalized
close outside the range of training targets, so rolling forecasts from
this regressor stay inside the historical close range.

Validation split
----------------
When ``validation_fraction > 0`` the LAST fraction of examples (by start
index, i.e. the most recent windows) is held out for early stopping.
NEVER random — random splits on time-series data allow the model to peek
into the future.  Splits that would leave fewer than two rows on either
side are skipped and the model trains on everything.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Sequence

from stock_forecaster.ml.regressor import examples_to_arrays

logger = logging.getLogger(__name__)


class LightGBMRegressor:
    """LightGBM booster behind the ``Regressor`` protocol.

    Attributes:
        slug: ``"lightgbm"``.
    """

    slug = "lightgbm"

    def __init__(
        self,
        num_leaves: int = 15,
        learning_rate: float = 0.05,
        n_estimators: int = 200,
        min_child_samples: int = 3,
        feature_fraction: float = 1.0,
        validation_fraction: float = 0.2,
        early_stopping_rounds: int = 20,
        random_state: int = 42,
    ) -> None:
        self._hyperparams: dict[str, Any] = {
            "num_leaves":          num_leaves,
            "learning_rate":       learning_rate,
            "n_estimators":        n_estimators,
            "min_child_samples":   min_child_samples,
            "feature_fraction":    feature_fraction,
            "validation_fraction": validation_fraction,
            "early_stopping_rounds": early_stopping_rounds,
            "random_state":        random_state,
        }
        self._val_metrics: dict[str, float] = {}

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def hyperparameters(self) -> dict[str, Any]:
        return dict(self._hyperparams)

    @property
    def val_metrics(self) -> dict[str, float]:
        """Validation-set metrics from the most recent train() call."""
        return dict(self._val_metrics)

    # ── Training ──────────────────────────────────────────────────────────────

    def train(
        self,
        examples: Sequence,
        hyperparameters: Optional[Mapping[str, Any]] = None,
    ):
        """Fit a booster on ``examples``.

        Args:
            examples:        ``TrainingExample`` sequence (non-empty).
            hyperparameters: Per-call overrides of the constructor values.

        Returns:
            The fitted ``lightgbm.Booster``.

        Raises:
            ValueError: If ``examples`` is empty.
        """
        import lightgbm as lgb

        params = {**self._hyperparams, **(hyperparameters or {})}
        X, y = examples_to_arrays(examples)

        n_val = int(len(y) * params["validation_fraction"])
        if n_val < 2 or len(y) - n_val < 2:
            n_val = 0

        X_train, y_train = (X[:-n_val], y[:-n_val]) if n_val else (X, y)
        X_val, y_val     = (X[-n_val:], y[-n_val:]) if n_val else (None, None)

        lgb_params = {
            "objective":         "regression",
            "metric":            "l2",
            "num_leaves":        params["num_leaves"],
            "learning_rate":     params["learning_rate"],
            "feature_fraction":  params["feature_fraction"],
            "min_child_samples": params["min_child_samples"],
            "min_data_in_bin":   1,
            "seed":              params["random_state"],
            "deterministic":     True,
            "verbose":           -1,
            "n_jobs":            1,
        }

        dtrain = lgb.Dataset(X_train, label=y_train, free_raw_data=False)

        callbacks = [lgb.log_evaluation(period=-1)]
        valid_sets  = [dtrain]
        valid_names = ["train"]

        if n_val:
            dval = lgb.Dataset(X_val, label=y_val, reference=dtrain, free_raw_data=False)
            valid_sets  = [dtrain, dval]
            valid_names = ["train", "val"]
            callbacks.append(
                lgb.early_stopping(
                    stopping_rounds=params["early_stopping_rounds"],
                    verbose=False,
                )
            )

        booster = lgb.train(
            lgb_params,
            dtrain,
            num_boost_round=params["n_estimators"],
            valid_sets=valid_sets,
            valid_names=valid_names,
            callbacks=callbacks,
        )

        self._val_metrics = self._evaluate(booster, X_val, y_val) if n_val else {}

        logger.info(
            "LightGBM trained: train_rows=%d val_rows=%d best_iteration=%s val=%s",
            len(y_train), n_val, booster.best_iteration or params["n_estimators"],
            self._val_metrics or "n/a",
        )
        return booster

    # ── Inference ─────────────────────────────────────────────────────────────

    def run(self, state, inputs: Sequence[float]) -> list[float]:
        """Predict one normalized value for ``inputs``."""
        import numpy as np

        X = np.asarray([list(inputs)], dtype=np.float64)
        best = state.best_iteration or None
        return [float(state.predict(X, num_iteration=best)[0])]

    # ── Evaluation ────────────────────────────────────────────────────────────

    @staticmethod
    def _evaluate(booster, X, y) -> dict[str, float]:
        """Compute MAE and RMSE on a held-out matrix."""
        preds = booster.predict(X, num_iteration=booster.best_iteration or None)
        n = len(y)
        if n == 0:
            return {}
        mae_sum = rmse_sum = 0.0
        for actual, pred in zip(y, preds):
            err = float(actual) - float(pred)
            mae_sum  += abs(err)
            rmse_sum += err * err
        return {
            "mae":   mae_sum / n,
            "rmse":  math.sqrt(rmse_sum / n),
            "n_val": float(n),
        }
