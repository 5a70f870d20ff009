"""Ridge (L2-regularised linear) regressor — the cheapest substitutable baseline."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from stock_forecaster.ml.regressor import examples_to_arrays

logger = logging.getLogger(__name__)


class RidgeRegressor:
    """scikit-learn ``Ridge`` behind the ``Regressor`` protocol."""

    slug = "ridge"

    def __init__(self, alpha: float = 1.0) -> None:
        self.alpha = alpha

    def train(
        self,
        examples: Sequence,
        hyperparameters: Optional[Mapping[str, Any]] = None,
    ):
        from sklearn.linear_model import Ridge

        alpha = (hyperparameters or {}).get("alpha", self.alpha)
        X, y = examples_to_arrays(examples)
        model = Ridge(alpha=alpha)
        model.fit(X, y)
        logger.info("Ridge trained: examples=%d inputs=%d alpha=%s", len(y), X.shape[1], alpha)
        return model

    def run(self, state, inputs: Sequence[float]) -> list[float]:
        import numpy as np

        X = np.asarray([list(inputs)], dtype=np.float64)
        return [float(state.predict(X)[0])]
