"""
Feed-forward neural network regressor (scikit-learn ``MLPRegressor``).

Training strategy
-----------------
A small fully-connected network with sigmoid (``logistic``) hidden units
and a linear output.  Inputs are already min/max scaled, so no further
preprocessing is applied.

Training runs one epoch at a time through ``partial_fit`` and stops when
either:

  - the training mean squared error drops below ``error_thresh``, or
  - ``iterations`` epochs have run.

This is the "train until the error threshold or the iteration cap" rule;
scikit-learn's own ``tol`` / ``n_iter_no_change`` early stopping is a
different criterion and is not used.

Hidden layers
-------------
When ``hidden_layers`` is not given, one hidden layer of
``max(3, n_inputs // 2)`` units is used.  For the default 5-day window
(25 inputs) that is 12 units.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from stock_forecaster.ml.regressor import examples_to_arrays

logger = logging.getLogger(__name__)


class FeedForwardRegressor:
    """scikit-learn MLP behind the ``Regressor`` protocol.

    Attributes:
        slug: ``"mlp"``.
    """

    slug = "mlp"

    def __init__(
        self,
        hidden_layers: Optional[list[int]] = None,
        iterations: int = 2000,
        error_thresh: float = 0.005,
        learning_rate: float = 0.01,
        random_state: int = 42,
    ) -> None:
        self._hyperparams: dict[str, Any] = {
            "hidden_layers": list(hidden_layers) if hidden_layers else None,
            "iterations":    iterations,
            "error_thresh":  error_thresh,
            "learning_rate": learning_rate,
            "random_state":  random_state,
        }
        self._last_epochs: int = 0

    @property
    def hyperparameters(self) -> dict[str, Any]:
        return dict(self._hyperparams)

    @property
    def last_epochs(self) -> int:
        """Epochs run by the most recent train() call (0 before any training)."""
        return self._last_epochs

    def train(
        self,
        examples: Sequence,
        hyperparameters: Optional[Mapping[str, Any]] = None,
    ):
        """Fit a fresh network on ``examples``.

        Args:
            examples:        ``TrainingExample`` sequence (non-empty).
            hyperparameters: Per-call overrides of the constructor values.

        Returns:
            The fitted ``sklearn.neural_network.MLPRegressor``.

        Raises:
            ValueError: If ``examples`` is empty.
        """
        import numpy as np
        from sklearn.neural_network import MLPRegressor

        params = {**self._hyperparams, **(hyperparameters or {})}
        X, y = examples_to_arrays(examples)

        hidden = params["hidden_layers"] or [max(3, X.shape[1] // 2)]
        net = MLPRegressor(
            hidden_layer_sizes=tuple(hidden),
            activation="logistic",
            solver="adam",
            learning_rate_init=params["learning_rate"],
            random_state=params["random_state"],
        )

        mse = float("inf")
        epochs = 0
        for epochs in range(1, params["iterations"] + 1):
            net.partial_fit(X, y)
            mse = float(np.mean((net.predict(X) - y) ** 2))
            if mse < params["error_thresh"]:
                break
        self._last_epochs = epochs

        logger.info(
            "MLP trained: examples=%d inputs=%d hidden=%s epochs=%d train_mse=%.6f",
            len(y), X.shape[1], hidden, epochs, mse,
        )
        return net

    def run(self, state, inputs: Sequence[float]) -> list[float]:
        """Predict one normalized value for ``inputs``."""
        import numpy as np

        X = np.asarray([list(inputs)], dtype=np.float64)
        return [float(state.predict(X)[0])]
