"""
Regressor capability used by the trainer and the rolling forecaster.

The core never depends on a particular learning algorithm.  Anything that
implements the two-method ``Regressor`` protocol can be plugged in:

  train(examples, hyperparameters) -> state   — opaque fitted state
  run(state, inputs)               -> [y]      — one normalized output

``TrainedModel`` binds the opaque state to the regressor that produced it,
so the forecaster receives a single object and never reaches for a global
model handle.  Regressors are selected from config by ``build_regressor()``
or passed in directly.

Implementations
---------------
mlp_model   : FeedForwardRegressor — scikit-learn MLP (default, ``"mlp"``)
lgbm_model  : LightGBMRegressor    — gradient-boosted trees (``"lightgbm"``)
ridge_model : RidgeRegressor       — L2-regularised linear model (``"ridge"``)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence, runtime_checkable

from stock_forecaster.utils.time_utils import utcnow

if TYPE_CHECKING:
    from stock_forecaster.config import ModelConfig
    from stock_forecaster.features.windowing import TrainingExample


@runtime_checkable
class Regressor(Protocol):
    """Supervised regression capability over flattened normalized windows."""

    slug: str

    def train(
        self,
        examples: Sequence["TrainingExample"],
        hyperparameters: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Fit on ``examples`` and return opaque model state."""
        ...

    def run(self, state: Any, inputs: Sequence[float]) -> list[float]:
        """Predict one normalized value for ``inputs``; returns a 1-element list."""
        ...


@dataclass(frozen=True)
class TrainedModel:
    """A regressor together with the state it produced.

    Attributes:
        regressor:  Regressor that trained ``state`` and knows how to run it.
        state:      Opaque fitted state (``None`` means untrained).
        input_size: Width of the input vectors the state was fitted on.
        n_examples: Number of training examples used.
        trained_at: UTC timestamp of training.
    """

    regressor: Regressor
    state: Any
    input_size: int
    n_examples: int
    trained_at: datetime = field(default_factory=utcnow)

    @property
    def is_fitted(self) -> bool:
        """True if the regressor produced usable state."""
        return self.state is not None

    def run(self, inputs: Sequence[float]) -> list[float]:
        """Run the bound regressor on one input vector."""
        return self.regressor.run(self.state, inputs)


def examples_to_arrays(examples: Sequence["TrainingExample"]):
    """Stack examples into ``(X, y)`` float64 numpy arrays.

    Raises:
        ValueError: If ``examples`` is empty or input widths differ.
    """
    import numpy as np

    if not examples:
        raise ValueError("Cannot train a regressor on zero training examples.")

    width = len(examples[0].input)
    if any(len(ex.input) != width for ex in examples):
        raise ValueError("All training examples must have the same input width.")

    X = np.array([ex.input for ex in examples], dtype=np.float64)
    y = np.array([ex.target for ex in examples], dtype=np.float64)
    return X, y


def build_regressor(config: "ModelConfig") -> Regressor:
    """Construct the regressor named by ``config.regressor``.

    Args:
        config: ``AppConfig.model`` section.

    Returns:
        A fresh, untrained regressor instance.

    Raises:
        ValueError: If the slug is unknown.
    """
    slug = config.regressor

    if slug == "mlp":
        from stock_forecaster.ml.mlp_model import FeedForwardRegressor

        return FeedForwardRegressor(
            hidden_layers=list(config.hidden_layers) or None,
            iterations=config.iterations,
            error_thresh=config.error_thresh,
            learning_rate=config.learning_rate,
            random_state=config.random_state,
        )

    if slug == "lightgbm":
        from stock_forecaster.ml.lgbm_model import LightGBMRegressor

        return LightGBMRegressor(
            num_leaves=config.lgbm_num_leaves,
            learning_rate=config.lgbm_learning_rate,
            n_estimators=config.lgbm_n_estimators,
            min_child_samples=config.lgbm_min_child_samples,
            validation_fraction=config.lgbm_validation_fraction,
            random_state=config.random_state,
        )

    if slug == "ridge":
        from stock_forecaster.ml.ridge_model import RidgeRegressor

        return RidgeRegressor(alpha=config.ridge_alpha)

    raise ValueError(f"Unknown regressor '{slug}'.")
