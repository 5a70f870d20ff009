"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``STOCK_FORECASTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The Twelve Data API key is NOT part of ``AppConfig``; it is read from
``TWELVE_DATA_API_KEY`` (usually set in ``.env``) by ``ingestion.sources``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

VALID_SOURCES = frozenset({"twelvedata", "csv", "fixture"})
VALID_REGRESSORS = frozenset({"mlp", "lightgbm", "ridge"})

# ── Sub-config models ─────────────────────────────────────────────────────────


class DataConfig(BaseModel):
    """Where historical observations come from and where outputs go."""

    model_config = ConfigDict(frozen=True)

    source: str = "twelvedata"
    csv_path: Optional[str] = None
    output_dir: str = "data/outputs"
    outputsize: int = 100
    request_timeout_s: float = 30.0

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_SOURCES:
            raise ValueError(f"Unknown data source '{v}'. Must be one of {sorted(VALID_SOURCES)}.")
        return v

    @field_validator("outputsize")
    @classmethod
    def validate_outputsize(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"outputsize must be >= 1, got {v}.")
        return v


class ForecastConfig(BaseModel):
    """Rolling forecast shape."""

    model_config = ConfigDict(frozen=True)

    window_size: int = 5
    num_days_to_predict: int = 5
    default_symbols: list[str] = ["AAPL"]

    @field_validator("window_size", "num_days_to_predict")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Window size and forecast horizon must be >= 1, got {v}.")
        return v

    @field_validator("default_symbols")
    @classmethod
    def validate_symbols(cls, v: list[str]) -> list[str]:
        return [s.strip().upper() for s in v if s.strip()]

    @property
    def min_history(self) -> int:
        """Smallest history length a forecast run accepts."""
        return self.window_size + self.num_days_to_predict


class ModelConfig(BaseModel):
    """Regressor selection and hyperparameters.

    ``iterations``, ``error_thresh``, ``learning_rate`` and ``hidden_layers``
    drive the feed-forward network; the ``lgbm_*`` knobs drive LightGBM and
    ``ridge_alpha`` the linear model. An empty ``hidden_layers`` list means
    one hidden layer of ``max(3, n_inputs // 2)`` units.
    """

    model_config = ConfigDict(frozen=True)

    regressor: str = "mlp"
    iterations: int = 2000
    error_thresh: float = 0.005
    learning_rate: float = 0.01
    hidden_layers: list[int] = []
    random_state: int = 42

    lgbm_num_leaves: int = 15
    lgbm_learning_rate: float = 0.05
    lgbm_n_estimators: int = 200
    lgbm_min_child_samples: int = 3
    lgbm_validation_fraction: float = 0.2

    ridge_alpha: float = 1.0

    @field_validator("regressor")
    @classmethod
    def validate_regressor(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_REGRESSORS:
            raise ValueError(f"Unknown regressor '{v}'. Must be one of {sorted(VALID_REGRESSORS)}.")
        return v

    @field_validator("iterations")
    @classmethod
    def validate_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"iterations must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/forecaster.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Pipeline stages and CLI commands receive an ``AppConfig`` instance.
    It is constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    data: DataConfig = DataConfig()
    forecast: ForecastConfig = ForecastConfig()
    model: ModelConfig = ModelConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply STOCK_FORECASTER_* env vars to the raw config dict.

    Supported overrides:
      STOCK_FORECASTER_DATA_SOURCE → raw["data"]["source"]
      STOCK_FORECASTER_REGRESSOR   → raw["model"]["regressor"]
      STOCK_FORECASTER_LOG_LEVEL   → raw["logging"]["level"]
      STOCK_FORECASTER_DEBUG       → raw["debug"]
    """
    if source := os.environ.get("STOCK_FORECASTER_DATA_SOURCE"):
        raw.setdefault("data", {})["source"] = source

    if regressor := os.environ.get("STOCK_FORECASTER_REGRESSOR"):
        raw.setdefault("model", {})["regressor"] = regressor

    if log_level := os.environ.get("STOCK_FORECASTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("STOCK_FORECASTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        data=DataConfig(**raw.get("data", {})),
        forecast=ForecastConfig(**raw.get("forecast", {})),
        model=ModelConfig(**raw.get("model", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
