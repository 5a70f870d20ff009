"""
Root logger setup for CLI runs.

``configure_logging(config.logging)`` is called once by each CLI command
before it loads history or trains anything.  Library modules only ever do
``logger = logging.getLogger(__name__)``.

Two output styles, chosen by ``[logging] json_format``:

  text  2024-06-03T14:00:00Z [INFO] stock_forecaster.ml.predictor: Forecast complete: ...
  json  {"time": "2024-06-03T14:00:00Z", "level": "INFO", "logger": "...",
         "message": "...", "extra": {"symbol": "AAPL"}}

Timestamps are UTC in both styles.  Python warnings (scikit-learn
convergence notices and the like) are routed through the ``py.warnings``
logger so they land in the log file next to the training lines.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stock_forecaster.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Chatty at INFO: one line per HTTP request, per boosting round.
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "lightgbm")

_RECORD_BUILTINS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime",
}


class ForecastJsonFormatter(logging.Formatter):
    """One JSON object per record.

    Anything passed through ``extra=`` (``symbol``, ``regressor``...) is
    collected under an ``"extra"`` key rather than mixed into the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = {
            key: val
            for key, val in vars(record).items()
            if key not in _RECORD_BUILTINS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return ForecastJsonFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def _attach(handler: logging.Handler, formatter: logging.Formatter, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Point the root logger at stdout and, if configured, a log file.

    Args:
        config: ``AppConfig.logging``.  An empty ``log_file`` disables the
                file handler; its parent directory is created otherwise.
    """
    level = logging.getLevelName(config.level)
    if not isinstance(level, int):
        level = logging.INFO
    formatter = _build_formatter(config.json_format)

    handlers = [_attach(logging.StreamHandler(sys.stdout), formatter, level)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_attach(logging.FileHandler(path, encoding="utf-8"), formatter, level))

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
