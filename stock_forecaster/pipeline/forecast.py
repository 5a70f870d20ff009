"""
ForecastStage — load history, train, roll forward, export, per symbol.

Flow
----
For each symbol:
  1. Load history from the configured source (Twelve Data, CSV, fixture).
  2. run_symbol_forecast(): precondition check, fresh bounds, fresh
     model, rolling forecast.
  3. Export history + predictions to ``config.data.output_dir`` as CSV and
     JSON (unless ``export=False``).

Symbols are independent: a failure for one symbol is logged and recorded in
``stage.failures`` and the loop moves on.  If every symbol fails, the last
error is re-raised so the run is marked ``failed``.

Returns the number of predicted rows produced across all symbols.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from stock_forecaster.ml.regressor import Regressor
from stock_forecaster.models.forecast import ForecastResult
from stock_forecaster.models.meta import RunMetadata
from stock_forecaster.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class ForecastStage(PipelineStage):
    """Produce rolling forecasts for one or more symbols.

    Attributes:
        results:  ``ForecastResult`` per successfully processed symbol.
        failures: Symbol -> error message for symbols that failed.
        exported: Files written by the most recent run.
    """

    stage_name = "forecast"

    def __init__(self, config, regressor: Optional[Regressor] = None) -> None:
        super().__init__(config)
        self._regressor = regressor
        self.results: list[ForecastResult] = []
        self.failures: dict[str, str] = {}
        self.exported: list[Path] = []

    def _execute(
        self,
        run: RunMetadata,
        symbols: list[str] | None = None,
        csv_path: Path | None = None,
        window_size: int | None = None,
        num_days_to_predict: int | None = None,
        export: bool = True,
        **kwargs,
    ) -> int:
        """Forecast every requested symbol.

        Args:
            run:                 In-progress RunMetadata (mutable).
            symbols:             Tickers; defaults to ``config.forecast.default_symbols``.
            csv_path:            Read history from this CSV instead of the
                                 configured source.  A CSV holds one
                                 symbol, so at most one symbol may be given.
            window_size:         Override for ``config.forecast.window_size``.
            num_days_to_predict: Override for ``config.forecast.num_days_to_predict``.
            export:              Write CSV/JSON outputs.

        Returns:
            Total predicted rows across all symbols.

        Raises:
            ValueError: ``csv_path`` given together with more than one symbol.
        """
        from stock_forecaster.ingestion.sources import load_history, resolve_source
        from stock_forecaster.ml.predictor import run_symbol_forecast
        from stock_forecaster.reporting.export import export_forecast_result

        targets = [s.upper() for s in (symbols or self.config.forecast.default_symbols)]
        if csv_path is not None and len(targets) > 1:
            raise ValueError(
                f"csv_path holds a single symbol's history; got {len(targets)} symbols "
                f"({', '.join(targets)}). Pass one symbol with a CSV."
            )
        run.symbols = targets
        output_dir = Path(self.config.data.output_dir)
        data_source = resolve_source(self.config, csv_path=csv_path)

        self.results = []
        self.failures = {}
        self.exported = []
        last_error: Exception | None = None

        for symbol in targets:
            try:
                history = load_history(self.config, symbol, csv_path=csv_path)
                result = run_symbol_forecast(
                    self.config,
                    symbol,
                    history,
                    regressor=self._regressor,
                    window_size=window_size,
                    num_days_to_predict=num_days_to_predict,
                    data_source=data_source,
                )
            except Exception as exc:
                logger.error("Forecast failed for symbol=%s: %s", symbol, exc)
                self.failures[symbol] = str(exc)
                last_error = exc
                continue

            self.results.append(result)
            if export:
                self.exported.extend(export_forecast_result(result, output_dir))

        if not self.results and last_error is not None:
            raise last_error

        total = sum(len(r.predictions) for r in self.results)
        logger.info(
            "ForecastStage complete: %d predicted rows across %d/%d symbol(s).",
            total, len(self.results), len(targets),
        )
        return total
