"""
FetchStage — download daily history for a symbol and save it as CSV.

The saved file is in the format ``ingestion.csv_loader`` reads, so a
fetched history can be replayed offline with ``forecast --csv``.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from stock_forecaster.models.meta import RunMetadata
from stock_forecaster.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class FetchStage(PipelineStage):
    """Fetch history for one symbol and write it to disk.

    Attributes:
        written: Path of the CSV written by the most recent run.
    """

    stage_name = "fetch"

    def __init__(self, config) -> None:
        super().__init__(config)
        self.written: Path | None = None

    def _execute(
        self,
        run: RunMetadata,
        symbol: str = "",
        output_path: Path | None = None,
        **kwargs,
    ) -> int:
        """Fetch ``symbol`` and write ``output_path``.

        Defaults the path to ``<output_dir>/history_<SYMBOL>_<date>.csv``.

        Returns:
            Number of observations written.

        Raises:
            ValueError: If ``symbol`` is empty.
        """
        from stock_forecaster.ingestion.csv_loader import write_observation_csv
        from stock_forecaster.ingestion.sources import load_history

        if not symbol.strip():
            raise ValueError("FetchStage requires a symbol.")

        symbol = symbol.strip().upper()
        run.symbols = [symbol]
        history = load_history(self.config, symbol)

        path = output_path or (
            Path(self.config.data.output_dir)
            / f"history_{symbol}_{date.today().isoformat()}.csv"
        )
        self.written = write_observation_csv(history, path)
        return len(history)
