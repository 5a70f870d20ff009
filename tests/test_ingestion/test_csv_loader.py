"""Tests for stock_forecaster.ingestion.csv_loader."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from stock_forecaster.ingestion.csv_loader import parse_observation_csv, write_observation_csv

_HEADER = "date,open,high,low,close,volume\n"


def _write(tmp_path: Path, body: str, header: str = _HEADER) -> Path:
    path = tmp_path / "history.csv"
    path.write_text(header + body, encoding="utf-8")
    return path


# ── parse_observation_csv ─────────────────────────────────────────────────────

class TestParseObservationCsv:
    def test_valid_rows(self, tmp_path):
        path = _write(
            tmp_path,
            "2024-01-02,187.1,188.4,183.8,185.6,820\n"
            "2024-01-03,184.2,185.8,183.4,184.2,580\n",
        )
        obs = parse_observation_csv(path)
        assert len(obs) == 2
        assert obs[0].date == date(2024, 1, 2)
        assert obs[1].close == pytest.approx(184.2)

    def test_empty_volume_is_zero(self, tmp_path):
        path = _write(tmp_path, "2024-01-02,1.1,1.2,1.0,1.15,\n")
        assert parse_observation_csv(path)[0].volume == 0.0

    def test_extra_columns_and_header_case(self, tmp_path):
        path = _write(
            tmp_path,
            "2024-01-02,1,2,0.5,1.5,10,1.49\n",
            header="Date,Open,High,Low,Close,Volume,Adj_Close\n",
        )
        obs = parse_observation_csv(path)
        assert obs[0].high == 2.0

    def test_header_only_returns_empty(self, tmp_path):
        assert parse_observation_csv(_write(tmp_path, "")) == []

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_observation_csv(tmp_path / "nope.csv")

    def test_missing_columns_raise(self, tmp_path):
        path = _write(tmp_path, "2024-01-02,1,2\n", header="date,open,high\n")
        with pytest.raises(ValueError, match="missing required columns"):
            parse_observation_csv(path)

    def test_bad_number_reports_row(self, tmp_path):
        path = _write(
            tmp_path,
            "2024-01-02,1,2,0.5,1.5,10\n"
            "2024-01-03,1,abc,0.5,1.5,10\n",
        )
        with pytest.raises(ValueError, match="Row 3"):
            parse_observation_csv(path)

    def test_non_increasing_dates_rejected(self, tmp_path):
        path = _write(
            tmp_path,
            "2024-01-03,1,2,0.5,1.5,10\n"
            "2024-01-02,1,2,0.5,1.5,10\n",
        )
        with pytest.raises(ValueError, match="not after previous date"):
            parse_observation_csv(path)

    def test_bad_date_rejected(self, tmp_path):
        path = _write(tmp_path, "02/01/2024,1,2,0.5,1.5,10\n")
        with pytest.raises(ValueError, match="1 row"):
            parse_observation_csv(path)


# ── write_observation_csv ─────────────────────────────────────────────────────

class TestWriteObservationCsv:
    def test_written_file_reads_back(self, tmp_path, sample_history):
        path = write_observation_csv(sample_history, tmp_path / "sub" / "out.csv")
        assert path.exists()
        assert parse_observation_csv(path) == sample_history

    def test_header(self, tmp_path, sample_history):
        path = write_observation_csv(sample_history[:1], tmp_path / "out.csv")
        assert path.read_text(encoding="utf-8").splitlines()[0] == "date,open,high,low,close,volume"
