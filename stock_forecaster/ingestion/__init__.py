"""
Ingestion layer — historical OHLCV sources.

Submodules:
  twelvedata_client — Twelve Data ``time_series`` client (live + fixture mode)
  csv_loader        — CSV import / export of daily bars
  sources           — load_history(): picks a source from config

Credential placement (.env, gitignored):
  TWELVE_DATA_API_KEY — Twelve Data API key
"""
