"""Reporting — file exports and terminal formatting of forecast results.

Modules
-------
export     — CSV / JSON writers; forecast_records_for_export(); export_forecast_result()
formatters — ASCII report blocks for the CLI
"""
