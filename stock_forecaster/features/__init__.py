"""Feature preparation for the rolling forecaster.

Modules
-------
scaling   — per-field min/max bounds, normalize / denormalize
windowing — TrainingExample + sliding-window example builder + flatten_window
"""
