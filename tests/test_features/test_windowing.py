"""
Tests for stock_forecaster/features/windowing.py.

What we test
------------
build_training_examples():
  - Produces exactly L - W examples in start-index order.
  - Each input holds 5 * W values; each target is the next day's close.
  - Fields are flattened open, high, low, close, volume, oldest day first.
  - L <= W yields an empty list; window_size < 1 raises ValueError.

flatten_window():
  - Uses the same ordering and scaling as the training inputs.
"""

from __future__ import annotations

import pytest

from stock_forecaster.features.scaling import compute_scaling_bounds, normalize_value
from stock_forecaster.features.windowing import build_training_examples, flatten_window


class TestBuildTrainingExamples:
    def test_example_count(self, make_history):
        history = make_history([100.0 + i for i in range(7)])
        bounds = compute_scaling_bounds(history)
        examples = build_training_examples(history, 3, bounds)
        assert len(examples) == 4

    def test_input_width(self, sample_history):
        bounds = compute_scaling_bounds(sample_history)
        examples = build_training_examples(sample_history, 5, bounds)
        assert all(len(ex.input) == 25 for ex in examples)

    def test_target_is_next_close(self, make_history):
        closes = [100.0, 101.0, 103.0, 102.0, 104.0, 100.0]
        history = make_history(closes)
        bounds = compute_scaling_bounds(history)
        examples = build_training_examples(history, 3, bounds)

        lo, hi = bounds.close.min, bounds.close.max
        assert [ex.target for ex in examples] == pytest.approx(
            [normalize_value(c, lo, hi) for c in closes[3:]]
        )

    def test_targets_within_unit_interval(self, sample_history):
        bounds = compute_scaling_bounds(sample_history)
        examples = build_training_examples(sample_history, 5, bounds)
        assert all(0.0 <= ex.target <= 1.0 for ex in examples)

    def test_field_order_within_a_day(self, make_history):
        history = make_history([100.0, 102.0, 104.0], volumes=[10.0, 20.0, 30.0])
        bounds = compute_scaling_bounds(history)
        first = build_training_examples(history, 1, bounds)[0]

        day0 = history[0]
        expected = [
            normalize_value(day0.open, bounds.open.min, bounds.open.max),
            normalize_value(day0.high, bounds.high.min, bounds.high.max),
            normalize_value(day0.low, bounds.low.min, bounds.low.max),
            normalize_value(day0.close, bounds.close.min, bounds.close.max),
            normalize_value(day0.volume, bounds.volume.min, bounds.volume.max),
        ]
        assert list(first.input) == pytest.approx(expected)

    def test_examples_in_start_index_order(self, make_history):
        history = make_history([100.0 + i for i in range(6)])
        bounds = compute_scaling_bounds(history)
        examples = build_training_examples(history, 2, bounds)
        # The close of the first day in each window rises with the start index.
        first_day_closes = [ex.input[3] for ex in examples]
        assert first_day_closes == sorted(first_day_closes)

    def test_history_equal_to_window_is_empty(self, make_history):
        history = make_history([100.0, 101.0, 102.0])
        bounds = compute_scaling_bounds(history)
        assert build_training_examples(history, 3, bounds) == []

    def test_history_shorter_than_window_is_empty(self, make_history):
        history = make_history([100.0, 101.0])
        bounds = compute_scaling_bounds(history)
        assert build_training_examples(history, 5, bounds) == []

    @pytest.mark.parametrize("window_size", [0, -2])
    def test_invalid_window_size_raises(self, sample_history, window_size):
        bounds = compute_scaling_bounds(sample_history)
        with pytest.raises(ValueError, match="window_size"):
            build_training_examples(sample_history, window_size, bounds)

    def test_degenerate_fields_encode_as_half(self, make_history):
        history = make_history([50.0] * 4, volumes=[7.0] * 4)
        bounds = compute_scaling_bounds(history)
        examples = build_training_examples(history, 2, bounds)
        assert all(v == 0.5 for ex in examples for v in ex.input)
        assert all(ex.target == 0.5 for ex in examples)


class TestFlattenWindow:
    def test_matches_training_input(self, sample_history):
        bounds = compute_scaling_bounds(sample_history)
        examples = build_training_examples(sample_history, 5, bounds)
        assert flatten_window(sample_history[2:7], bounds) == list(examples[2].input)

    def test_empty_window(self, sample_history):
        bounds = compute_scaling_bounds(sample_history)
        assert flatten_window([], bounds) == []
