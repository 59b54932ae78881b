"""
Rolling Stats Window Unit Tests.

Tests for FIFO eviction, percentile rules, and summary statistics.
"""

import math

import pytest

from stats import RollingStatsWindow


def window_of(values, capacity=None):
    window = RollingStatsWindow(capacity or max(len(values), 1))
    for v in values:
        window.record(v)
    return window


class TestCapacity:
    """Tests for the bounded FIFO behaviour."""

    @pytest.mark.parametrize("capacity", [0, -1, 1.5, True])
    def test_invalid_capacity_raises(self, capacity):
        """Test that a non-positive or non-integer capacity is rejected."""
        with pytest.raises(ValueError):
            RollingStatsWindow(capacity)

    @pytest.mark.parametrize("count", [0, 1, 3, 4, 5, 11])
    def test_length_and_retained_samples(self, count):
        """Test that the window keeps exactly the most recent samples."""
        window = RollingStatsWindow(4)
        for i in range(count):
            window.record(float(i))
        expected = [float(i) for i in range(count)][-4:]
        assert len(window) == min(4, count)
        assert window.values() == expected

    def test_capacity_one(self):
        window = window_of([1.0, 2.0, 3.0], capacity=1)
        assert window.values() == [3.0]
        assert window.last() == 3.0

    def test_values_is_a_copy(self):
        window = window_of([1.0, 2.0])
        window.values().append(9.0)
        assert window.values() == [1.0, 2.0]


class TestLastN:
    """Tests for most-recent-first retrieval."""

    def test_most_recent_first(self):
        window = window_of([1.0, 2.0, 3.0, 4.0, 5.0, 6.0], capacity=4)
        assert window.last_n(3) == [6.0, 5.0, 4.0]

    def test_fewer_than_requested(self):
        window = window_of([1.0, 2.0], capacity=10)
        assert window.last_n(5) == [2.0, 1.0]

    def test_empty(self):
        assert RollingStatsWindow(3).last_n(5) == []
        assert RollingStatsWindow(3).last() == 0.0


class TestPercentile:
    """Tests for the midpoint / round-half-up percentile rule."""

    def test_exact_boundary_averages_neighbours(self):
        """Test that idx = 0.8 * 5 = 4 averages the 4th and 5th values."""
        window = window_of([1.0, 2.0, 3.0, 4.0, 5.0])
        assert window.percentile(80) == pytest.approx(4.5)

    def test_fractional_index_rounds_half_up(self):
        """Test that idx = 2.5 rounds up to the 3rd value."""
        window = window_of([1.0, 2.0, 3.0, 4.0, 5.0])
        assert window.percentile(50) == 3.0

    def test_unsorted_input(self):
        window = window_of([5.0, 1.0, 4.0, 2.0, 3.0])
        assert window.percentile(50) == 3.0
        assert window.values() == [5.0, 1.0, 4.0, 2.0, 3.0]

    def test_rank_below_one_is_zero(self):
        window = window_of([1.0, 2.0, 3.0, 4.0, 5.0])
        assert window.percentile(0) == 0.0
        assert window.percentile(5) == 0.0  # idx 0.25 -> 0

    def test_hundredth_percentile_is_max(self):
        window = window_of([3.0, 1.0, 2.0])
        assert window.percentile(100) == 3.0

    def test_p99_of_hundred_samples(self):
        window = window_of([float(i) for i in range(1, 101)])
        # idx = 99 is exact: midpoint of the 99th and 100th values
        assert window.percentile(99) == pytest.approx(99.5)
        assert window.percentile(90) == pytest.approx(90.5)

    def test_empty_window(self):
        assert RollingStatsWindow(5).percentile(99) == 0.0

    @pytest.mark.parametrize("p", [-1, 100.5])
    def test_out_of_range_raises(self, p):
        with pytest.raises(ValueError):
            window_of([1.0]).percentile(p)


class TestSummary:
    """Tests for mean, min/max and standard deviation."""

    def test_mean(self):
        assert window_of([1.0, 2.0, 3.0, 6.0]).mean() == pytest.approx(3.0)

    def test_mean_after_eviction(self):
        window = window_of([100.0, 1.0, 2.0, 3.0], capacity=3)
        assert window.mean() == pytest.approx(2.0)

    def test_empty_summary_is_zero(self):
        window = RollingStatsWindow(3)
        assert window.mean() == 0.0
        assert window.min() == 0.0
        assert window.max() == 0.0
        assert window.stddev() == 0.0

    def test_min_max(self):
        window = window_of([0.3, 0.1, 0.2])
        assert window.min() == 0.1
        assert window.max() == 0.3

    def test_stddev(self):
        window = window_of([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        assert window.stddev() == pytest.approx(2.0)

    def test_stddev_single_sample(self):
        assert window_of([5.0]).stddev() == 0.0
        assert not math.isnan(window_of([5.0, 5.0]).stddev())
