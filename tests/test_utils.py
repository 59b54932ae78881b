"""
Utility Tests.

Tests for duration helpers, rounding, and URL validation.
"""

import pytest

from utils import (
    format_duration,
    parse_duration,
    round_duration,
    round_half_up,
    validate_host_url,
)


class TestUtils:
    """Tests for utility functions."""

    @pytest.mark.parametrize(
        "value,expected",
        [(2.5, 3), (2.4, 2), (0.5, 1), (0.49, 0), (3.0, 3), (-2.5, -3)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "0s"),
            (0.000250, "250µs"),
            (0.25, "250ms"),
            (1.5, "1s500ms"),
            (90, "1m30s"),
            (3723, "1h2m3s"),
        ],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_round_duration_drops_microseconds(self):
        assert round_duration(0.012345) == pytest.approx(0.012)
        assert round_duration(1.0000005) == pytest.approx(1.0)

    @pytest.mark.parametrize(
        "value,expected",
        [(2, 2.0), ("1.5", 1.5), ("1500ms", 1.5), ("2s", 2.0), ("1m30s", 90.0), ("1h", 3600.0)],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "soon", "5x", "1m 30s", None, True])
    def test_parse_duration_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)

    def test_validate_host_url(self):
        assert validate_host_url("https://example.com/health") is True
        assert validate_host_url("http://10.0.0.1:8080") is True
        assert validate_host_url("ftp://example.com") is False
        assert validate_host_url("example.com") is False
