"""Tests for duration formatting."""

from datetime import UTC

import pytest

from cadence.core.durations import format_ms, utc_now


class TestFormatMs:
    """Rendering milliseconds as HH:MM:SS.mmmm."""

    @pytest.mark.parametrize(
        ("ms", "expected"),
        [
            (0, "00:00:00.0000"),
            (7, "00:00:00.0007"),
            (1500, "00:00:01.0500"),
            (61_000, "00:01:01.0000"),
            (3_723_004, "01:02:03.0004"),
            (86_399_999, "23:59:59.0999"),
        ],
    )
    def test_examples(self, ms, expected):
        """Known durations render zero-padded."""
        assert format_ms(ms) == expected

    def test_hours_not_wrapped(self):
        """Hours keep counting past a day."""
        assert format_ms(90_000_000) == "25:00:00.0000"

    def test_hours_grow_past_two_digits(self):
        """Very long durations widen the hour field."""
        assert format_ms(360_000_000) == "100:00:00.0000"

    def test_default_is_zero(self):
        """Called without an argument renders zero."""
        assert format_ms() == "00:00:00.0000"

    def test_fractional_floored(self):
        """Sub-millisecond precision is dropped."""
        assert format_ms(1234.9) == "00:00:01.0234"

    def test_negative_clamped(self):
        """Negative durations render as zero."""
        assert format_ms(-50) == "00:00:00.0000"


def test_utc_now_is_aware():
    """utc_now returns a timezone-aware UTC datetime."""
    assert utc_now().tzinfo is UTC
