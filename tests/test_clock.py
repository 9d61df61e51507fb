"""
Tests for clock conversion and arithmetic.
"""

from datetime import time

import pytest

from roomschedule.domain.clock import add_duration, format_clock, parse_duration, to_minutes


class TestToMinutes:
    """Tests for to_minutes."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, 0),
            (615, 615),
            ("8", 480),
            ("8:00", 480),
            ("08:35", 515),
            ("24:00", 1440),
            (time(9, 15), 555),
        ],
    )
    def test_accepted_values(self, value, expected):
        assert to_minutes(value) == expected

    @pytest.mark.parametrize("value", ["", "8:60", "25:00", "8:00:00", "eight", -1, 1441, True, 8.5])
    def test_rejected_values(self, value):
        with pytest.raises(ValueError):
            to_minutes(value)


class TestDurations:
    """Tests for duration parsing and clock addition."""

    def test_parse_duration(self):
        assert parse_duration(90) == 90
        assert parse_duration("90") == 90
        assert parse_duration("1:30") == 90

    def test_non_positive_duration_raises_error(self):
        with pytest.raises(ValueError, match="positive"):
            parse_duration(0)

    def test_add_duration_carries_minutes_into_hours(self):
        assert add_duration("9:45", 30) == to_minutes("10:15")
        assert add_duration("9:45", "0:30") == to_minutes("10:15")

    def test_add_duration_past_midnight_raises_error(self):
        with pytest.raises(ValueError, match="past midnight"):
            add_duration("23:30", 60)


def test_format_clock():
    assert format_clock(0) == "00:00"
    assert format_clock(515) == "08:35"
    assert format_clock(1440) == "24:00"
