"""Test slot time normalization."""
import pytest
from counsel_booking.timeparse import (
    TimeEncoding,
    classify_time,
    normalize_time,
    time_to_minutes,
)


class TestClassifyTime:
    """Test tagging of raw time encodings."""

    @pytest.mark.parametrize("value,expected", [
        ("09:30:00", TimeEncoding.STRING),
        ({"hour": 9, "minute": 30, "second": 0, "nano": 0}, TimeEncoding.STRUCTURED),
        (None, TimeEncoding.ABSENT),
        ("", TimeEncoding.ABSENT),
        (930, TimeEncoding.MALFORMED),
        ({"hours": 9}, TimeEncoding.MALFORMED),
    ])
    def test_classification(self, value, expected):
        assert classify_time(value) == expected


class TestNormalizeTime:
    """Test canonical HH:MM output."""

    def test_string_with_seconds(self):
        assert normalize_time("09:30:00") == "09:30"

    def test_string_without_seconds(self):
        assert normalize_time("14:05") == "14:05"

    def test_single_digit_hour_is_padded(self):
        assert normalize_time("9:30:00") == "09:30"

    def test_structured_time(self):
        assert normalize_time({"hour": 9, "minute": 30}) == "09:30"

    def test_structured_time_with_zero_minute(self):
        """Midnight and on-the-hour values are real times."""
        assert normalize_time({"hour": 9, "minute": 0}) == "09:00"
        assert normalize_time({"hour": 0, "minute": 0}) == "00:00"

    @pytest.mark.parametrize("value", [
        None,
        "",
        "later",
        "25:00:00",
        "09:75",
        {"hour": "nine", "minute": 30},
        {"hour": True, "minute": 30},
        {"hour": 9},
        [9, 30],
        12.5,
    ])
    def test_malformed_values_become_none(self, value):
        """Never raises, always None for unusable input."""
        assert normalize_time(value) is None


class TestTimeToMinutes:

    def test_converts_hh_mm(self):
        assert time_to_minutes("09:30") == 570

    def test_none_for_missing(self):
        assert time_to_minutes(None) is None
        assert time_to_minutes("noon") is None
