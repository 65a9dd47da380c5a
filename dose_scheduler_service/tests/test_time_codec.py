import pytest

from app.utils.time_codec import (
    add_minutes,
    format_minutes_to_12h,
    format_minutes_to_24h,
    parse_time_to_minutes,
    to_12h,
    to_24h,
)

@pytest.mark.parametrize("raw,expected", [
    ("8:00 AM", 480),
    ("8:00am", 480),
    ("12:00 AM", 0),
    ("12:00 PM", 720),
    ("11:59 pm", 1439),
    ("08:05", 485),
    ("20:00:00", 1200),
])
def test_parse_valid(raw, expected):
    assert parse_time_to_minutes(raw) == expected

@pytest.mark.parametrize("raw", ["", None, "abc", "25:00", "8:60", "13:00 PM", "0:30 AM", "8"])
def test_parse_fails_closed_to_midnight(raw):
    assert parse_time_to_minutes(raw) == 0

def test_formatters_pad_and_label():
    assert format_minutes_to_24h(485) == "08:05"
    assert format_minutes_to_12h(0) == "12:00 AM"
    assert format_minutes_to_12h(750) == "12:30 PM"
    assert format_minutes_to_12h(1205) == "8:05 PM"

def test_every_minute_round_trips_through_both_formats():
    for m in range(24 * 60):
        assert parse_time_to_minutes(format_minutes_to_24h(m)) == m
        assert parse_time_to_minutes(format_minutes_to_12h(m)) == m

def test_canonical_conversions():
    assert to_24h("8:00 pm") == "20:00"
    assert to_24h("7:05") == "07:05"
    assert to_12h("00:15") == "12:15 AM"

def test_add_minutes_wraps_midnight():
    assert add_minutes("23:50", 20) == "00:10"
    assert add_minutes("00:10", -20) == "23:50"
    assert add_minutes("08:00", 2 * 1440 + 5) == "08:05"
