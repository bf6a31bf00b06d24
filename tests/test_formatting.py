"""
Tests for display formatting helpers (currency, date, time, duration) and day math.
"""

from datetime import UTC, date, datetime, time
from decimal import Decimal

import pytest

from app.utils.datetime_utils import tomorrow_in_timezone
from app.utils.formatting import currency, format_date, format_duration, format_time


@pytest.mark.parametrize(
    "value,expected",
    [
        (321, "$321.00"),
        (Decimal("45"), "$45.00"),
        ("1234.5", "$1,234.50"),
        (0.005, "$0.01"),
        (-5, "-$5.00"),
        (1000000, "$1,000,000.00"),
    ],
)
def test_currency_formats_numbers(value, expected):
    assert currency(value) == expected


@pytest.mark.parametrize(
    "value", [None, "", "abc", "12abc", float("nan"), float("inf"), True, object(), [1]]
)
def test_currency_non_numeric_is_zero(value):
    """Missing or junk amounts render as $0.00 instead of raising."""
    assert currency(value) == "$0.00"


def test_format_date_iso_string():
    assert format_date("2025-06-01") == "Sun, Jun 1, 2025"


def test_format_date_accepts_date_and_datetime():
    assert format_date(date(2025, 12, 25)) == "Thu, Dec 25, 2025"
    assert format_date(datetime(2025, 6, 1, 23, 30)) == "Sun, Jun 1, 2025"


def test_format_date_does_not_shift_timezone():
    """The calendar date itself is shown, regardless of server timezone."""
    assert format_date("2025-01-01") == "Wed, Jan 1, 2025"


@pytest.mark.parametrize("value", [None, ""])
def test_format_date_missing_is_placeholder(value):
    assert format_date(value) == "TBD"


@pytest.mark.parametrize("value", ["not-a-date", "2025-13-45", "06/01/2025"])
def test_format_date_malformed_returns_input(value):
    assert format_date(value) == value


@pytest.mark.parametrize(
    "time_str,expected",
    [
        ("14:00", "2:00 PM"),
        ("09:05:00", "9:05 AM"),
        ("00:30", "12:30 AM"),
        ("12:00", "12:00 PM"),
        (time(18, 45), "6:45 PM"),
    ],
)
def test_format_time(time_str, expected):
    assert format_time(time_str, "2025-06-01") == expected


def test_format_time_without_date():
    assert format_time("14:00") == "2:00 PM"


def test_format_time_missing_is_placeholder():
    assert format_time(None, "2025-06-01") == "TBD"
    assert format_time("", None) == "TBD"


@pytest.mark.parametrize("time_str", ["25:00", "noonish", "14h00"])
def test_format_time_malformed_returns_input(time_str):
    assert format_time(time_str, "2025-06-01") == time_str


def test_format_time_malformed_date_returns_time_input():
    assert format_time("14:00", "garbage") == "14:00"


def test_format_duration():
    assert format_duration(2) == "2"
    assert format_duration(2.0) == "2"
    assert format_duration(1.5) == "1.5"
    assert format_duration(None) == "TBD"
    assert format_duration("two") == "TBD"


def test_tomorrow_uses_configured_timezone():
    """At 02:00 UTC it is still the previous evening in New York."""
    now = datetime(2025, 6, 1, 2, 0, tzinfo=UTC)
    assert tomorrow_in_timezone("America/New_York", now) == date(2025, 6, 1)
    assert tomorrow_in_timezone("UTC", now) == date(2025, 6, 2)


def test_tomorrow_naive_now_treated_as_utc():
    assert tomorrow_in_timezone("UTC", datetime(2025, 12, 31, 12, 0)) == date(2026, 1, 1)


@pytest.mark.parametrize(
    "value,expected",
    [
        (10**27, "$1" + ",000" * 9 + ".00"),
        (1e30, "$1" + ",000" * 10 + ".00"),
        ("1e40", "$1" + ",000" * 13 + ".00"),
        ("-1e30", "-$1" + ",000" * 10 + ".00"),
    ],
)
def test_currency_very_large_amounts(value, expected):
    """Amounts beyond the default decimal precision still format instead of raising."""
    assert currency(value) == expected


@pytest.mark.parametrize("value", ["1_000", "1_000.50", " 2_5 "])
def test_currency_rejects_digit_separators(value):
    assert currency(value) == "$0.00"


@pytest.mark.parametrize("value", ["1e100", "1e999999999", "-1e500"])
def test_currency_absurd_magnitudes_are_junk(value):
    assert currency(value) == "$0.00"
