import math

import pytest

from cryptoscope.tools.formatting import (
    NOT_AVAILABLE,
    format_percent,
    head,
    ms_to_iso,
    percent_change,
    seconds_to_date,
    sort_key,
    to_number,
    upper,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (54.3189, "54.32%"),
        (-0.5, "-0.50%"),
        (0, "0.00%"),
        ("12.5", "12.50%"),
        (None, NOT_AVAILABLE),
        ("n/a", NOT_AVAILABLE),
        (math.nan, NOT_AVAILABLE),
        (math.inf, NOT_AVAILABLE),
        (True, NOT_AVAILABLE),
    ],
)
def test_format_percent(value, expected):
    assert format_percent(value) == expected


def test_percent_change_guards_baseline():
    assert percent_change(150, 100) == "50.00%"
    assert percent_change(50, 100) == "-50.00%"
    assert percent_change(10, 0) == NOT_AVAILABLE
    assert percent_change(10, None) == NOT_AVAILABLE
    assert percent_change(None, 10) == NOT_AVAILABLE


def test_to_number_accepts_formatted_strings():
    assert to_number("$1,234.50") == 1234.5
    assert to_number("") is None
    assert to_number({"usd": 1}) is None


def test_sort_key_treats_missing_as_zero():
    values = [None, 5, "bad", 10]
    assert sorted(values, key=sort_key, reverse=True) == [10, 5, None, "bad"]


def test_small_helpers():
    assert upper("eth") == "ETH"
    assert upper(None) is None
    assert head([1, 2, 3], 2) == [1, 2]
    assert head(None, 2) == []
    assert ms_to_iso(0) == "1970-01-01T00:00:00+00:00"
    assert seconds_to_date("86400") == "1970-01-02"
