"""
Tests for series construction and numeric coercion.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.forecasting.series import (
    Observation,
    build_series,
    build_series_from_records,
    coerce_value,
)


@pytest.mark.parametrize("raw, expected", [
    (5, 5.0),
    (2.5, 2.5),
    (Decimal("12"), 12.0),
    ("7", 7.0),
    (" 3.25 ", 3.25),
    (-4, -4.0),
])
def test_numeric_values_are_kept(raw, expected):
    assert coerce_value(raw) == expected


@pytest.mark.parametrize("raw", [
    None,
    True,
    False,
    "",
    "twelve",
    float("nan"),
    float("inf"),
    float("-inf"),
    Decimal("NaN"),
    Decimal("Infinity"),
    [1, 2],
    {"value": 3},
])
def test_non_numeric_values_become_zero(raw):
    assert coerce_value(raw) == 0.0


def test_build_series_indexes_in_order():
    series = build_series([3, "4", None])

    assert series == [
        Observation(index=0, value=3.0),
        Observation(index=1, value=4.0),
        Observation(index=2, value=0.0),
    ]


def test_build_series_from_records_formats_dates():
    records = [
        {"date": date(2024, 3, 1), "qty": Decimal("5")},
        {"date": datetime(2024, 3, 2, 14, 30), "qty": 2},
        {"date": None, "qty": "bad"},
    ]
    series = build_series_from_records(records, value_key="qty")

    assert [o.value for o in series] == [5.0, 2.0, 0.0]
    assert [o.date for o in series] == ["2024-03-01", "2024-03-02", None]


def test_observation_to_dict():
    assert Observation(index=1, value=2.0, date="2024-01-01").to_dict() == {
        "index": 1, "value": 2.0, "date": "2024-01-01"
    }
