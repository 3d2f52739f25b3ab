"""
Tests for the least squares demand forecaster.
"""

from datetime import date

import pytest

from src.forecasting import (
    Accuracy,
    ForecastEngine,
    Observation,
    Trend,
    centered_coordinates,
    classify_accuracy,
    classify_trend,
)

REFERENCE = date(2024, 1, 31)


def _engine(values):
    return ForecastEngine.from_values(values, reference_date=REFERENCE)


@pytest.mark.parametrize("horizon", [0, 1, 30])
def test_empty_series_is_insufficient_data(horizon):
    result = _engine([]).predict(horizon)

    assert result.trend is Trend.INSUFFICIENT_DATA
    assert result.accuracy is Accuracy.VERY_LOW
    assert (result.slope, result.intercept, result.correlation) == (0.0, 0.0, 0.0)
    assert result.predictions == []
    assert result.calculation_table == []
    assert result.summary_table["n"] == 0


def test_single_observation_projects_flat_line():
    result = _engine([50]).predict(3)

    assert result.slope == 0.0
    assert result.intercept == 50.0
    assert result.correlation == 0.0
    assert result.trend is Trend.STABLE
    assert result.accuracy is Accuracy.VERY_LOW
    assert result.predicted_values == [50, 50, 50]
    assert [p.period for p in result.predictions] == [1, 2, 3]


@pytest.mark.parametrize("n", range(1, 13))
def test_coordinates_are_centered(n):
    coords, step = centered_coordinates(n)

    assert len(coords) == n
    assert sum(coords) == 0
    assert step == (1 if n % 2 else 2)
    assert all(b - a == step for a, b in zip(coords, coords[1:]))


def test_even_length_coordinates():
    assert centered_coordinates(4) == ([-3, -1, 1, 3], 2)
    assert centered_coordinates(5) == ([-2, -1, 0, 1, 2], 1)


def test_perfect_linear_series_even_length():
    result = _engine([10, 20, 30, 40]).predict(3)

    assert result.slope == 5.0
    assert result.intercept == 25.0
    assert result.correlation == 1.0
    assert result.trend is Trend.INCREASING
    assert result.accuracy is Accuracy.VERY_HIGH
    # next coordinates continue with step 2: 5, 7, 9
    assert [p.period for p in result.predictions] == [5, 7, 9]
    assert result.predicted_values == [50, 60, 70]


def test_perfect_linear_series_odd_length():
    result = _engine([3, 5, 7]).predict(2)

    assert result.slope == 2.0
    assert result.intercept == 5.0
    assert [p.period for p in result.predictions] == [2, 3]
    assert result.predicted_values == [9, 11]


def test_summary_and_calculation_tables():
    result = _engine([10, 20, 30, 40]).predict(0)

    assert result.summary_table == {
        "x": 0.0, "y": 100.0, "xy": 100.0, "x2": 20.0, "n": 4,
        "slope": 5.0, "intercept": 25.0, "correlation": 1.0,
    }
    first = result.calculation_table[0]
    assert (first.no, first.label, first.x, first.y, first.x2, first.xy) == \
        (1, "Period 1", -3, 10.0, 9, -30.0)
    assert len(result.calculation_table) == 4


def test_decreasing_series_never_predicts_negative():
    result = _engine([40, 30, 20, 10]).predict(10)

    assert result.slope == -5.0
    assert result.trend is Trend.DECREASING
    assert result.predicted_values[0] == 0
    assert all(value >= 0 for value in result.predicted_values)


def test_constant_series_has_zero_correlation():
    result = _engine([5, 5, 5]).predict(2)

    assert result.slope == 0.0
    assert result.correlation == 0.0
    assert result.trend is Trend.STABLE
    assert result.accuracy is Accuracy.VERY_LOW
    assert result.predicted_values == [5, 5]


def test_projection_rounds_half_up():
    # slope 0.2, intercept 1.5: next coordinate 5 gives exactly 2.5
    result = _engine([1, 1, 2, 2]).predict(1)

    assert result.slope == 0.2
    assert result.intercept == 1.5
    assert result.predicted_values == [3]


def test_prediction_dates_follow_reference_date():
    result = _engine([1, 2, 3]).predict(2)

    assert [p.date for p in result.predictions] == ["2024-02-01", "2024-02-02"]
    assert all(p.kind == "prediction" for p in result.predictions)


def test_predict_is_repeatable():
    engine = _engine([12, 7, 15, 9, 20, 11, 18])

    assert engine.predict(14) == engine.predict(14)
    assert engine.predict(14).to_dict() == engine.predict(14).to_dict()


def test_negative_horizon_is_rejected():
    with pytest.raises(ValueError):
        _engine([1, 2, 3]).predict(-1)


def test_non_numeric_values_are_treated_as_zero():
    noisy = _engine([10, None, "abc", float("nan"), float("inf")]).predict(1)
    clean = _engine([10, 0, 0, 0, 0]).predict(1)

    assert noisy.to_dict() == clean.to_dict()


def test_from_records_uses_value_key():
    records = [
        {"date": "2024-01-01", "stock_out": 4},
        {"date": "2024-01-02", "stock_out": "6"},
        {"date": "2024-01-03"},
    ]
    engine = ForecastEngine.from_records(records, value_key="stock_out", reference_date=REFERENCE)

    assert [o.value for o in engine.series] == [4.0, 6.0, 0.0]
    assert engine.series[0].date == "2024-01-01"


def test_accepts_observations_directly():
    series = [Observation(index=i, value=v) for i, v in enumerate([2, 4, 6])]
    result = ForecastEngine(series, reference_date=REFERENCE).predict(1)

    assert result.slope == 2.0
    assert result.predicted_values == [8]


def test_to_dict_serializes_enums():
    data = _engine([10, 20, 30, 40]).predict(1).to_dict()

    assert data["trend"] == "increasing"
    assert data["accuracy"] == "very_high"
    assert data["predictions"][0] == {
        "period": 5, "date": "2024-02-01", "value": 50, "kind": "prediction"
    }


@pytest.mark.parametrize("slope, expected", [
    (0.1, Trend.STABLE),
    (0.10001, Trend.INCREASING),
    (-0.1, Trend.STABLE),
    (-0.10001, Trend.DECREASING),
    (0.0, Trend.STABLE),
])
def test_classify_trend(slope, expected):
    assert classify_trend(slope) is expected


@pytest.mark.parametrize("correlation, expected", [
    (1.0, Accuracy.VERY_HIGH),
    (0.9, Accuracy.VERY_HIGH),
    (0.89999, Accuracy.HIGH),
    (0.7, Accuracy.HIGH),
    (0.5, Accuracy.MEDIUM),
    (0.3, Accuracy.LOW),
    (0.29, Accuracy.VERY_LOW),
    (-0.95, Accuracy.VERY_HIGH),
    (-0.6, Accuracy.MEDIUM),
])
def test_classify_accuracy(correlation, expected):
    assert classify_accuracy(correlation) is expected


def test_recommendation_flips_with_stock_level():
    engine = _engine([10] * 10)

    low = engine.get_recommendation(current_stock=5, min_stock=5, max_stock=100)
    medium = engine.get_recommendation(current_stock=12, min_stock=5, max_stock=100)
    plenty = engine.get_recommendation(current_stock=16, min_stock=5, max_stock=100)

    assert low.action.value == "order"
    assert low.urgency.value == "high"
    assert medium.action.value == "order"
    assert medium.urgency.value == "medium"
    assert plenty.action.value == "monitor"
    assert plenty.urgency.value == "low"
    assert plenty.quantity == 0


def test_recommendation_without_history():
    rec = _engine([]).get_recommendation(current_stock=0, min_stock=10, max_stock=100)

    assert rec.action.value == "monitor"
    assert rec.quantity == 0
    assert rec.reason == "Insufficient historical data"
    assert rec.urgency is None
