"""
Forecasting Module for Stock Forecast

Least squares demand forecasting and procurement recommendations.
"""

from .least_squares import (
    ForecastEngine,
    FitResult,
    PredictedPoint,
    CalculationRow,
    Trend,
    Accuracy,
    centered_coordinates,
    classify_trend,
    classify_accuracy
)
from .recommendation import (
    Recommendation,
    RecommendationAction,
    Urgency,
    build_recommendation
)
from .series import (
    Observation,
    build_series,
    build_series_from_records,
    coerce_value
)

__all__ = [
    'ForecastEngine',
    'FitResult',
    'PredictedPoint',
    'CalculationRow',
    'Trend',
    'Accuracy',
    'centered_coordinates',
    'classify_trend',
    'classify_accuracy',
    'Recommendation',
    'RecommendationAction',
    'Urgency',
    'build_recommendation',
    'Observation',
    'build_series',
    'build_series_from_records',
    'coerce_value',
]
