"""
Least Squares Demand Forecaster

Fits an ordinary least-squares line to a historical series of stock
movements, classifies its trend and accuracy, projects future periods and
derives a procurement recommendation from the projection.

Periods are placed on a centered x-axis so that the coordinates always sum
to zero:

    odd n:  -(n-1)/2 ... (n-1)/2, step 1   (n=5 -> -2, -1, 0, 1, 2)
    even n: 2i - n + 1,            step 2   (n=4 -> -3, -1, 1, 3)

Future periods continue with the same step, so slope and intercept are
expressed in these coordinates rather than in 1..n.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .recommendation import Recommendation, build_recommendation
from .series import Observation, build_series, build_series_from_records, coerce_value

logger = logging.getLogger(__name__)

DEFAULT_HORIZON = 30
RECOMMENDATION_HORIZON = 30
TREND_THRESHOLD = 0.1


class Trend(Enum):
    """Direction of the fitted line"""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class Accuracy(Enum):
    """Fit quality bucket derived from |r|"""
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very_low"


# Lower bounds on |r|, checked in order
ACCURACY_THRESHOLDS: List[Tuple[float, Accuracy]] = [
    (0.9, Accuracy.VERY_HIGH),
    (0.7, Accuracy.HIGH),
    (0.5, Accuracy.MEDIUM),
    (0.3, Accuracy.LOW),
]


@dataclass(frozen=True)
class PredictedPoint:
    """A projected future period"""
    period: int
    date: str
    value: int
    kind: str = "prediction"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "date": self.date,
            "value": self.value,
            "kind": self.kind
        }


@dataclass(frozen=True)
class CalculationRow:
    """Per-observation working shown in the calculation table"""
    no: int
    label: str
    x: int
    y: float
    x2: int
    xy: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "no": self.no,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "x2": self.x2,
            "xy": self.xy
        }


@dataclass(frozen=True)
class FitResult:
    """Result of a least squares forecast"""
    slope: float
    intercept: float
    correlation: float
    trend: Trend
    accuracy: Accuracy
    predictions: List[PredictedPoint] = field(default_factory=list)
    calculation_table: List[CalculationRow] = field(default_factory=list)
    summary_table: Dict[str, Any] = field(default_factory=dict)

    @property
    def predicted_values(self) -> List[int]:
        return [p.value for p in self.predictions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "correlation": self.correlation,
            "trend": self.trend.value,
            "accuracy": self.accuracy.value,
            "predictions": [p.to_dict() for p in self.predictions],
            "calculation_table": [row.to_dict() for row in self.calculation_table],
            "summary_table": self.summary_table
        }


def classify_trend(slope: float) -> Trend:
    """Classify a fitted slope into a trend direction"""
    if slope > TREND_THRESHOLD:
        return Trend.INCREASING
    if slope < -TREND_THRESHOLD:
        return Trend.DECREASING
    return Trend.STABLE


def classify_accuracy(correlation: float) -> Accuracy:
    """Classify a correlation coefficient into an accuracy bucket"""
    strength = abs(correlation)
    for lower_bound, accuracy in ACCURACY_THRESHOLDS:
        if strength >= lower_bound:
            return accuracy
    return Accuracy.VERY_LOW


def centered_coordinates(n: int) -> Tuple[List[int], int]:
    """
    Assign centered x-coordinates to a series of length n.

    Returns:
        (coordinates, step) where step is the spacing used for projection
    """
    if n % 2 == 1:
        half = (n - 1) // 2
        return [i - half for i in range(n)], 1
    return [2 * i - n + 1 for i in range(n)], 2


def _finite(value: float) -> float:
    value = float(value)
    return value if math.isfinite(value) else 0.0


def _round4(value: float) -> float:
    return round(_finite(value), 4)


def _to_units(value: float) -> int:
    """Round half up to a non-negative whole number of units"""
    value = _finite(value)
    return max(0, int(math.floor(value + 0.5)))


class ForecastEngine:
    """
    Least squares demand forecaster.

    Holds one historical series and answers forecasts and procurement
    recommendations over it. Instances are never mutated after
    construction, so repeated calls give identical results.

    Example:
    ```python
    engine = ForecastEngine.from_values([10, 20, 30, 40])
    result = engine.predict(7)
    print(result.slope, result.trend.value)   # 5.0 increasing

    rec = engine.get_recommendation(current_stock=12, min_stock=10, max_stock=200)
    print(rec.action.value, rec.quantity)
    ```
    """

    def __init__(
        self,
        series: Sequence[Observation],
        reference_date: Optional[date] = None
    ):
        """
        Initialize engine.

        Args:
            series: Observations in chronological order (may be empty)
            reference_date: "Today" for the calendar projection; defaults
                to the current date at each predict() call
        """
        self.series = tuple(series)
        self.reference_date = reference_date

    @classmethod
    def from_values(
        cls,
        values: Iterable[Any],
        reference_date: Optional[date] = None
    ) -> "ForecastEngine":
        return cls(build_series(values), reference_date=reference_date)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        value_key: str = "value",
        date_key: str = "date",
        reference_date: Optional[date] = None
    ) -> "ForecastEngine":
        return cls(
            build_series_from_records(records, value_key=value_key, date_key=date_key),
            reference_date=reference_date
        )

    def _values(self) -> List[float]:
        values = []
        for point in self.series:
            if isinstance(point, Observation):
                values.append(coerce_value(point.value))
            elif isinstance(point, Mapping):
                values.append(coerce_value(point.get("value")))
            else:
                values.append(coerce_value(point))
        return values

    def predict(self, horizon: int = DEFAULT_HORIZON) -> FitResult:
        """
        Fit the series and project future periods.

        Args:
            horizon: Number of future periods to project

        Returns:
            FitResult with coefficients, classifications, predictions and
            the calculation working
        """
        if horizon < 0:
            raise ValueError("horizon must be non-negative")

        values = self._values()
        n = len(values)

        if n == 0:
            logger.debug("Empty series, returning insufficient_data result")
            return FitResult(
                slope=0.0,
                intercept=0.0,
                correlation=0.0,
                trend=Trend.INSUFFICIENT_DATA,
                accuracy=Accuracy.VERY_LOW,
                summary_table={
                    "x": 0, "y": 0.0, "xy": 0.0, "x2": 0, "n": 0,
                    "slope": 0.0, "intercept": 0.0, "correlation": 0.0
                }
            )

        coords, step = centered_coordinates(n)
        x = np.array(coords, dtype=float)
        y = np.array(values, dtype=float)

        with np.errstate(all="ignore"):
            sum_x = float(np.sum(x))
            sum_y = float(np.sum(y))
            sum_xy = float(np.dot(x, y))
            sum_x2 = float(np.dot(x, x))
            sum_y2 = float(np.dot(y, y))

        if n == 1:
            # No x-variance: a flat line through the single observation
            logger.debug("Single observation, projecting it unchanged")
            slope = 0.0
            intercept = _finite(values[0])
            correlation = 0.0
            trend = Trend.STABLE
            accuracy = Accuracy.VERY_LOW
        else:
            numerator = n * sum_xy - sum_x * sum_y
            x_spread = n * sum_x2 - sum_x * sum_x
            y_spread = n * sum_y2 - sum_y * sum_y

            slope = _finite(numerator / x_spread) if x_spread != 0 else 0.0
            intercept = _finite((sum_y - slope * sum_x) / n)

            radicand = x_spread * y_spread
            if math.isfinite(radicand) and radicand > 0:
                correlation = _finite(numerator / math.sqrt(radicand))
            else:
                correlation = 0.0

            trend = classify_trend(slope)
            accuracy = classify_accuracy(correlation)

        predictions = self._project(coords[-1], step, slope, intercept, horizon)

        calculation_table = [
            CalculationRow(
                no=i + 1,
                label=f"Period {i + 1}",
                x=xi,
                y=yi,
                x2=xi * xi,
                xy=xi * yi
            )
            for i, (xi, yi) in enumerate(zip(coords, values))
        ]

        summary_table = {
            "x": _round4(sum_x),
            "y": _round4(sum_y),
            "xy": _round4(sum_xy),
            "x2": _round4(sum_x2),
            "n": n,
            "slope": _round4(slope),
            "intercept": _round4(intercept),
            "correlation": _round4(correlation)
        }

        return FitResult(
            slope=_round4(slope),
            intercept=_round4(intercept),
            correlation=_round4(correlation),
            trend=trend,
            accuracy=accuracy,
            predictions=predictions,
            calculation_table=calculation_table,
            summary_table=summary_table
        )

    def _project(
        self,
        last_coordinate: int,
        step: int,
        slope: float,
        intercept: float,
        horizon: int
    ) -> List[PredictedPoint]:
        """Project future periods along the fitted line"""
        today = self.reference_date or date.today()
        predictions = []

        for k in range(1, horizon + 1):
            period = last_coordinate + step * k
            predictions.append(PredictedPoint(
                period=period,
                date=(today + timedelta(days=k)).isoformat(),
                value=_to_units(slope * period + intercept)
            ))

        return predictions

    def get_recommendation(
        self,
        current_stock: float,
        min_stock: float,
        max_stock: float
    ) -> Recommendation:
        """
        Recommend whether to reorder, based on a fixed 30-period forecast.

        Args:
            current_stock: Units on hand
            min_stock: Minimum stock level for the item
            max_stock: Maximum stock level for the item

        Returns:
            Recommendation
        """
        forecast = self.predict(RECOMMENDATION_HORIZON)
        return build_recommendation(
            forecast.predicted_values,
            current_stock=current_stock,
            min_stock=min_stock,
            max_stock=max_stock
        )
