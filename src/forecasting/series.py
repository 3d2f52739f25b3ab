"""
Series construction for demand forecasting

Turns raw query results into ordered Observations. This is the only place
where numeric coercion happens: anything that is not a finite number becomes
0.0, so the regression never sees NaN or infinity.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Observation:
    """One historical data point"""
    index: int
    value: float
    date: Optional[str] = None

    def to_dict(self):
        return {
            "index": self.index,
            "value": self.value,
            "date": self.date
        }


def coerce_value(raw: Any) -> float:
    """
    Convert a raw observed quantity to a finite float.

    Accepts ints, floats, Decimals (as returned by SQL SUM) and numeric
    strings. Everything else, including booleans, NaN and infinities,
    is treated as 0.0.
    """
    if raw is None or isinstance(raw, bool):
        value = None
    elif isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, Decimal):
        value = float(raw) if raw.is_finite() else None
    elif isinstance(raw, str):
        try:
            value = float(Decimal(raw.strip()))
        except (InvalidOperation, ValueError):
            value = None
    else:
        value = None

    if value is None or not math.isfinite(value):
        logger.debug(f"Coercing non-numeric observation {raw!r} to 0")
        return 0.0
    return value


def _format_date(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, (date, datetime)):
        return raw.isoformat()[:10]
    return str(raw)


def build_series(values: Iterable[Any]) -> List[Observation]:
    """Build an ordered series from plain values"""
    return [
        Observation(index=i, value=coerce_value(v))
        for i, v in enumerate(values)
    ]


def build_series_from_records(
    records: Iterable[Mapping[str, Any]],
    value_key: str = "value",
    date_key: str = "date"
) -> List[Observation]:
    """
    Build an ordered series from record mappings.

    Args:
        records: Rows in chronological order, e.g. aggregated query results
        value_key: Key holding the observed quantity (missing -> 0)
        date_key: Key holding the period date, kept for display only

    Returns:
        List of Observations indexed from 0
    """
    return [
        Observation(
            index=i,
            value=coerce_value(record.get(value_key)),
            date=_format_date(record.get(date_key))
        )
        for i, record in enumerate(records)
    ]
