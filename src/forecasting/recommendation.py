"""
Procurement Recommendation

Turns a demand forecast into an order/monitor decision using a weekly
demand estimate, a half-week safety stock and a four-week order cap.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence

RECOMMENDATION_WINDOW = 7       # Predicted periods averaged into weekly demand
SAFETY_STOCK_RATIO = 0.5        # Safety stock as a fraction of weekly demand
MAX_ORDER_WEEKS = 4             # Never order more than four weeks of demand
MIN_WEEKLY_DEMAND = 1


class RecommendationAction(Enum):
    """What the caller should do about an item"""
    ORDER = "order"
    MONITOR = "monitor"


class Urgency(Enum):
    """How soon an order should be placed"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Recommendation:
    """Procurement recommendation for one item"""
    action: RecommendationAction
    quantity: int
    reason: str
    urgency: Optional[Urgency] = None
    weekly_demand: Optional[float] = None
    safety_stock: Optional[int] = None
    reorder_point: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "action": self.action.value,
            "quantity": self.quantity,
            "reason": self.reason
        }
        if self.urgency is not None:
            data["urgency"] = self.urgency.value
        if self.weekly_demand is not None:
            data["weekly_demand"] = round(self.weekly_demand, 4)
            data["safety_stock"] = self.safety_stock
            data["reorder_point"] = round(self.reorder_point, 4)
        return data


def build_recommendation(
    predicted_values: Sequence[int],
    current_stock: float,
    min_stock: float,
    max_stock: float
) -> Recommendation:
    """
    Derive a procurement recommendation from predicted demand.

    Args:
        predicted_values: Forecast values in period order
        current_stock: Units on hand
        min_stock: Level at or below which an order is urgent
        max_stock: Storage capacity; orders never exceed it

    Returns:
        Recommendation
    """
    if not predicted_values:
        return Recommendation(
            action=RecommendationAction.MONITOR,
            quantity=0,
            reason="Insufficient historical data"
        )

    window = predicted_values[:RECOMMENDATION_WINDOW]
    weekly_demand = max(MIN_WEEKLY_DEMAND, sum(window) / len(window))

    safety_stock = math.ceil(weekly_demand * SAFETY_STOCK_RATIO)
    reorder_point = weekly_demand + safety_stock

    if current_stock <= reorder_point:
        quantity = math.ceil(min(max_stock - current_stock, weekly_demand * MAX_ORDER_WEEKS))
        return Recommendation(
            action=RecommendationAction.ORDER,
            quantity=max(0, quantity),
            reason=(
                "Stock below reorder point. "
                f"Predicted weekly demand: {math.ceil(weekly_demand)} units"
            ),
            urgency=Urgency.HIGH if current_stock <= min_stock else Urgency.MEDIUM,
            weekly_demand=weekly_demand,
            safety_stock=safety_stock,
            reorder_point=reorder_point
        )

    return Recommendation(
        action=RecommendationAction.MONITOR,
        quantity=0,
        reason="Stock level is adequate",
        urgency=Urgency.LOW,
        weekly_demand=weekly_demand,
        safety_stock=safety_stock,
        reorder_point=reorder_point
    )
