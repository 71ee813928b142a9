"""Domain models package."""

from finsight.domain.models.enums import (
    RiskLevel,
    Recommendation,
    IntentAction,
    OrderSide,
    OrderStatus,
    TradeState,
)
from finsight.domain.models.market import PricePoint
from finsight.domain.models.prediction import IndicatorSnapshot, Prediction
from finsight.domain.models.portfolio import (
    Position,
    PortfolioSummary,
    Order,
    Conversation,
    weighted_average_cost,
    quantize_money,
)
from finsight.domain.models.intent import TradeIntent

__all__ = [
    "RiskLevel",
    "Recommendation",
    "IntentAction",
    "OrderSide",
    "OrderStatus",
    "TradeState",
    "PricePoint",
    "IndicatorSnapshot",
    "Prediction",
    "Position",
    "PortfolioSummary",
    "Order",
    "Conversation",
    "weighted_average_cost",
    "quantize_money",
    "TradeIntent",
]
