"""Domain layer - pure business models with no external dependencies."""

from finsight.domain.models import (
    PricePoint,
    IndicatorSnapshot,
    Prediction,
    Position,
    PortfolioSummary,
    Order,
    Conversation,
    TradeIntent,
    RiskLevel,
    Recommendation,
    IntentAction,
    OrderSide,
    OrderStatus,
    TradeState,
)

__all__ = [
    "PricePoint",
    "IndicatorSnapshot",
    "Prediction",
    "Position",
    "PortfolioSummary",
    "Order",
    "Conversation",
    "TradeIntent",
    "RiskLevel",
    "Recommendation",
    "IntentAction",
    "OrderSide",
    "OrderStatus",
    "TradeState",
]
