"""Enumerations for domain models."""

from enum import Enum


class RiskLevel(str, Enum):
    """Volatility bucket attached to a prediction."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Recommendation(str, Enum):
    """Discrete trading recommendation derived from the predicted move."""

    STRONG_BUY = "Strong Buy"
    BUY = "Buy"
    HOLD = "Hold"
    SELL = "Sell"
    STRONG_SELL = "Strong Sell"


class IntentAction(str, Enum):
    """Closed set of actions a user message can resolve to."""

    GET_STOCK_PRICE = "GET_STOCK_PRICE"
    BUY_STOCK = "BUY_STOCK"
    SELL_STOCK = "SELL_STOCK"
    GET_PORTFOLIO = "GET_PORTFOLIO"
    GENERAL = "GENERAL"


class OrderSide(str, Enum):
    """Direction of a market order."""

    BUY = "buy"
    SELL = "sell"


class OrderStatus(str, Enum):
    """Final status recorded on an Order row."""

    FILLED = "filled"
    REJECTED = "rejected"


class TradeState(str, Enum):
    """Lifecycle of a single trade request."""

    VALIDATED = "Validated"
    PRICED = "Priced"
    SUBMITTED = "Submitted"
    FILLED = "Filled"
    REJECTED = "Rejected"
