"""Repository protocol definitions (interfaces)."""

from finsight.repositories.protocols.price_repo import PriceRepository
from finsight.repositories.protocols.prediction_repo import PredictionRepository
from finsight.repositories.protocols.portfolio_repo import PortfolioRepository
from finsight.repositories.protocols.order_repo import OrderRepository, ConversationRepository

__all__ = [
    "PriceRepository",
    "PredictionRepository",
    "PortfolioRepository",
    "OrderRepository",
    "ConversationRepository",
]
