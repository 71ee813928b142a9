"""Service layer - business logic orchestration."""

from finsight.services.market_data_service import MarketDataService
from finsight.services.prediction_service import PredictionService
from finsight.services.intent_resolver import IntentResolver
from finsight.services.trade_engine import TradeEngine
from finsight.services.portfolio_service import PortfolioService
from finsight.services.assistant_service import AssistantService

__all__ = [
    "MarketDataService",
    "PredictionService",
    "IntentResolver",
    "TradeEngine",
    "PortfolioService",
    "AssistantService",
]
