"""External collaborators: market data, trade gateway, language model."""

from finsight.providers.market_data_provider import MarketDataProvider, create_market_data_provider
from finsight.providers.stub_provider import StubMarketDataProvider
from finsight.providers.yfinance_provider import YFinanceMarketDataProvider
from finsight.providers.trade_gateway import TradeGateway, PaperTradeGateway
from finsight.providers.llm_client import LLMClient, GeminiClient, LLMUnavailableError

__all__ = [
    "MarketDataProvider",
    "create_market_data_provider",
    "StubMarketDataProvider",
    "YFinanceMarketDataProvider",
    "TradeGateway",
    "PaperTradeGateway",
    "LLMClient",
    "GeminiClient",
    "LLMUnavailableError",
]
