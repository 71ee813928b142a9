"""Market data provider protocol."""

from typing import Protocol

from finsight.domain.models import PricePoint
from finsight.domain.views import Quote


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Implementations raise on failure (network error, rate limit, unknown
    symbol); callers decide whether that means a skipped symbol or a
    rejected trade.
    """

    def get_quote(self, symbol: str) -> Quote:
        """Fetch the current quote (price, change, change percent) for a symbol."""
        ...

    def get_daily_history(self, symbol: str, limit: int) -> list[PricePoint]:
        """
        Fetch up to `limit` most recent daily bars, oldest first.

        May return fewer bars than requested.
        """
        ...


def create_market_data_provider(name: str) -> MarketDataProvider:
    """Build the provider named in settings ("stub" or "yfinance")."""
    from finsight.providers.stub_provider import StubMarketDataProvider
    from finsight.providers.yfinance_provider import YFinanceMarketDataProvider

    key = (name or "stub").strip().lower()
    if key == "stub":
        return StubMarketDataProvider()
    if key == "yfinance":
        return YFinanceMarketDataProvider()
    raise ValueError(f"Unknown market data provider: {name}")
