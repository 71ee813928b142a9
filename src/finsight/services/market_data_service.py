"""Market data service for quotes and daily history."""

import logging
import threading
import time
from datetime import datetime
from typing import Optional

from finsight.core.exceptions import PriceUnavailable
from finsight.core.timezone import now_eastern
from finsight.domain.models import PricePoint
from finsight.domain.views import Quote
from finsight.providers.market_data_provider import MarketDataProvider

logger = logging.getLogger(__name__)


def sanitize_history(bars: list[PricePoint]) -> list[PricePoint]:
    """Sort bars ascending and drop repeated timestamps (first occurrence wins)."""
    seen: set[datetime] = set()
    clean = []
    for bar in sorted(bars, key=lambda b: b.timestamp):
        if bar.timestamp in seen:
            continue
        seen.add(bar.timestamp)
        clean.append(bar)
    return clean


class MarketDataService:
    """
    Service for fetching market data (quotes, daily bars).

    Wraps a provider with a per-symbol quote cache and a minimum spacing
    between provider calls so that a prediction batch does not burst a
    rate-limited upstream. Safe to share between threads.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        cache_ttl_seconds: int = 60,
        min_interval_seconds: float = 0.0,
    ):
        self._provider = provider
        self._cache_ttl = cache_ttl_seconds
        self._min_interval = min_interval_seconds
        self._quote_cache: dict[str, tuple[Quote, datetime]] = {}
        self._cache_lock = threading.Lock()
        self._throttle_lock = threading.Lock()
        self._last_call: Optional[float] = None

    def get_quote(self, symbol: str) -> Quote:
        """
        Current quote for a symbol.

        Raises PriceUnavailable when the provider fails or has no price.
        """
        symbol = symbol.strip().upper()
        cached = self._cached_quote(symbol)
        if cached is not None:
            return cached

        try:
            self._throttle()
            quote = self._provider.get_quote(symbol)
        except Exception as exc:
            logger.warning("Quote fetch failed for %s: %s", symbol, exc)
            raise PriceUnavailable(symbol, str(exc)) from exc

        if quote is None or quote.price is None or quote.price <= 0:
            raise PriceUnavailable(symbol, "no price returned")

        with self._cache_lock:
            self._quote_cache[symbol] = (quote, now_eastern())
        return quote

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """Quotes for several symbols; symbols without a price are left out."""
        result: dict[str, Quote] = {}
        for symbol in symbols:
            try:
                result[symbol.upper()] = self.get_quote(symbol)
            except PriceUnavailable:
                continue
        return result

    def get_daily_history(self, symbol: str, limit: int) -> list[PricePoint]:
        """
        Up to `limit` daily bars, ascending and without duplicate timestamps.

        Provider errors propagate unchanged.
        """
        symbol = symbol.strip().upper()
        self._throttle()
        bars = self._provider.get_daily_history(symbol, limit)
        return sanitize_history(bars)[-limit:] if limit > 0 else []

    def invalidate(self, symbol: Optional[str] = None) -> None:
        """Drop one cached quote, or all of them."""
        with self._cache_lock:
            if symbol is None:
                self._quote_cache.clear()
            else:
                self._quote_cache.pop(symbol.upper(), None)

    def _cached_quote(self, symbol: str) -> Optional[Quote]:
        with self._cache_lock:
            entry = self._quote_cache.get(symbol)
        if entry is None:
            return None
        quote, cached_at = entry
        if (now_eastern() - cached_at).total_seconds() < self._cache_ttl:
            return quote
        return None

    def _throttle(self) -> None:
        """Block until min_interval has passed since the previous provider call."""
        if self._min_interval <= 0:
            return
        with self._throttle_lock:
            now = time.monotonic()
            if self._last_call is not None:
                wait = self._min_interval - (now - self._last_call)
                if wait > 0:
                    time.sleep(wait)
            self._last_call = time.monotonic()
