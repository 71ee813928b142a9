"""Stub market data provider for offline/testing use."""

import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from finsight.core.timezone import EASTERN_TZ, now_eastern
from finsight.domain.models import PricePoint
from finsight.domain.views import Quote


# Deterministic base prices for common symbols
_STUB_PRICES: dict[str, float] = {
    "AAPL": 174.82,
    "MSFT": 328.79,
    "NVDA": 437.53,
    "AMZN": 132.65,
    "TSLA": 224.57,
    "GOOGL": 142.75,
    "META": 505.50,
    "SPY": 485.25,
}

_HISTORY_DAYS = 260


def _symbol_seed(symbol: str, seed: int) -> int:
    # str hash() is salted per process; keep the walk stable across runs
    return seed * 1_000_003 + sum((i + 1) * ord(c) for i, c in enumerate(symbol))


def _business_days_back(end: datetime, count: int) -> list[datetime]:
    days: list[datetime] = []
    day = end
    while len(days) < count:
        if day.weekday() < 5:
            days.append(day)
        day -= timedelta(days=1)
    days.reverse()
    return days


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Each symbol gets a seeded random walk of daily bars around its base
    price; the quote is the last close of that walk.
    """

    def __init__(self, seed: int = 42, as_of: Optional[datetime] = None):
        """Initialize with a random seed and an optional fixed 'today'."""
        self._seed = seed
        self._as_of = as_of

    def get_quote(self, symbol: str) -> Quote:
        """Return the stub quote for a symbol."""
        bars = self.get_daily_history(symbol, 2)
        last, prev = bars[-1].close, bars[-2].close
        price = Decimal(str(last)).quantize(Decimal("0.01"))
        prev_close = Decimal(str(prev)).quantize(Decimal("0.01"))
        change = price - prev_close
        return Quote(
            symbol=symbol.upper(),
            price=price,
            change=change,
            change_percent=(change / prev_close * 100).quantize(Decimal("0.01")),
            as_of=self._as_of or now_eastern(),
        )

    def get_daily_history(self, symbol: str, limit: int) -> list[PricePoint]:
        """Return up to `limit` daily bars (the walk is _HISTORY_DAYS long)."""
        symbol = symbol.upper()
        bars = self._walk(symbol)
        return bars[-limit:] if limit > 0 else []

    def _walk(self, symbol: str) -> list[PricePoint]:
        rng = random.Random(_symbol_seed(symbol, self._seed))
        price = _STUB_PRICES.get(symbol, 50 + rng.random() * 200)

        as_of = self._as_of or now_eastern()
        end = EASTERN_TZ.localize(datetime(as_of.year, as_of.month, as_of.day, 16, 0))
        bars = []
        for day in _business_days_back(end, _HISTORY_DAYS):
            open_price = price
            close = max(1.0, open_price * (1 + rng.uniform(-0.015, 0.015)))
            high = max(open_price, close) * (1 + rng.uniform(0, 0.01))
            low = min(open_price, close) * (1 - rng.uniform(0, 0.01))
            bars.append(
                PricePoint(
                    symbol=symbol,
                    timestamp=day,
                    open=round(open_price, 2),
                    high=round(high, 2),
                    low=round(low, 2),
                    close=round(close, 2),
                    volume=float(rng.randint(1_000_000, 50_000_000)),
                )
            )
            price = close
        return bars
