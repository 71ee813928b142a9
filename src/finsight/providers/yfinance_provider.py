"""
Market data provider backed by Yahoo Finance via yfinance.

Quotes come from the last two daily closes; history uses unadjusted daily
OHLCV. Any upstream failure or empty frame raises so callers can treat it
as a fetch failure for that symbol.
"""

from datetime import datetime
from decimal import Decimal

from finsight.core.timezone import now_eastern, to_eastern
from finsight.domain.models import PricePoint
from finsight.domain.views import Quote


# Lazy import so tests can patch before import
def _get_yf():
    import yfinance as yf
    return yf


def _history_period(limit: int) -> str:
    """Smallest yfinance period string that covers `limit` trading days."""
    if limit <= 5:
        return "5d"
    if limit <= 21:
        return "1mo"
    if limit <= 63:
        return "3mo"
    if limit <= 126:
        return "6mo"
    if limit <= 252:
        return "1y"
    if limit <= 504:
        return "2y"
    return "5y"


def _to_datetime(index_value) -> datetime:
    # pandas Timestamp -> tz-aware python datetime in US/Eastern
    dt = index_value.to_pydatetime() if hasattr(index_value, "to_pydatetime") else index_value
    return to_eastern(dt)


class YFinanceMarketDataProvider:
    """Fetches quotes and daily bars from Yahoo Finance."""

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip().upper()
        bars = self.get_daily_history(symbol, 2)
        if len(bars) < 2:
            raise LookupError(f"Not enough recent data to quote {symbol}")
        price = Decimal(str(bars[-1].close)).quantize(Decimal("0.01"))
        prev_close = Decimal(str(bars[-2].close)).quantize(Decimal("0.01"))
        change = price - prev_close
        change_pct = (change / prev_close * 100).quantize(Decimal("0.01")) if prev_close else Decimal("0")
        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_pct,
            as_of=now_eastern(),
        )

    def get_daily_history(self, symbol: str, limit: int) -> list[PricePoint]:
        symbol = symbol.strip().upper()
        if limit <= 0:
            return []
        yf = _get_yf()
        frame = yf.Ticker(symbol).history(
            period=_history_period(limit),
            interval="1d",
            auto_adjust=False,
        )
        if frame is None or frame.empty:
            raise LookupError(f"No price history returned for {symbol}")

        bars = []
        for index_value, row in frame.tail(limit).iterrows():
            close = row.get("Close")
            if close is None or close != close:  # NaN
                continue
            bars.append(
                PricePoint(
                    symbol=symbol,
                    timestamp=_to_datetime(index_value),
                    open=float(row.get("Open", close)),
                    high=float(row.get("High", close)),
                    low=float(row.get("Low", close)),
                    close=float(close),
                    volume=float(row.get("Volume", 0) or 0),
                )
            )
        return bars
