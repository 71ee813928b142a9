"""Market data domain models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PricePoint:
    """
    One daily OHLCV bar for a symbol.

    Immutable once stored. A symbol's series is ordered ascending by
    timestamp and never holds two bars with the same timestamp.
    """

    symbol: str
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
