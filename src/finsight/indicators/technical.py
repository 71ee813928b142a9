"""
Technical indicators over an ordered (oldest first) price series.

Every function is pure: inputs are never mutated and nothing is cached.
A series that is too short raises InsufficientHistory instead of returning
0 or NaN.

EMA seeding: by default the EMA is seeded with the first value of the
series and the smoothing multiplier 2/(period+1) is applied across the
rest. This reproduces the legacy heuristic exactly; it biases early values
towards the first close. seed="sma" seeds with the SMA of the first
`period` closes instead (the textbook definition).
"""

import math
from dataclasses import dataclass
from typing import Sequence

from finsight.core.exceptions import InsufficientHistory, ValidationError
from finsight.domain.models import IndicatorSnapshot, PricePoint

RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26
BOLLINGER_PERIOD = 20
BOLLINGER_STD = 2.0
ATR_PERIOD = 14

EMA_SEED_FIRST = "first"
EMA_SEED_SMA = "sma"


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


def _require(values: Sequence, needed: int, name: str) -> None:
    if needed <= 0:
        raise ValidationError(f"{name} period must be positive, got {needed}")
    if len(values) < needed:
        raise InsufficientHistory(
            f"{name} needs at least {needed} data points, got {len(values)}",
            required=needed,
            available=len(values),
        )


def sma(closes: Sequence[float], n: int) -> float:
    """Arithmetic mean of the last n closes."""
    _require(closes, n, "SMA")
    window = closes[-n:]
    return math.fsum(window) / n


def ema(closes: Sequence[float], period: int, seed: str = EMA_SEED_FIRST) -> float:
    """Exponential moving average of the whole series, returned at its last point."""
    if seed == EMA_SEED_SMA:
        _require(closes, period, "EMA")
        value = sma(closes[:period], period)
        rest = closes[period:]
    elif seed == EMA_SEED_FIRST:
        _require(closes, 1, "EMA")
        if period <= 0:
            raise ValidationError(f"EMA period must be positive, got {period}")
        value = float(closes[0])
        rest = closes[1:]
    else:
        raise ValidationError(f"Unknown EMA seed: {seed}")

    multiplier = 2.0 / (period + 1)
    for price in rest:
        value = (price - value) * multiplier + value
    return value


def rsi(closes: Sequence[float], period: int = RSI_PERIOD) -> float:
    """
    Relative Strength Index over the last `period` deltas.

    Uses simple averages of gains and losses. Saturates at 100 when there
    were no losses in the window.
    """
    _require(closes, period + 1, "RSI")
    window = closes[-(period + 1):]
    gains = 0.0
    losses = 0.0
    for prev, curr in zip(window, window[1:]):
        delta = curr - prev
        if delta > 0:
            gains += delta
        else:
            losses -= delta
    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def macd(closes: Sequence[float], seed: str = EMA_SEED_FIRST) -> float:
    """MACD line: EMA(12) - EMA(26) over the same closes."""
    if seed == EMA_SEED_SMA:
        _require(closes, MACD_SLOW, "MACD")
    return ema(closes, MACD_FAST, seed=seed) - ema(closes, MACD_SLOW, seed=seed)


def bollinger_bands(
    closes: Sequence[float],
    period: int = BOLLINGER_PERIOD,
    num_std: float = BOLLINGER_STD,
) -> BollingerBands:
    """SMA of the last `period` closes +/- num_std population standard deviations."""
    _require(closes, period, "Bollinger Bands")
    window = closes[-period:]
    middle = math.fsum(window) / period
    variance = math.fsum((c - middle) ** 2 for c in window) / period
    std = math.sqrt(variance)
    return BollingerBands(
        upper=middle + num_std * std,
        middle=middle,
        lower=middle - num_std * std,
    )


def true_ranges(bars: Sequence[PricePoint]) -> list[float]:
    """True range for every bar after the first."""
    ranges = []
    for prev, bar in zip(bars, bars[1:]):
        ranges.append(
            max(
                bar.high - bar.low,
                abs(bar.high - prev.close),
                abs(bar.low - prev.close),
            )
        )
    return ranges


def atr(bars: Sequence[PricePoint], period: int = ATR_PERIOD) -> float:
    """Average True Range: mean of the last `period` true ranges."""
    _require(bars, period + 1, "ATR")
    ranges = true_ranges(bars[-(period + 1):])
    return math.fsum(ranges) / period


def compute_snapshot(bars: Sequence[PricePoint], seed: str = EMA_SEED_FIRST) -> IndicatorSnapshot:
    """Compute the full indicator snapshot used by signal fusion."""
    closes = [bar.close for bar in bars]
    # The longest window goes first so a short series fails with the real requirement
    sma_200 = sma(closes, 200)
    bands = bollinger_bands(closes)
    return IndicatorSnapshot(
        last_price=closes[-1],
        rsi=rsi(closes),
        macd=macd(closes, seed=seed),
        ema_20=ema(closes, 20, seed=seed),
        sma_50=sma(closes, 50),
        sma_200=sma_200,
        bollinger_upper=bands.upper,
        bollinger_middle=bands.middle,
        bollinger_lower=bands.lower,
        atr=atr(bars),
    )
