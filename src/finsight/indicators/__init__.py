"""Indicator library - pure numeric functions over price series."""

from finsight.indicators.technical import (
    BollingerBands,
    EMA_SEED_FIRST,
    EMA_SEED_SMA,
    sma,
    ema,
    rsi,
    macd,
    bollinger_bands,
    true_ranges,
    atr,
    compute_snapshot,
)

__all__ = [
    "BollingerBands",
    "EMA_SEED_FIRST",
    "EMA_SEED_SMA",
    "sma",
    "ema",
    "rsi",
    "macd",
    "bollinger_bands",
    "true_ranges",
    "atr",
    "compute_snapshot",
]
