"""Pydantic schemas for prediction endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from finsight.domain.models.enums import RiskLevel, Recommendation


class GeneratePredictionsRequest(BaseModel):
    """Request schema for a prediction cycle."""

    symbols: Optional[list[str]] = Field(
        default=None,
        description="Symbols to predict; the configured watchlist when omitted",
    )


class IndicatorSnapshotResponse(BaseModel):
    """Indicator values a prediction was computed from."""

    last_price: float
    rsi: float
    macd: float
    ema_20: float
    sma_50: float
    sma_200: float
    bollinger_upper: float
    bollinger_middle: float
    bollinger_lower: float
    atr: float

    model_config = {"from_attributes": True}


class PredictionResponse(BaseModel):
    """Response schema for a stored prediction."""

    prediction_id: str
    symbol: str
    predicted_price: float
    confidence_level: int
    risk_level: RiskLevel
    recommendation: Recommendation
    prediction_date: datetime
    target_date: datetime
    model_version: str
    features_used: IndicatorSnapshotResponse

    model_config = {"from_attributes": True}


class SkippedSymbolResponse(BaseModel):
    symbol: str
    reason: str


class PredictionBatchResponse(BaseModel):
    """Response schema for a prediction cycle."""

    predictions: list[PredictionResponse]
    skipped: list[SkippedSymbolResponse]


class PredictionListResponse(BaseModel):
    predictions: list[PredictionResponse]
    total: int
