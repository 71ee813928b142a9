"""Prediction domain models."""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Optional

from finsight.domain.models.enums import RiskLevel, Recommendation


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Indicator values a prediction was computed from (persisted as features_used)."""

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

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "IndicatorSnapshot":
        return cls(**{k: float(data[k]) for k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class Prediction:
    """
    A single generated price prediction.

    Immutable after creation; predictions for a symbol accumulate over time
    rather than replacing each other.
    """

    symbol: str
    predicted_price: float
    confidence_level: int
    risk_level: RiskLevel
    recommendation: Recommendation
    prediction_date: datetime
    target_date: datetime
    model_version: str
    features_used: IndicatorSnapshot
    prediction_id: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.risk_level, str):
            object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))
        if isinstance(self.recommendation, str):
            object.__setattr__(self, "recommendation", Recommendation(self.recommendation))
