"""Signal fusion: indicator snapshot -> predicted price, confidence, risk and recommendation."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from finsight.core.exceptions import ValidationError
from finsight.domain.models import IndicatorSnapshot, RiskLevel, Recommendation


@dataclass(frozen=True)
class SignalRule:
    """One (signal, condition, delta) entry of the scoring table."""

    signal: str
    condition: Callable[[IndicatorSnapshot], bool]
    delta: Decimal


# At most one rule per signal fires; rules are evaluated in table order.
SCORING_RULES: tuple[SignalRule, ...] = (
    SignalRule("rsi", lambda s: s.rsi > 70, Decimal("-0.02")),
    SignalRule("rsi", lambda s: s.rsi < 30, Decimal("0.02")),
    SignalRule("macd", lambda s: s.macd > 0, Decimal("0.01")),
    SignalRule("macd", lambda s: s.macd <= 0, Decimal("-0.01")),
    SignalRule("trend", lambda s: s.last_price > s.sma_50 > s.sma_200, Decimal("0.01")),
    SignalRule("trend", lambda s: s.last_price < s.sma_50 < s.sma_200, Decimal("-0.01")),
    SignalRule("bollinger", lambda s: s.last_price < s.bollinger_lower, Decimal("0.015")),
    SignalRule("bollinger", lambda s: s.last_price > s.bollinger_upper, Decimal("-0.015")),
)

# (threshold, recommendation) checked top to bottom against the predicted move
_BUY_THRESHOLDS = (
    (Decimal("0.03"), Recommendation.STRONG_BUY),
    (Decimal("0.01"), Recommendation.BUY),
)
_SELL_THRESHOLDS = (
    (Decimal("-0.03"), Recommendation.STRONG_SELL),
    (Decimal("-0.01"), Recommendation.SELL),
)

BASE_CONFIDENCE = 60
CONFIDENCE_STEP = 8
MAX_CONFIDENCE = 95

HIGH_RISK_VOLATILITY = 0.03
LOW_RISK_VOLATILITY = 0.01


@dataclass(frozen=True)
class FusionResult:
    """Output of signal fusion for one snapshot."""

    predicted_move: Decimal
    predicted_price: float
    confidence_level: int
    risk_level: RiskLevel
    recommendation: Recommendation
    fired: dict[str, Decimal]


def fired_signals(snapshot: IndicatorSnapshot) -> dict[str, Decimal]:
    """Return signal name -> delta for every signal that fired."""
    fired: dict[str, Decimal] = {}
    for rule in SCORING_RULES:
        if rule.signal in fired:
            continue
        if rule.condition(snapshot):
            fired[rule.signal] = rule.delta
    return fired


def agreement_count(fired: dict[str, Decimal], move: Decimal) -> int:
    """Number of fired signals pointing the same way as the final move."""
    if move == 0:
        return 0
    return sum(1 for delta in fired.values() if (delta > 0) == (move > 0))


def confidence_for(agreement: int) -> int:
    return min(MAX_CONFIDENCE, BASE_CONFIDENCE + agreement * CONFIDENCE_STEP)


def classify_risk(atr_value: float, last_price: float) -> RiskLevel:
    """Bucket ATR relative to price into Low / Medium / High."""
    volatility = atr_value / last_price
    if volatility > HIGH_RISK_VOLATILITY:
        return RiskLevel.HIGH
    if volatility < LOW_RISK_VOLATILITY:
        return RiskLevel.LOW
    return RiskLevel.MEDIUM


def recommend(move: Decimal) -> Recommendation:
    """Map the predicted move onto the five-step recommendation scale."""
    for threshold, recommendation in _BUY_THRESHOLDS:
        if move > threshold:
            return recommendation
    for threshold, recommendation in _SELL_THRESHOLDS:
        if move < threshold:
            return recommendation
    return Recommendation.HOLD


def fuse(snapshot: IndicatorSnapshot) -> FusionResult:
    """
    Combine an indicator snapshot into a prediction.

    Deterministic: the same snapshot always yields the same result.
    """
    if snapshot.last_price <= 0:
        raise ValidationError(f"Last price must be positive, got {snapshot.last_price}")

    fired = fired_signals(snapshot)
    move = sum(fired.values(), Decimal("0"))
    predicted_price = snapshot.last_price * (1 + float(move))

    return FusionResult(
        predicted_move=move,
        predicted_price=predicted_price,
        confidence_level=confidence_for(agreement_count(fired, move)),
        risk_level=classify_risk(snapshot.atr, snapshot.last_price),
        recommendation=recommend(move),
        fired=fired,
    )
