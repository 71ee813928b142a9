"""View models for service outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from finsight.domain.models import (
    Order,
    OrderSide,
    Position,
    PortfolioSummary,
    Prediction,
    TradeIntent,
    TradeState,
)


@dataclass
class Quote:
    """Current market quote for a symbol."""

    symbol: str
    price: Decimal
    change: Decimal
    change_percent: Decimal
    as_of: datetime


@dataclass(frozen=True)
class OrderFill:
    """What the trade gateway reports for a submitted market order."""

    order_id: str
    status: str
    fill_price: Decimal
    filled_quantity: Optional[Decimal] = None


@dataclass
class TradeRequest:
    """Input to the trade engine."""

    user_id: str
    symbol: str
    side: OrderSide
    quantity: Decimal

    def __post_init__(self) -> None:
        if isinstance(self.side, str):
            self.side = OrderSide(self.side.lower())


@dataclass
class TradeResult:
    """Outcome of an executed trade after reconciliation."""

    order: Order
    state: TradeState
    position: Optional[Position]
    summary: PortfolioSummary
    attempts: int = 1


@dataclass
class PortfolioView:
    """Read model for dashboards: summary plus open positions."""

    user_id: str
    cash: Decimal
    equity: Decimal
    positions: list[Position] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    @property
    def total_value(self) -> Decimal:
        return self.cash + self.equity


@dataclass(frozen=True)
class SkippedSymbol:
    """A symbol the prediction batch could not produce a result for."""

    symbol: str
    reason: str


@dataclass
class PredictionBatchResult:
    """Outcome of one prediction generation cycle."""

    predictions: list[Prediction] = field(default_factory=list)
    skipped: list[SkippedSymbol] = field(default_factory=list)

    @property
    def produced_symbols(self) -> list[str]:
        return [p.symbol for p in self.predictions]


@dataclass
class AssistantReply:
    """Response returned to the chat assistant caller."""

    success: bool
    message: str
    intent: Optional[TradeIntent] = None
    data: Optional[dict[str, Any]] = None


@dataclass
class IngestSummary:
    """Result of storing fetched bars (duplicates are skipped)."""

    symbol: str
    inserted_count: int = 0
    skipped_count: int = 0
