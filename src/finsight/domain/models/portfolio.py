"""Portfolio domain models: positions, summaries and order records."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from finsight.domain.models.enums import OrderSide, OrderStatus

ZERO = Decimal("0")
_CENTS = Decimal("0.01")
_BASIS_PLACES = Decimal("0.000001")


def quantize_money(value: Decimal) -> Decimal:
    """Round a cash amount to cents."""
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass
class Position:
    """
    Holdings of one symbol for one user.

    quantity is always > 0 for a stored row; a position that reaches zero is
    deleted. version is the optimistic concurrency counter bumped on every
    write.
    """

    user_id: str
    symbol: str
    quantity: Decimal
    cost_basis: Decimal
    current_price: Decimal = field(default_factory=lambda: ZERO)
    market_value: Decimal = field(default_factory=lambda: ZERO)
    unrealized_pl: Decimal = field(default_factory=lambda: ZERO)
    unrealized_plpc: Decimal = field(default_factory=lambda: ZERO)
    version: int = 0
    updated_at: Optional[datetime] = field(default=None)

    @property
    def cost_value(self) -> Decimal:
        """Total amount paid for the shares still held."""
        return self.cost_basis * self.quantity

    def revalue(self, price: Decimal) -> None:
        """Recompute market value and unrealized P/L at the given price."""
        self.current_price = price
        self.market_value = quantize_money(self.quantity * price)
        self.unrealized_pl = quantize_money(self.market_value - self.cost_value)
        cost_value = self.cost_value
        if cost_value > ZERO:
            self.unrealized_plpc = (self.unrealized_pl / cost_value * 100).quantize(
                _CENTS, rounding=ROUND_HALF_UP
            )
        else:
            self.unrealized_plpc = ZERO


def weighted_average_cost(
    old_quantity: Decimal,
    old_cost_basis: Decimal,
    fill_quantity: Decimal,
    fill_price: Decimal,
) -> Decimal:
    """Cost basis per share after adding fill_quantity shares at fill_price."""
    new_quantity = old_quantity + fill_quantity
    if new_quantity <= ZERO:
        return ZERO
    total = old_cost_basis * old_quantity + fill_price * fill_quantity
    return (total / new_quantity).quantize(_BASIS_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class PortfolioSummary:
    """
    Per-user cash and equity.

    cash >= 0 always. equity is the sum of position market values and does
    not include cash.
    """

    user_id: str
    cash: Decimal = field(default_factory=lambda: ZERO)
    equity: Decimal = field(default_factory=lambda: ZERO)
    version: int = 0
    updated_at: Optional[datetime] = field(default=None)

    @property
    def total_value(self) -> Decimal:
        return self.cash + self.equity


@dataclass(frozen=True)
class Order:
    """
    Immutable record of one trade attempt.

    Written for fills and for rejections alike; independent of the current
    Position state.
    """

    order_id: str
    user_id: str
    symbol: str
    quantity: Decimal
    side: OrderSide
    status: OrderStatus
    created_at: datetime
    price: Optional[Decimal] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.side, str):
            object.__setattr__(self, "side", OrderSide(self.side))
        if isinstance(self.status, str):
            object.__setattr__(self, "status", OrderStatus(self.status))


@dataclass(frozen=True)
class Conversation:
    """One assistant turn: the user's message and the reply sent back."""

    conversation_id: str
    user_id: str
    user_message: str
    assistant_response: str
    created_at: datetime
