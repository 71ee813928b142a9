"""Trade intent model."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from finsight.domain.models.enums import IntentAction


@dataclass(frozen=True)
class TradeIntent:
    """
    Typed interpretation of a user instruction.

    Transient: never persisted on its own, only through the order it
    may produce.
    """

    action: IntentAction
    symbol: Optional[str] = None
    quantity: Optional[Decimal] = None
    confidence: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            object.__setattr__(self, "action", IntentAction(self.action))

    @property
    def is_trade(self) -> bool:
        return self.action in (IntentAction.BUY_STOCK, IntentAction.SELL_STOCK)
