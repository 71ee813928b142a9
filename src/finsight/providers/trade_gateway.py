"""Trade execution gateway protocol and a paper-trading implementation."""

import logging
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol

from finsight.core.exceptions import OrderRejected
from finsight.domain.models import OrderSide
from finsight.domain.views import OrderFill

if TYPE_CHECKING:
    from finsight.services.market_data_service import MarketDataService

logger = logging.getLogger(__name__)


class TradeGateway(Protocol):
    """
    Places market orders.

    submit_order must raise OrderRejected when the order is refused.
    Callers never resubmit an order after calling this.
    """

    def submit_order(self, symbol: str, quantity: Decimal, side: OrderSide) -> OrderFill:
        ...


class PaperTradeGateway:
    """
    Fills every market order immediately at the current quote.

    The provider is the caching MarketDataService, so the fill price is the
    quote the trade engine checked affordability against.
    """

    def __init__(self, provider: "MarketDataService"):
        self._provider = provider

    def submit_order(self, symbol: str, quantity: Decimal, side: OrderSide) -> OrderFill:
        if quantity <= 0:
            raise OrderRejected(f"qty must be > 0 (got {quantity})")
        try:
            quote = self._provider.get_quote(symbol)
        except Exception as exc:
            raise OrderRejected(f"asset {symbol} is not tradable: {exc}") from exc

        order_id = str(uuid.uuid4())
        logger.info("Paper %s %s %s filled at %s (%s)", side.value, quantity, symbol, quote.price, order_id)
        return OrderFill(
            order_id=order_id,
            status="filled",
            fill_price=quote.price,
            filled_quantity=quantity,
        )
