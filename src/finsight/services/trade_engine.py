"""
Trade execution and reconciliation engine.

A trade moves Validated -> Priced -> Submitted -> Filled, or ends in
Rejected. The gateway is called at most once per request; if writing the
fill loses an optimistic-version race, the fill is re-applied to freshly
read state instead of resubmitting the order.
"""

import logging
import threading
import uuid
import weakref
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional

from finsight.core.exceptions import (
    AppError,
    InsufficientFunds,
    InsufficientShares,
    OrderRejected,
    ReconciliationConflict,
    TradeCancelled,
    ValidationError,
)
from finsight.core.timezone import now_eastern
from finsight.domain.models import (
    Order,
    OrderSide,
    OrderStatus,
    Position,
    PortfolioSummary,
    TradeState,
    quantize_money,
    weighted_average_cost,
)
from finsight.domain.models.portfolio import ZERO
from finsight.domain.views import OrderFill, TradeRequest, TradeResult
from finsight.providers.trade_gateway import TradeGateway
from finsight.repositories.protocols import OrderRepository, PortfolioRepository
from finsight.services.market_data_service import MarketDataService

logger = logging.getLogger(__name__)

FILLED_STATUS = "filled"

_locks_guard = threading.Lock()
_position_locks: "weakref.WeakValueDictionary[tuple[str, str], threading.Lock]" = (
    weakref.WeakValueDictionary()
)


@contextmanager
def position_lock(user_id: str, symbol: str) -> Iterator[None]:
    """Serialize trades on one (user, symbol) within this process."""
    key = (user_id, symbol)
    with _locks_guard:
        lock = _position_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _position_locks[key] = lock
    with lock:
        yield


class TradeEngine:
    """Validates, prices, submits and reconciles market orders."""

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        order_repo: OrderRepository,
        market_data: MarketDataService,
        gateway: TradeGateway,
        max_reconcile_attempts: int = 3,
    ):
        self._portfolio_repo = portfolio_repo
        self._order_repo = order_repo
        self._market_data = market_data
        self._gateway = gateway
        self._max_attempts = max(1, max_reconcile_attempts)

    def execute(
        self,
        request: TradeRequest,
        cancel_event: Optional[threading.Event] = None,
    ) -> TradeResult:
        """
        Execute one market order end to end.

        Every attempt that is not cancelled leaves exactly one Order record.
        Raises the AppError that rejected the trade; in that case portfolio
        state is unchanged.
        """
        request.symbol = (request.symbol or "").strip().upper()
        with position_lock(request.user_id, request.symbol):
            return self._execute_locked(request, cancel_event)

    def _execute_locked(
        self,
        request: TradeRequest,
        cancel_event: Optional[threading.Event],
    ) -> TradeResult:
        price: Optional[Decimal] = None
        try:
            self._validate(request)
            price = self._market_data.get_quote(request.symbol).price
            if request.side == OrderSide.BUY:
                self._check_affordable(request, price)
            if cancel_event is not None and cancel_event.is_set():
                raise TradeCancelled(request.symbol)
        except TradeCancelled:
            logger.info("Trade cancelled before submission: %s %s", request.side.value, request.symbol)
            raise
        except AppError as exc:
            self._reject(request, price, exc)
            raise

        fill = self._submit(request, price)
        fill_quantity = self._confirm_fill(request, fill)

        try:
            position, summary, attempts = self._reconcile(request, fill.fill_price, fill_quantity)
        except AppError as exc:
            self._reject(request, fill.fill_price, exc, order_id=fill.order_id)
            raise

        order = self._order_repo.create(
            Order(
                order_id=fill.order_id,
                user_id=request.user_id,
                symbol=request.symbol,
                quantity=fill_quantity,
                side=request.side,
                status=OrderStatus.FILLED,
                created_at=now_eastern(),
                price=fill.fill_price,
                message=fill.status,
            )
        )
        logger.info(
            "Filled %s %s %s at %s for %s (order %s)",
            request.side.value,
            fill_quantity,
            request.symbol,
            fill.fill_price,
            request.user_id,
            fill.order_id,
        )
        return TradeResult(
            order=order,
            state=TradeState.FILLED,
            position=position,
            summary=summary,
            attempts=attempts,
        )

    # Pre-submission checks

    def _validate(self, request: TradeRequest) -> None:
        if not request.symbol:
            raise ValidationError("Symbol is required")
        if request.quantity is None or request.quantity <= 0:
            raise ValidationError(f"Quantity must be greater than zero, got {request.quantity}")
        if request.side == OrderSide.SELL:
            position = self._portfolio_repo.get_position(request.user_id, request.symbol)
            held = position.quantity if position else ZERO
            if held < request.quantity:
                raise InsufficientShares(request.symbol, str(request.quantity), str(held))

    def _check_affordable(self, request: TradeRequest, price: Decimal) -> None:
        summary = self._portfolio_repo.get_summary(request.user_id)
        cash = summary.cash if summary else ZERO
        cost = quantize_money(price * request.quantity)
        if cost > cash:
            raise InsufficientFunds(str(cost), str(cash))

    def _submit(self, request: TradeRequest, price: Decimal) -> OrderFill:
        """Send the order once. Any gateway failure becomes OrderRejected."""
        try:
            return self._gateway.submit_order(request.symbol, request.quantity, request.side)
        except OrderRejected as exc:
            self._reject(request, price, exc)
            raise
        except Exception as exc:
            rejected = OrderRejected(str(exc))
            self._reject(request, price, rejected)
            raise rejected from exc

    def _confirm_fill(self, request: TradeRequest, fill: OrderFill) -> Decimal:
        """
        Return the quantity the gateway actually filled.

        A missing filled quantity means the whole order. An unfilled status,
        or a quantity outside (0, requested], is recorded as a rejection
        under the gateway's order id and nothing is reconciled.
        """
        quantity = request.quantity if fill.filled_quantity is None else fill.filled_quantity
        status = (fill.status or "").strip().lower()
        if status == FILLED_STATUS and ZERO < quantity <= request.quantity:
            return quantity

        rejected = OrderRejected(
            f"Order {fill.order_id} was not filled (status: {fill.status}, filled: {quantity})"
        )
        self._reject(request, fill.fill_price, rejected, order_id=fill.order_id)
        raise rejected

    # Reconciliation

    def _reconcile(
        self,
        request: TradeRequest,
        fill_price: Decimal,
        fill_quantity: Decimal,
    ) -> tuple[Optional[Position], PortfolioSummary, int]:
        """Apply a fill to current state, re-reading and retrying on version conflicts."""
        for attempt in range(1, self._max_attempts + 1):
            current = self._portfolio_repo.get_position(request.user_id, request.symbol)
            summary = self._portfolio_repo.get_summary(request.user_id)
            position, cash = self._apply_fill(request, current, summary, fill_price, fill_quantity)
            try:
                stored, new_summary = self._portfolio_repo.apply_reconciliation(
                    position,
                    cash,
                    expected_position_version=current.version if current else None,
                    expected_summary_version=summary.version if summary else None,
                )
                return stored, new_summary, attempt
            except ReconciliationConflict:
                logger.warning(
                    "Reconciliation conflict for %s/%s (attempt %d of %d)",
                    request.user_id,
                    request.symbol,
                    attempt,
                    self._max_attempts,
                )
                if attempt == self._max_attempts:
                    raise
        raise ReconciliationConflict(request.user_id, request.symbol)

    @staticmethod
    def _apply_fill(
        request: TradeRequest,
        current: Optional[Position],
        summary: Optional[PortfolioSummary],
        fill_price: Decimal,
        fill_quantity: Decimal,
    ) -> tuple[Position, Decimal]:
        """Return the reconciled position (quantity may be 0) and the new cash balance."""
        old_quantity = current.quantity if current else ZERO
        old_basis = current.cost_basis if current else ZERO
        cash = summary.cash if summary else ZERO
        notional = quantize_money(fill_price * fill_quantity)

        if request.side == OrderSide.BUY:
            new_quantity = old_quantity + fill_quantity
            cost_basis = weighted_average_cost(old_quantity, old_basis, fill_quantity, fill_price)
            new_cash = cash - notional
        else:
            new_quantity = old_quantity - fill_quantity
            if new_quantity < 0:
                raise InsufficientShares(request.symbol, str(fill_quantity), str(old_quantity))
            cost_basis = old_basis if new_quantity > 0 else ZERO
            new_cash = cash + notional

        if new_cash < 0:
            raise InsufficientFunds(str(notional), str(cash))

        position = Position(
            user_id=request.user_id,
            symbol=request.symbol,
            quantity=new_quantity,
            cost_basis=cost_basis,
        )
        position.revalue(fill_price)
        return position, new_cash

    def _reject(
        self,
        request: TradeRequest,
        price: Optional[Decimal],
        error: AppError,
        order_id: Optional[str] = None,
    ) -> None:
        logger.warning(
            "Rejected %s %s %s for %s: %s",
            request.side.value,
            request.quantity,
            request.symbol,
            request.user_id,
            error.message,
        )
        self._order_repo.create(
            Order(
                order_id=order_id or f"local-{uuid.uuid4()}",
                user_id=request.user_id,
                symbol=request.symbol,
                quantity=request.quantity if request.quantity is not None else ZERO,
                side=request.side,
                status=OrderStatus.REJECTED,
                created_at=now_eastern(),
                price=price,
                message=error.message,
            )
        )
