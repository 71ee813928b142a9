"""Portfolio read model, cash deposits and order history."""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from finsight.core.exceptions import PriceUnavailable, ValidationError
from finsight.domain.models import Order, PortfolioSummary, quantize_money
from finsight.domain.models.portfolio import ZERO
from finsight.domain.views import PortfolioView
from finsight.repositories.protocols import OrderRepository, PortfolioRepository
from finsight.services.market_data_service import MarketDataService

logger = logging.getLogger(__name__)


class PortfolioService:
    """Reads positions and summaries; funds accounts."""

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        order_repo: OrderRepository,
        market_data: Optional[MarketDataService] = None,
    ):
        self._portfolio_repo = portfolio_repo
        self._order_repo = order_repo
        self._market_data = market_data

    def get_portfolio(self, user_id: str, live_prices: bool = False) -> PortfolioView:
        """
        Summary plus open positions for a user.

        With live_prices, positions are revalued at current quotes for the
        returned view only; stored rows keep the price of their last fill.
        A symbol without a quote keeps its stored valuation.
        """
        summary = self._portfolio_repo.get_summary(user_id) or PortfolioSummary(user_id=user_id)
        positions = self._portfolio_repo.list_positions(user_id)

        if live_prices and self._market_data is not None and positions:
            revalued = []
            for position in positions:
                position = replace(position)
                try:
                    position.revalue(self._market_data.get_quote(position.symbol).price)
                except PriceUnavailable:
                    logger.warning("Keeping stored valuation for %s", position.symbol)
                revalued.append(position)
            positions = revalued
            equity = quantize_money(sum((p.market_value for p in positions), ZERO))
        else:
            equity = summary.equity

        return PortfolioView(
            user_id=user_id,
            cash=summary.cash,
            equity=equity,
            positions=positions,
            updated_at=summary.updated_at,
        )

    def deposit_cash(self, user_id: str, amount: Decimal) -> PortfolioSummary:
        """Add cash to a user's account."""
        if not user_id:
            raise ValidationError("User ID is required")
        if amount is None or amount <= 0:
            raise ValidationError(f"Deposit amount must be positive, got {amount}")
        summary = self._portfolio_repo.deposit_cash(user_id, quantize_money(amount))
        logger.info("Deposited %s for %s (cash now %s)", amount, user_id, summary.cash)
        return summary

    def list_orders(self, user_id: str, limit: Optional[int] = None) -> list[Order]:
        """Order history for a user, newest first."""
        return self._order_repo.list_by_user(user_id, limit=limit)
