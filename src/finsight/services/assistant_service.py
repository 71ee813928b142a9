"""Trading assistant: resolve a chat message and act on it."""

import logging
import threading
import uuid
from decimal import Decimal
from typing import Optional

from finsight.core.exceptions import AppError, IntentParseError, ValidationError
from finsight.core.timezone import now_eastern
from finsight.domain.models import Conversation, IntentAction, OrderSide, TradeIntent
from finsight.domain.views import AssistantReply, TradeRequest
from finsight.providers.llm_client import LLMUnavailableError
from finsight.repositories.protocols import ConversationRepository
from finsight.services.intent_resolver import IntentResolver
from finsight.services.market_data_service import MarketDataService
from finsight.services.portfolio_service import PortfolioService
from finsight.services.trade_engine import TradeEngine

logger = logging.getLogger(__name__)

NOT_UNDERSTOOD = (
    "I couldn't understand that request. Try something like "
    "\"Buy 5 shares of AAPL\" or \"What's the price of MSFT?\"."
)
MODEL_UNAVAILABLE = "I'm having trouble processing your request right now. Please try again later."


def _fmt_quantity(quantity: Decimal) -> str:
    return format(quantity.normalize(), "f")


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


class AssistantService:
    """Routes resolved intents to quotes, trades, portfolio summaries or advice."""

    def __init__(
        self,
        resolver: IntentResolver,
        market_data: MarketDataService,
        trade_engine: TradeEngine,
        portfolio_service: PortfolioService,
        conversation_repo: ConversationRepository,
    ):
        self._resolver = resolver
        self._market_data = market_data
        self._trade_engine = trade_engine
        self._portfolio_service = portfolio_service
        self._conversation_repo = conversation_repo

    def handle(
        self,
        user_id: str,
        message: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> AssistantReply:
        """Answer one chat message and store the turn."""
        if not user_id:
            raise ValidationError("User ID is required")
        if not message or not message.strip():
            raise ValidationError("Message is required")

        try:
            intent = self._resolver.resolve(message)
        except IntentParseError as exc:
            logger.warning("Could not resolve intent for %r: %s", message, exc.message)
            reply = AssistantReply(success=False, message=NOT_UNDERSTOOD)
        except LLMUnavailableError as exc:
            logger.warning("Language model unavailable: %s", exc)
            reply = AssistantReply(success=False, message=MODEL_UNAVAILABLE)
        else:
            reply = self._route(user_id, message, intent, cancel_event)
            reply.intent = intent

        self._conversation_repo.create(
            Conversation(
                conversation_id=str(uuid.uuid4()),
                user_id=user_id,
                user_message=message,
                assistant_response=reply.message,
                created_at=now_eastern(),
            )
        )
        return reply

    def history(self, user_id: str, limit: Optional[int] = None) -> list[Conversation]:
        return self._conversation_repo.list_by_user(user_id, limit=limit)

    def _route(
        self,
        user_id: str,
        message: str,
        intent: TradeIntent,
        cancel_event: Optional[threading.Event],
    ) -> AssistantReply:
        if intent.action == IntentAction.GET_STOCK_PRICE:
            return self._quote(intent)
        if intent.is_trade:
            return self._trade(user_id, intent, cancel_event)
        if intent.action == IntentAction.GET_PORTFOLIO:
            return self._portfolio(user_id)
        return self._advice(message)

    def _quote(self, intent: TradeIntent) -> AssistantReply:
        if not intent.symbol:
            return AssistantReply(
                success=False,
                message="I couldn't determine which stock you're asking about. "
                "Please specify a stock symbol or company name.",
            )
        try:
            quote = self._market_data.get_quote(intent.symbol)
        except AppError as exc:
            return AssistantReply(success=False, message=exc.message)
        return AssistantReply(
            success=True,
            message=(
                f"The current price of {quote.symbol} is {_money(quote.price)}. "
                f"It has changed by {_money(quote.change)} ({quote.change_percent}%) today."
            ),
            data={
                "symbol": quote.symbol,
                "price": str(quote.price),
                "change": str(quote.change),
                "change_percent": str(quote.change_percent),
            },
        )

    def _trade(
        self,
        user_id: str,
        intent: TradeIntent,
        cancel_event: Optional[threading.Event],
    ) -> AssistantReply:
        side = OrderSide.BUY if intent.action == IntentAction.BUY_STOCK else OrderSide.SELL
        if not intent.symbol:
            return AssistantReply(
                success=False,
                message="I couldn't determine which stock you want to trade. Please specify a stock symbol.",
            )
        if intent.quantity is None:
            return AssistantReply(
                success=False,
                message=f"Please specify how many shares of {intent.symbol} you want to {side.value}.",
            )

        request = TradeRequest(user_id=user_id, symbol=intent.symbol, side=side, quantity=intent.quantity)
        try:
            result = self._trade_engine.execute(request, cancel_event=cancel_event)
        except AppError as exc:
            return AssistantReply(
                success=False,
                message=f"Failed to {side.value} {intent.symbol}: {exc.message}",
                data={"error": exc.code},
            )

        order = result.order
        return AssistantReply(
            success=True,
            message=(
                f"Successfully placed order to {side.value} {_fmt_quantity(order.quantity)} shares "
                f"of {order.symbol} at {_money(order.price)}. "
                f"Order ID: {order.order_id}, Status: {order.status.value}"
            ),
            data={
                "order_id": order.order_id,
                "symbol": order.symbol,
                "side": order.side.value,
                "quantity": str(order.quantity),
                "price": str(order.price),
                "status": order.status.value,
                "cash": str(result.summary.cash),
            },
        )

    def _portfolio(self, user_id: str) -> AssistantReply:
        view = self._portfolio_service.get_portfolio(user_id)
        summary = (
            f"Your portfolio is worth {_money(view.total_value)} "
            f"with {_money(view.cash)} in cash. "
        )
        if view.positions:
            lines = [f"You own {len(view.positions)} different stocks:", ""]
            for pos in view.positions:
                sign = "+" if pos.unrealized_pl >= 0 else ""
                lines.append(
                    f"- {_fmt_quantity(pos.quantity)} shares of {pos.symbol}: "
                    f"{_money(pos.market_value)} ({sign}{_money(pos.unrealized_pl)}, "
                    f"{sign}{pos.unrealized_plpc}%)"
                )
            summary += "\n".join(lines)
        else:
            summary += "You don't have any stock positions yet."

        return AssistantReply(
            success=True,
            message=summary,
            data={
                "cash": str(view.cash),
                "equity": str(view.equity),
                "positions": [
                    {
                        "symbol": p.symbol,
                        "quantity": str(p.quantity),
                        "market_value": str(p.market_value),
                        "cost_basis": str(p.cost_basis),
                        "unrealized_pl": str(p.unrealized_pl),
                        "unrealized_plpc": str(p.unrealized_plpc),
                    }
                    for p in view.positions
                ],
            },
        )

    def _advice(self, message: str) -> AssistantReply:
        try:
            answer = self._resolver.advise(message)
        except LLMUnavailableError as exc:
            logger.warning("Language model unavailable: %s", exc)
            return AssistantReply(success=False, message=MODEL_UNAVAILABLE)
        return AssistantReply(success=True, message=answer)
