"""
Unit tests for AssistantService.

Tests cover:
- Quote, trade, portfolio and advice routing
- Friendly replies for unparseable messages and model outages
- Trade failures surfaced as messages
- Conversation history recording
"""

from decimal import Decimal

import pytest

from finsight.core.exceptions import ValidationError
from finsight.domain.models import IntentAction
from finsight.providers.llm_client import LLMUnavailableError
from finsight.services.assistant_service import MODEL_UNAVAILABLE, NOT_UNDERSTOOD

from tests.conftest import FakeLLM


class UnavailableLLM:
    def generate(self, prompt: str) -> str:
        raise LLMUnavailableError("Gemini request failed: 503")


# =============================================================================
# ROUTING TESTS
# =============================================================================


class TestTradeMessages:
    def test_direct_buy_places_order(self, assistant_factory, funded_user, fake_llm):
        """
        GIVEN a funded user
        WHEN they say "Buy 5 shares of AAPL"
        THEN an order is filled without consulting the model
        """
        user_id, _ = funded_user
        assistant = assistant_factory(fake_llm)

        reply = assistant.handle(user_id, "Buy 5 shares of AAPL")

        assert reply.success is True
        assert reply.message == (
            "Successfully placed order to buy 5 shares of AAPL at $185.50. "
            "Order ID: gw-1, Status: filled"
        )
        assert reply.intent.action == IntentAction.BUY_STOCK
        assert reply.data["cash"] == "9072.50"
        assert fake_llm.prompts == []

    def test_failed_trade_reports_reason(self, assistant_factory, funded_user, fake_llm):
        user_id, _ = funded_user
        assistant = assistant_factory(fake_llm)

        reply = assistant.handle(user_id, "Sell 3 shares of TSLA")

        assert reply.success is False
        assert reply.message.startswith("Failed to sell TSLA:")
        assert reply.data == {"error": "INSUFFICIENT_SHARES"}

    def test_trade_without_quantity_asks_for_it(self, assistant_factory, funded_user):
        user_id, _ = funded_user
        llm = FakeLLM('{"action": "BUY_STOCK", "symbol": "MSFT", "quantity": null, "confidence": 0.8}')
        assistant = assistant_factory(llm)

        reply = assistant.handle(user_id, "Buy some Microsoft")

        assert reply.success is False
        assert "how many shares of MSFT" in reply.message


class TestQuoteMessages:
    def test_price_question(self, assistant_factory):
        llm = FakeLLM('{"action": "GET_STOCK_PRICE", "symbol": "AAPL", "quantity": null, "confidence": 0.95}')
        assistant = assistant_factory(llm)

        reply = assistant.handle("user-1", "What's the price of Apple?")

        assert reply.success is True
        assert reply.message == "The current price of AAPL is $185.50. It has changed by $1.25 (0.68%) today."
        assert reply.data["price"] == "185.50"

    def test_unknown_symbol(self, assistant_factory):
        llm = FakeLLM('{"action": "GET_STOCK_PRICE", "symbol": "ZZZZ", "confidence": 0.9}')
        assistant = assistant_factory(llm)

        reply = assistant.handle("user-1", "Price of zzzz?")

        assert reply.success is False
        assert "ZZZZ" in reply.message


class TestPortfolioMessages:
    def test_empty_portfolio(self, assistant_factory, funded_user):
        user_id, _ = funded_user
        llm = FakeLLM('{"action": "GET_PORTFOLIO", "confidence": 0.96}')
        assistant = assistant_factory(llm)

        reply = assistant.handle(user_id, "Show me my portfolio")

        assert reply.success is True
        assert reply.message == (
            "Your portfolio is worth $10,000.00 with $10,000.00 in cash. "
            "You don't have any stock positions yet."
        )

    def test_portfolio_with_positions(self, assistant_factory, funded_user):
        user_id, _ = funded_user
        llm = FakeLLM('{"action": "GET_PORTFOLIO", "confidence": 0.96}')
        assistant = assistant_factory(llm)
        assistant.handle(user_id, "Buy 2 shares of MSFT")

        reply = assistant.handle(user_id, "How am I doing?")

        assert "You own 1 different stocks:" in reply.message
        assert "- 2 shares of MSFT: $756.50" in reply.message
        assert len(reply.data["positions"]) == 1


class TestAdviceMessages:
    def test_general_question_gets_advice(self, assistant_factory):
        llm = FakeLLM(
            '{"action": "GENERAL", "confidence": 0.9}',
            "Markets are mixed today.",
        )
        assistant = assistant_factory(llm)

        reply = assistant.handle("user-1", "How does the market look today?")

        assert reply.success is True
        assert reply.message == "Markets are mixed today."
        assert len(llm.prompts) == 2


# =============================================================================
# FAILURE HANDLING TESTS
# =============================================================================


class TestFailures:
    def test_unparseable_model_reply(self, assistant_factory):
        assistant = assistant_factory(FakeLLM("I do not know"))

        reply = assistant.handle("user-1", "blargh")

        assert reply.success is False
        assert reply.message == NOT_UNDERSTOOD

    def test_model_unavailable(self, assistant_factory):
        assistant = assistant_factory(UnavailableLLM())

        reply = assistant.handle("user-1", "What's up with the market?")

        assert reply.success is False
        assert reply.message == MODEL_UNAVAILABLE

    @pytest.mark.parametrize("user_id,message", [("", "hi"), ("user-1", "   ")])
    def test_missing_input(self, assistant_factory, fake_llm, user_id, message):
        assistant = assistant_factory(fake_llm)

        with pytest.raises(ValidationError):
            assistant.handle(user_id, message)


# =============================================================================
# HISTORY TESTS
# =============================================================================


class TestConversationHistory:
    def test_every_turn_is_stored(self, assistant_factory, funded_user):
        user_id, _ = funded_user
        assistant = assistant_factory(FakeLLM("garbage"))

        assistant.handle(user_id, "Buy 1 shares of AAPL")
        assistant.handle(user_id, "blargh")

        history = assistant.history(user_id)
        assert len(history) == 2
        messages = {c.user_message: c.assistant_response for c in history}
        assert messages["blargh"] == NOT_UNDERSTOOD
        assert messages["Buy 1 shares of AAPL"].startswith("Successfully placed order")
