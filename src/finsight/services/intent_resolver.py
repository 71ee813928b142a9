"""Resolve free-text trading instructions into typed intents."""

import json
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from finsight.core.exceptions import IntentParseError
from finsight.domain.models import IntentAction, TradeIntent
from finsight.providers.llm_client import LLMClient

logger = logging.getLogger(__name__)

# Only the words are case-insensitive; the symbol must already be a ticker.
DIRECT_PATTERN = re.compile(
    r"\b(?i:(buy|sell))\s+(\d+(?:\.\d+)?)\s+(?i:shares?\s+of)\s+([A-Z]{1,5})\b"
)
DIRECT_CONFIDENCE = 0.98

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

INTENT_PROMPT = """
You are a financial assistant that helps users trade stocks and analyze their portfolio.

Based on the following user message, determine the user's intent and extract relevant information.

Message: "{message}"

Respond with a JSON object in this exact format:
{{
  "action": "GET_STOCK_PRICE" | "BUY_STOCK" | "SELL_STOCK" | "GET_PORTFOLIO" | "GENERAL",
  "symbol": "Stock symbol if applicable",
  "quantity": "Number of shares if applicable",
  "confidence": "Confidence score between 0 and 1"
}}

Examples:
- "What's the current price of Apple?" -> {{ "action": "GET_STOCK_PRICE", "symbol": "AAPL", "quantity": null, "confidence": 0.95 }}
- "Buy 5 shares of Tesla" -> {{ "action": "BUY_STOCK", "symbol": "TSLA", "quantity": 5, "confidence": 0.98 }}
- "Sell 10 Microsoft shares" -> {{ "action": "SELL_STOCK", "symbol": "MSFT", "quantity": 10, "confidence": 0.97 }}
- "Show me my portfolio" -> {{ "action": "GET_PORTFOLIO", "symbol": null, "quantity": null, "confidence": 0.96 }}
- "How does the market look today?" -> {{ "action": "GENERAL", "symbol": null, "quantity": null, "confidence": 0.90 }}

Only respond with the JSON object, no other text.
"""

ADVICE_PROMPT = """
You are a helpful financial assistant that specializes in stocks, trading, and investment advice.

User's message: "{message}"

Provide a helpful, accurate, and concise response. If the user is asking about specific trading actions, explain that they can use commands like "Buy X shares of [symbol]" or "Sell X shares of [symbol]".
"""


def match_direct(message: str) -> Optional[TradeIntent]:
    """Recognize 'buy|sell <qty> shares of <SYMBOL>' without a model call."""
    match = DIRECT_PATTERN.search(message)
    if not match:
        return None
    side, quantity, symbol = match.groups()
    action = IntentAction.BUY_STOCK if side.lower() == "buy" else IntentAction.SELL_STOCK
    return TradeIntent(
        action=action,
        symbol=symbol,
        quantity=Decimal(quantity),
        confidence=DIRECT_CONFIDENCE,
    )


def _parse_quantity(raw) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        quantity = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    return quantity if quantity.is_finite() and quantity > 0 else None


def _parse_confidence(raw) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return min(1.0, max(0.0, value))


def parse_intent(text: str) -> TradeIntent:
    """
    Parse a model response into a TradeIntent.

    The first {...} block is read as JSON; its action must be one of the
    closed set. Anything else raises IntentParseError.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise IntentParseError("Model response did not contain a JSON object")
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise IntentParseError(f"Model response is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise IntentParseError("Model response is not a JSON object")

    raw_action = str(payload.get("action", "")).strip().upper()
    try:
        action = IntentAction(raw_action)
    except ValueError as exc:
        raise IntentParseError(f"Unknown intent action: {raw_action or '<missing>'}") from exc

    raw_symbol = payload.get("symbol")
    symbol = str(raw_symbol).strip().upper() if raw_symbol else None

    return TradeIntent(
        action=action,
        symbol=symbol or None,
        quantity=_parse_quantity(payload.get("quantity")),
        confidence=_parse_confidence(payload.get("confidence")),
    )


class IntentResolver:
    """Turns user messages into TradeIntents, falling back to a language model."""

    def __init__(self, llm: LLMClient):
        self._llm = llm

    def resolve(self, message: str) -> TradeIntent:
        """Resolve a message; the direct pattern wins over the model."""
        direct = match_direct(message)
        if direct is not None:
            logger.debug("Direct trade pattern matched: %s", direct)
            return direct

        response = self._llm.generate(INTENT_PROMPT.format(message=message))
        intent = parse_intent(response)
        logger.debug("Model resolved intent: %s", intent)
        return intent

    def advise(self, message: str) -> str:
        """Free-text advisory answer for GENERAL intents."""
        return self._llm.generate(ADVICE_PROMPT.format(message=message)).strip()
