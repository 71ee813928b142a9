"""
Unit tests for market data, gateway and language model providers.

Tests cover:
- Stub provider determinism and history shape
- Provider factory
- Paper gateway fills and rejections
- Gemini client request/response handling (network patched out)
"""

import io
import json
from decimal import Decimal
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from finsight.core.exceptions import OrderRejected
from finsight.domain.models import OrderSide
from finsight.providers import (
    GeminiClient,
    LLMUnavailableError,
    PaperTradeGateway,
    StubMarketDataProvider,
    YFinanceMarketDataProvider,
    create_market_data_provider,
)
from finsight.services import MarketDataService

from tests.conftest import DeterministicMarketProvider, FailingMarketProvider, eastern_datetime


# =============================================================================
# MARKET DATA PROVIDERS
# =============================================================================


class TestStubProvider:
    def test_same_seed_same_history(self):
        as_of = eastern_datetime(2024, 6, 14, 16, 0)
        first = StubMarketDataProvider(seed=7, as_of=as_of).get_daily_history("AAPL", 250)
        second = StubMarketDataProvider(seed=7, as_of=as_of).get_daily_history("AAPL", 250)

        assert first == second
        assert len(first) == 250

    def test_history_is_ascending_business_days(self, market_provider):
        bars = market_provider.get_daily_history("MSFT", 30)

        stamps = [b.timestamp for b in bars]
        assert stamps == sorted(stamps)
        assert all(s.weekday() < 5 for s in stamps)

    def test_quote_matches_last_close(self, market_provider):
        quote = market_provider.get_quote("nvda")
        last = market_provider.get_daily_history("NVDA", 1)[-1]

        assert quote.symbol == "NVDA"
        assert quote.price == Decimal(str(last.close)).quantize(Decimal("0.01"))


class TestProviderFactory:
    def test_stub(self):
        assert isinstance(create_market_data_provider("stub"), StubMarketDataProvider)

    def test_yfinance(self):
        assert isinstance(create_market_data_provider(" YFinance "), YFinanceMarketDataProvider)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_market_data_provider("bloomberg")


# =============================================================================
# PAPER GATEWAY
# =============================================================================


class TestPaperTradeGateway:
    def test_fills_at_current_quote(self):
        gateway = PaperTradeGateway(provider=MarketDataService(DeterministicMarketProvider()))

        fill = gateway.submit_order("AAPL", Decimal("3"), OrderSide.BUY)

        assert fill.status == "filled"
        assert fill.fill_price == Decimal("185.50")
        assert fill.filled_quantity == Decimal("3")
        assert fill.order_id

    def test_rejects_non_positive_quantity(self):
        gateway = PaperTradeGateway(provider=MarketDataService(DeterministicMarketProvider()))

        with pytest.raises(OrderRejected):
            gateway.submit_order("AAPL", Decimal("0"), OrderSide.BUY)

    def test_rejects_untradable_symbol(self):
        gateway = PaperTradeGateway(provider=MarketDataService(FailingMarketProvider()))

        with pytest.raises(OrderRejected) as exc_info:
            gateway.submit_order("AAPL", Decimal("1"), OrderSide.SELL)

        assert "not tradable" in exc_info.value.message


# =============================================================================
# GEMINI CLIENT
# =============================================================================


def _response(payload: dict) -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = json.dumps(payload).encode("utf-8")
    resp.__enter__.return_value = resp
    return resp


class TestGeminiClient:
    def test_missing_key(self):
        with pytest.raises(LLMUnavailableError):
            GeminiClient(api_key="").generate("hi")

    def test_joins_candidate_parts(self):
        client = GeminiClient(api_key="k", model="gemini-pro")
        payload = {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "there"}]}}]}

        with patch("urllib.request.urlopen", return_value=_response(payload)) as mock_open:
            text = client.generate("Say hi")

        assert text == "Hello there"
        request = mock_open.call_args[0][0]
        assert request.full_url.endswith("/models/gemini-pro:generateContent")
        assert request.get_header("X-goog-api-key") == "k"
        body = json.loads(request.data.decode("utf-8"))
        assert body["contents"][0]["parts"][0]["text"] == "Say hi"

    def test_http_error(self):
        client = GeminiClient(api_key="k")
        error = HTTPError("url", 503, "Service Unavailable", {}, io.BytesIO(b"overloaded"))

        with patch("urllib.request.urlopen", side_effect=error):
            with pytest.raises(LLMUnavailableError) as exc_info:
                client.generate("x")

        assert "503" in str(exc_info.value)

    def test_network_error(self):
        client = GeminiClient(api_key="k")

        with patch("urllib.request.urlopen", side_effect=URLError("no route")):
            with pytest.raises(LLMUnavailableError):
                client.generate("x")

    def test_unexpected_shape(self):
        client = GeminiClient(api_key="k")

        with patch("urllib.request.urlopen", return_value=_response({"error": "nope"})):
            with pytest.raises(LLMUnavailableError):
                client.generate("x")
