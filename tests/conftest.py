"""
Pytest configuration and fixtures for prediction and trading tests.

This module provides:
- In-memory SQLite database fixtures
- Deterministic market data providers, gateways and language models
- Time helpers for Eastern timezone
- Service and repository fixtures
- A FastAPI test client wired to the test database
"""

import math
import threading
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from finsight.main import app
from finsight.api import deps
from finsight.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from finsight.repositories.sqlalchemy import orm_models  # noqa: F401
from finsight.repositories.sqlalchemy import (
    SqlAlchemyPriceRepository,
    SqlAlchemyPredictionRepository,
    SqlAlchemyPortfolioRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyConversationRepository,
)
from finsight.providers.stub_provider import StubMarketDataProvider
from finsight.services import (
    AssistantService,
    IntentResolver,
    MarketDataService,
    PortfolioService,
    PredictionService,
    TradeEngine,
)
from finsight.core.exceptions import OrderRejected
from finsight.core.timezone import EASTERN_TZ
from finsight.config.settings import Settings, reset_settings, set_settings
from finsight.domain.models import OrderSide, PricePoint, IndicatorSnapshot
from finsight.domain.views import OrderFill, Quote


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return eastern_datetime(2024, 6, 14, 16, 0, 0)


# =============================================================================
# SERIES HELPERS
# =============================================================================


def make_bars(
    symbol: str,
    closes: list[float],
    end: Optional[datetime] = None,
    spread: float = 0.01,
) -> list[PricePoint]:
    """Daily bars ending at `end`, one per calendar day, high/low +/- spread around close."""
    end = end or eastern_datetime(2024, 6, 14, 16, 0, 0)
    bars = []
    prev = closes[0]
    for i, close in enumerate(closes):
        day = end - timedelta(days=len(closes) - 1 - i)
        bars.append(
            PricePoint(
                symbol=symbol,
                timestamp=day,
                open=prev,
                high=max(prev, close) * (1 + spread),
                low=min(prev, close) * (1 - spread),
                close=close,
                volume=1_000_000.0,
            )
        )
        prev = close
    return bars


def wave_closes(base: float, count: int) -> list[float]:
    """Deterministic oscillating series around base."""
    return [round(base * (1 + 0.03 * math.sin(i / 6.0)), 2) for i in range(count)]


def make_snapshot(**overrides) -> IndicatorSnapshot:
    """Neutral snapshot (no signal except MACD) with field overrides."""
    values = dict(
        last_price=100.0,
        rsi=50.0,
        macd=0.5,
        ema_20=100.0,
        sma_50=100.0,
        sma_200=100.0,
        bollinger_upper=110.0,
        bollinger_middle=100.0,
        bollinger_lower=90.0,
        atr=2.0,
    )
    values.update(overrides)
    return IndicatorSnapshot(**values)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(session_factory) -> Session:
    """Create test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def price_repo(test_session) -> SqlAlchemyPriceRepository:
    return SqlAlchemyPriceRepository(test_session)


@pytest.fixture
def prediction_repo(test_session) -> SqlAlchemyPredictionRepository:
    return SqlAlchemyPredictionRepository(test_session)


@pytest.fixture
def portfolio_repo(test_session) -> SqlAlchemyPortfolioRepository:
    return SqlAlchemyPortfolioRepository(test_session)


@pytest.fixture
def order_repo(test_session) -> SqlAlchemyOrderRepository:
    return SqlAlchemyOrderRepository(test_session)


@pytest.fixture
def conversation_repo(test_session) -> SqlAlchemyConversationRepository:
    return SqlAlchemyConversationRepository(test_session)


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class DeterministicMarketProvider:
    """
    Deterministic market data provider for testing.

    Known symbols get fixed quotes and a 260-bar oscillating history;
    history_lengths overrides how many bars a symbol has. Unknown symbols
    raise like a real upstream would.
    """

    FIXED_QUOTES = {
        "AAPL": (Decimal("185.50"), Decimal("184.25")),
        "MSFT": (Decimal("378.25"), Decimal("376.80")),
        "TSLA": (Decimal("248.75"), Decimal("250.10")),
        "GOOGL": (Decimal("142.75"), Decimal("141.50")),
        "SHORT": (Decimal("20.00"), Decimal("19.50")),
    }

    def __init__(
        self,
        as_of: Optional[datetime] = None,
        history_lengths: Optional[dict[str, int]] = None,
    ):
        self._as_of = as_of or eastern_datetime(2024, 6, 14, 16, 0, 0)
        self._history_lengths = {"SHORT": 50}
        self._history_lengths.update(history_lengths or {})
        self.quote_calls: list[str] = []
        self.history_calls: list[str] = []
        self._lock = threading.Lock()

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.upper()
        with self._lock:
            self.quote_calls.append(symbol)
        if symbol not in self.FIXED_QUOTES:
            raise LookupError(f"Unknown symbol {symbol}")
        price, prev = self.FIXED_QUOTES[symbol]
        change = price - prev
        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=(change / prev * 100).quantize(Decimal("0.01")),
            as_of=self._as_of,
        )

    def get_daily_history(self, symbol: str, limit: int) -> list[PricePoint]:
        symbol = symbol.upper()
        with self._lock:
            self.history_calls.append(symbol)
        if symbol not in self.FIXED_QUOTES:
            raise LookupError(f"Unknown symbol {symbol}")
        count = self._history_lengths.get(symbol, 260)
        base = float(self.FIXED_QUOTES[symbol][0])
        bars = make_bars(symbol, wave_closes(base, count), end=self._as_of)
        return bars[-limit:]


class FailingMarketProvider:
    """Market provider that always raises an exception."""

    def get_quote(self, symbol: str) -> Quote:
        raise ConnectionError("Network unavailable")

    def get_daily_history(self, symbol: str, limit: int) -> list[PricePoint]:
        raise ConnectionError("Network unavailable")


@pytest.fixture
def deterministic_provider(fixed_now) -> DeterministicMarketProvider:
    """Provide deterministic market data provider."""
    return DeterministicMarketProvider(as_of=fixed_now)


@pytest.fixture
def failing_provider() -> FailingMarketProvider:
    """Provide a market provider that always fails."""
    return FailingMarketProvider()


@pytest.fixture
def market_provider() -> StubMarketDataProvider:
    """Provide stub MarketDataProvider with fixed seed."""
    return StubMarketDataProvider(seed=42, as_of=eastern_datetime(2024, 6, 14, 16, 0, 0))


@pytest.fixture
def market_data_service(deterministic_provider) -> MarketDataService:
    """Provide test MarketDataService with deterministic provider."""
    return MarketDataService(provider=deterministic_provider, cache_ttl_seconds=60)


# =============================================================================
# GATEWAY AND LANGUAGE MODEL FIXTURES
# =============================================================================


class RecordingGateway:
    """Fills every order at a fixed price per symbol and records each submission."""

    def __init__(self, prices: Optional[dict[str, Decimal]] = None, order_prefix: str = "gw"):
        self._prices = prices or {
            symbol: quote[0] for symbol, quote in DeterministicMarketProvider.FIXED_QUOTES.items()
        }
        self._order_prefix = order_prefix
        self.submissions: list[tuple[str, Decimal, OrderSide]] = []

    def set_price(self, symbol: str, price: Decimal) -> None:
        self._prices[symbol] = price

    def submit_order(self, symbol: str, quantity: Decimal, side: OrderSide) -> OrderFill:
        self.submissions.append((symbol, quantity, side))
        return OrderFill(
            order_id=f"{self._order_prefix}-{len(self.submissions)}",
            status="filled",
            fill_price=self._prices[symbol],
            filled_quantity=quantity,
        )


class RejectingGateway:
    """Gateway that refuses every order."""

    def __init__(self, message: str = "insufficient buying power"):
        self.message = message
        self.calls = 0

    def submit_order(self, symbol: str, quantity: Decimal, side: OrderSide) -> OrderFill:
        self.calls += 1
        raise OrderRejected(self.message)


class FakeLLM:
    """Language model double returning canned responses in order."""

    def __init__(self, *responses: str):
        self._responses = list(responses)
        self.prompts: list[str] = []

    def queue(self, *responses: str) -> None:
        self._responses.extend(responses)

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._responses:
            raise AssertionError("FakeLLM called more times than expected")
        return self._responses.pop(0)


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def prediction_service(market_data_service, price_repo, prediction_repo) -> PredictionService:
    """Provide test PredictionService."""
    return PredictionService(
        market_data=market_data_service,
        price_repo=price_repo,
        prediction_repo=prediction_repo,
        model_version="rule-based-test",
        watchlist=["AAPL", "MSFT"],
        max_workers=2,
    )


@pytest.fixture
def trade_engine(portfolio_repo, order_repo, market_data_service, gateway) -> TradeEngine:
    """Provide test TradeEngine with a recording gateway."""
    return TradeEngine(
        portfolio_repo=portfolio_repo,
        order_repo=order_repo,
        market_data=market_data_service,
        gateway=gateway,
        max_reconcile_attempts=3,
    )


@pytest.fixture
def portfolio_service(portfolio_repo, order_repo, market_data_service) -> PortfolioService:
    return PortfolioService(
        portfolio_repo=portfolio_repo,
        order_repo=order_repo,
        market_data=market_data_service,
    )


@pytest.fixture
def assistant_factory(
    market_data_service,
    trade_engine,
    portfolio_service,
    conversation_repo,
) -> Callable[[FakeLLM], AssistantService]:
    """Factory for assistants backed by a given fake model."""

    def _create(llm: FakeLLM) -> AssistantService:
        return AssistantService(
            resolver=IntentResolver(llm),
            market_data=market_data_service,
            trade_engine=trade_engine,
            portfolio_service=portfolio_service,
            conversation_repo=conversation_repo,
        )

    return _create


# =============================================================================
# PRESET DATA FIXTURES
# =============================================================================


@pytest.fixture
def funded_user(portfolio_service) -> tuple[str, Decimal]:
    """A user with $10,000 cash."""
    user_id = "user-1"
    amount = Decimal("10000.00")
    portfolio_service.deposit_cash(user_id, amount)
    return user_id, amount


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def api_llm() -> FakeLLM:
    """Language model used by the API client; tests queue responses on it."""
    return FakeLLM()


@pytest.fixture
def client(test_engine, session_factory, deterministic_provider, api_llm) -> TestClient:
    """Provide FastAPI test client with test database and deterministic collaborators."""
    # Lifespan runs init_db; keep it off the user's data directory
    set_settings(Settings(database_url="sqlite://"))
    reset_database()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    market = MarketDataService(provider=deterministic_provider, cache_ttl_seconds=60)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_market_data_service] = lambda: market
    app.dependency_overrides[deps.get_llm_client] = lambda: api_llm
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()
    reset_settings()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"
