"""Application context for in-process service management.

Provides a centralized way to access all services without HTTP, for
scripts and scheduled prediction runs.
"""

from pathlib import Path
from typing import Optional

from finsight.config.settings import Settings, set_settings, get_settings
from finsight.repositories.sqlalchemy.database import (
    init_db_with_path,
    reset_database,
    get_session,
)
from finsight.repositories.sqlalchemy import (
    SqlAlchemyPriceRepository,
    SqlAlchemyPredictionRepository,
    SqlAlchemyPortfolioRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyConversationRepository,
)
from finsight.providers import (
    GeminiClient,
    LLMClient,
    PaperTradeGateway,
    TradeGateway,
    create_market_data_provider,
)
from finsight.services import (
    AssistantService,
    IntentResolver,
    MarketDataService,
    PortfolioService,
    PredictionService,
    TradeEngine,
)


class AppContext:
    """
    Application context providing in-process access to all services.

    Services are created lazily and share one database session. The
    gateway and language model can be swapped before first use.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        gateway: Optional[TradeGateway] = None,
        llm: Optional[LLMClient] = None,
    ):
        self._data_dir = data_dir
        self._gateway = gateway
        self._llm = llm
        self._session = None
        self._initialized = False

        self._market_data_service: Optional[MarketDataService] = None
        self._prediction_service: Optional[PredictionService] = None
        self._trade_engine: Optional[TradeEngine] = None
        self._portfolio_service: Optional[PortfolioService] = None
        self._assistant_service: Optional[AssistantService] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """Initialize or reinitialize the application with a data directory."""
        if data_dir:
            self._data_dir = data_dir

        settings = Settings(data_dir=self._data_dir)
        set_settings(settings)

        reset_database()
        init_db_with_path(settings.get_data_dir() / "finsight.db")

        self.close()
        self._reset_services()
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def data_dir(self) -> Path:
        return get_settings().get_data_dir()

    def _get_session(self):
        """Get or create database session."""
        if self._session is None:
            self._session = get_session()
        return self._session

    def _reset_services(self) -> None:
        self._market_data_service = None
        self._prediction_service = None
        self._trade_engine = None
        self._portfolio_service = None
        self._assistant_service = None

    # Service accessors
    @property
    def market_data(self) -> MarketDataService:
        if self._market_data_service is None:
            settings = get_settings()
            self._market_data_service = MarketDataService(
                provider=create_market_data_provider(settings.market_data_provider),
                cache_ttl_seconds=settings.market_data_cache_ttl_seconds,
                min_interval_seconds=settings.market_data_min_interval_seconds,
            )
        return self._market_data_service

    @property
    def predictions(self) -> PredictionService:
        if self._prediction_service is None:
            settings = get_settings()
            session = self._get_session()
            self._prediction_service = PredictionService(
                market_data=self.market_data,
                price_repo=SqlAlchemyPriceRepository(session),
                prediction_repo=SqlAlchemyPredictionRepository(session),
                model_version=settings.model_version,
                watchlist=settings.watchlist,
                history_days=settings.prediction_history_days,
                min_history=settings.prediction_min_history,
                horizon_days=settings.prediction_horizon_days,
                max_workers=settings.prediction_max_workers,
            )
        return self._prediction_service

    @property
    def trades(self) -> TradeEngine:
        if self._trade_engine is None:
            session = self._get_session()
            self._trade_engine = TradeEngine(
                portfolio_repo=SqlAlchemyPortfolioRepository(session),
                order_repo=SqlAlchemyOrderRepository(session),
                market_data=self.market_data,
                gateway=self._gateway or PaperTradeGateway(provider=self.market_data),
                max_reconcile_attempts=get_settings().reconcile_max_attempts,
            )
        return self._trade_engine

    @property
    def portfolio(self) -> PortfolioService:
        if self._portfolio_service is None:
            session = self._get_session()
            self._portfolio_service = PortfolioService(
                portfolio_repo=SqlAlchemyPortfolioRepository(session),
                order_repo=SqlAlchemyOrderRepository(session),
                market_data=self.market_data,
            )
        return self._portfolio_service

    @property
    def assistant(self) -> AssistantService:
        if self._assistant_service is None:
            settings = get_settings()
            llm = self._llm or GeminiClient(
                api_key=settings.gemini_api_key or "",
                model=settings.gemini_model,
                timeout_s=settings.gemini_timeout_seconds,
            )
            self._assistant_service = AssistantService(
                resolver=IntentResolver(llm),
                market_data=self.market_data,
                trade_engine=self.trades,
                portfolio_service=self.portfolio,
                conversation_repo=SqlAlchemyConversationRepository(self._get_session()),
            )
        return self._assistant_service

    def close(self) -> None:
        """Clean up resources."""
        if self._session:
            self._session.close()
            self._session = None


# Global application context (singleton for scripts)
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: AppContext) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
