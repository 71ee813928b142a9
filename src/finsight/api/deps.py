"""Dependency injection for FastAPI."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from finsight.config.settings import get_settings
from finsight.repositories.sqlalchemy.database import get_db
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

# Shared across requests so the quote cache and provider throttle apply process-wide
_market_data_service: Optional[MarketDataService] = None


def get_price_repo(db: Session = Depends(get_db)) -> SqlAlchemyPriceRepository:
    """Provide PriceRepository instance."""
    return SqlAlchemyPriceRepository(db)


def get_prediction_repo(db: Session = Depends(get_db)) -> SqlAlchemyPredictionRepository:
    """Provide PredictionRepository instance."""
    return SqlAlchemyPredictionRepository(db)


def get_portfolio_repo(db: Session = Depends(get_db)) -> SqlAlchemyPortfolioRepository:
    """Provide PortfolioRepository instance."""
    return SqlAlchemyPortfolioRepository(db)


def get_order_repo(db: Session = Depends(get_db)) -> SqlAlchemyOrderRepository:
    """Provide OrderRepository instance."""
    return SqlAlchemyOrderRepository(db)


def get_conversation_repo(db: Session = Depends(get_db)) -> SqlAlchemyConversationRepository:
    """Provide ConversationRepository instance."""
    return SqlAlchemyConversationRepository(db)


def get_market_data_service() -> MarketDataService:
    """Provide the process-wide MarketDataService."""
    global _market_data_service
    if _market_data_service is None:
        settings = get_settings()
        _market_data_service = MarketDataService(
            provider=create_market_data_provider(settings.market_data_provider),
            cache_ttl_seconds=settings.market_data_cache_ttl_seconds,
            min_interval_seconds=settings.market_data_min_interval_seconds,
        )
    return _market_data_service


def get_trade_gateway(
    market_data: MarketDataService = Depends(get_market_data_service),
) -> TradeGateway:
    """Provide the paper trade gateway, filling at the current quote."""
    return PaperTradeGateway(provider=market_data)


def get_llm_client() -> LLMClient:
    """Provide the Gemini client configured in settings."""
    settings = get_settings()
    return GeminiClient(
        api_key=settings.gemini_api_key or "",
        model=settings.gemini_model,
        timeout_s=settings.gemini_timeout_seconds,
    )


def get_prediction_service(
    market_data: MarketDataService = Depends(get_market_data_service),
    price_repo: SqlAlchemyPriceRepository = Depends(get_price_repo),
    prediction_repo: SqlAlchemyPredictionRepository = Depends(get_prediction_repo),
) -> PredictionService:
    """Provide PredictionService instance."""
    settings = get_settings()
    return PredictionService(
        market_data=market_data,
        price_repo=price_repo,
        prediction_repo=prediction_repo,
        model_version=settings.model_version,
        watchlist=settings.watchlist,
        history_days=settings.prediction_history_days,
        min_history=settings.prediction_min_history,
        horizon_days=settings.prediction_horizon_days,
        max_workers=settings.prediction_max_workers,
    )


def get_trade_engine(
    portfolio_repo: SqlAlchemyPortfolioRepository = Depends(get_portfolio_repo),
    order_repo: SqlAlchemyOrderRepository = Depends(get_order_repo),
    market_data: MarketDataService = Depends(get_market_data_service),
    gateway: TradeGateway = Depends(get_trade_gateway),
) -> TradeEngine:
    """Provide TradeEngine instance."""
    return TradeEngine(
        portfolio_repo=portfolio_repo,
        order_repo=order_repo,
        market_data=market_data,
        gateway=gateway,
        max_reconcile_attempts=get_settings().reconcile_max_attempts,
    )


def get_portfolio_service(
    portfolio_repo: SqlAlchemyPortfolioRepository = Depends(get_portfolio_repo),
    order_repo: SqlAlchemyOrderRepository = Depends(get_order_repo),
    market_data: MarketDataService = Depends(get_market_data_service),
) -> PortfolioService:
    """Provide PortfolioService instance."""
    return PortfolioService(
        portfolio_repo=portfolio_repo,
        order_repo=order_repo,
        market_data=market_data,
    )


def get_intent_resolver(llm: LLMClient = Depends(get_llm_client)) -> IntentResolver:
    return IntentResolver(llm)


def get_assistant_service(
    resolver: IntentResolver = Depends(get_intent_resolver),
    market_data: MarketDataService = Depends(get_market_data_service),
    trade_engine: TradeEngine = Depends(get_trade_engine),
    portfolio_service: PortfolioService = Depends(get_portfolio_service),
    conversation_repo: SqlAlchemyConversationRepository = Depends(get_conversation_repo),
) -> AssistantService:
    """Provide AssistantService instance."""
    return AssistantService(
        resolver=resolver,
        market_data=market_data,
        trade_engine=trade_engine,
        portfolio_service=portfolio_service,
        conversation_repo=conversation_repo,
    )
