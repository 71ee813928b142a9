"""API routers package."""

from finsight.api.routers.predictions import router as predictions_router
from finsight.api.routers.trading import router as trading_router
from finsight.api.routers.portfolio import router as portfolio_router
from finsight.api.routers.assistant import router as assistant_router

__all__ = [
    "predictions_router",
    "trading_router",
    "portfolio_router",
    "assistant_router",
]
