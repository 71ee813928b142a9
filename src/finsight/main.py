"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from finsight.config.settings import get_settings
from finsight.config.logging_config import setup_logging
from finsight.repositories.sqlalchemy.database import init_db
from finsight.api.routers import (
    predictions_router,
    trading_router,
    portfolio_router,
    assistant_router,
)
from finsight.core.exceptions import (
    AppError,
    NotFoundError,
    OrderRejected,
    PriceUnavailable,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    init_db()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Stock prediction engine and trade reconciliation core",
    version=settings.app_version,
    lifespan=lifespan,
)

app.include_router(predictions_router)
app.include_router(trading_router)
app.include_router(portfolio_router)
app.include_router(assistant_router)


def status_for(exc: AppError) -> int:
    """HTTP status for an application error."""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (OrderRejected, PriceUnavailable)):
        return 502
    return 400


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=status_for(exc),
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
