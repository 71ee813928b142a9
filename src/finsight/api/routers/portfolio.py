"""Portfolio read model and cash deposit endpoints."""

from fastapi import APIRouter, Depends, Query

from finsight.api.deps import get_portfolio_service
from finsight.api.schemas import (
    DepositRequest,
    PortfolioResponse,
    PortfolioSummaryResponse,
    PositionResponse,
)
from finsight.services import PortfolioService

router = APIRouter(prefix="/users/{user_id}/portfolio", tags=["portfolio"])


@router.get("", response_model=PortfolioResponse)
def get_portfolio(
    user_id: str,
    live: bool = Query(False, description="Revalue positions at current quotes"),
    service: PortfolioService = Depends(get_portfolio_service),
) -> PortfolioResponse:
    """Cash, equity and open positions for a user."""
    view = service.get_portfolio(user_id, live_prices=live)
    return PortfolioResponse(
        user_id=view.user_id,
        cash=view.cash,
        equity=view.equity,
        total_value=view.total_value,
        positions=[PositionResponse.model_validate(p) for p in view.positions],
        updated_at=view.updated_at,
    )


@router.post("/deposit", response_model=PortfolioSummaryResponse)
def deposit_cash(
    user_id: str,
    body: DepositRequest,
    service: PortfolioService = Depends(get_portfolio_service),
) -> PortfolioSummaryResponse:
    """Add cash to a user's account."""
    summary = service.deposit_cash(user_id, body.amount)
    return PortfolioSummaryResponse.model_validate(summary)
