"""Trade execution, order history and quote endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from finsight.api.deps import (
    get_market_data_service,
    get_portfolio_service,
    get_trade_engine,
)
from finsight.api.schemas import (
    OrderListResponse,
    OrderResponse,
    QuoteResponse,
    TradeRequestBody,
    TradeResponse,
)
from finsight.domain.views import TradeRequest
from finsight.services import MarketDataService, PortfolioService, TradeEngine

router = APIRouter(tags=["trading"])


@router.post("/trades", response_model=TradeResponse, status_code=201)
def execute_trade(
    body: TradeRequestBody,
    engine: TradeEngine = Depends(get_trade_engine),
) -> TradeResponse:
    """Execute a market order and reconcile the portfolio."""
    result = engine.execute(
        TradeRequest(
            user_id=body.user_id,
            symbol=body.symbol,
            side=body.side,
            quantity=body.quantity,
        )
    )
    return TradeResponse(
        order=OrderResponse.model_validate(result.order),
        state=result.state,
        quantity_held=result.position.quantity if result.position else 0,
        cost_basis=result.position.cost_basis if result.position else None,
        cash=result.summary.cash,
        equity=result.summary.equity,
        attempts=result.attempts,
    )


@router.get("/users/{user_id}/orders", response_model=OrderListResponse)
def list_orders(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    service: PortfolioService = Depends(get_portfolio_service),
) -> OrderListResponse:
    """Order history for a user, newest first."""
    orders = service.list_orders(user_id, limit=limit)
    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        total=len(orders),
    )


@router.get("/quotes/{symbol}", response_model=QuoteResponse)
def get_quote(
    symbol: str,
    market: MarketDataService = Depends(get_market_data_service),
) -> QuoteResponse:
    """Current quote for a symbol."""
    return QuoteResponse.model_validate(market.get_quote(symbol))
