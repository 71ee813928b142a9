"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PositionResponse(BaseModel):
    """Response schema for an open position."""

    symbol: str
    quantity: Decimal
    cost_basis: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_pl: Decimal
    unrealized_plpc: Decimal
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PortfolioSummaryResponse(BaseModel):
    """Response schema for cash and equity."""

    user_id: str
    cash: Decimal
    equity: Decimal
    total_value: Decimal
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PortfolioResponse(BaseModel):
    """Response schema for the portfolio read model."""

    user_id: str
    cash: Decimal
    equity: Decimal
    total_value: Decimal
    positions: list[PositionResponse]
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DepositRequest(BaseModel):
    """Request schema for funding an account."""

    amount: Decimal = Field(..., gt=0, description="Cash to add")
