"""Pydantic schemas for trading endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from finsight.domain.models.enums import OrderSide, OrderStatus, TradeState


class TradeRequestBody(BaseModel):
    """Request schema for a market order. Quantity is checked by the trade engine."""

    user_id: str = Field(..., min_length=1, description="User placing the order")
    symbol: str = Field(..., max_length=20, description="Stock symbol")
    side: OrderSide = Field(..., description="buy or sell")
    quantity: Decimal = Field(..., description="Number of shares")

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class OrderResponse(BaseModel):
    """Response schema for an order record."""

    order_id: str
    user_id: str
    symbol: str
    quantity: Decimal
    price: Optional[Decimal] = None
    side: OrderSide
    status: OrderStatus
    message: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int


class QuoteResponse(BaseModel):
    """Response schema for a market quote."""

    symbol: str
    price: Decimal
    change: Decimal
    change_percent: Decimal
    as_of: datetime

    model_config = {"from_attributes": True}


class TradeResponse(BaseModel):
    """Response schema for an executed trade."""

    order: OrderResponse
    state: TradeState
    quantity_held: Decimal
    cost_basis: Optional[Decimal] = None
    cash: Decimal
    equity: Decimal
    attempts: int
