"""SQLAlchemy ORM model definitions.

Timestamps are stored as naive US/Eastern wall-clock values.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    DateTime,
    Float,
    Integer,
    Text,
    Numeric,
    UniqueConstraint,
    Index,
    Enum as SqlEnum,
)

from finsight.repositories.sqlalchemy.database import Base
from finsight.domain.models.enums import (
    RiskLevel,
    Recommendation,
    OrderSide,
    OrderStatus,
)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class PricePointORM(Base):
    """SQLAlchemy model for a daily OHLCV bar."""

    __tablename__ = "historical_prices"
    __table_args__ = (
        UniqueConstraint("symbol", "timestamp_est", name="uq_price_symbol_timestamp"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(20), nullable=False, index=True)
    timestamp_est = Column(DateTime, nullable=False)
    open = Column(Float, nullable=False)
    high = Column(Float, nullable=False)
    low = Column(Float, nullable=False)
    close = Column(Float, nullable=False)
    volume = Column(Float, nullable=False, default=0.0)


class PredictionORM(Base):
    """SQLAlchemy model for Prediction."""

    __tablename__ = "stock_predictions"
    __table_args__ = (
        Index("ix_prediction_symbol_date", "symbol", "prediction_date_est"),
    )

    prediction_id = Column(String(36), primary_key=True)
    symbol = Column(String(20), nullable=False)
    predicted_price = Column(Float, nullable=False)
    confidence_level = Column(Integer, nullable=False)
    risk_level = Column(
        SqlEnum(RiskLevel, values_callable=_enum_values), nullable=False
    )
    recommendation = Column(
        SqlEnum(Recommendation, values_callable=_enum_values), nullable=False
    )
    prediction_date_est = Column(DateTime, nullable=False)
    target_date_est = Column(DateTime, nullable=False)
    model_version = Column(String(50), nullable=False)
    features_used_json = Column(Text, nullable=False)


class PositionORM(Base):
    """SQLAlchemy model for Position (one row per user and symbol)."""

    __tablename__ = "positions"

    user_id = Column(String(64), primary_key=True)
    symbol = Column(String(20), primary_key=True)
    quantity = Column(Numeric(precision=18, scale=8), nullable=False)
    cost_basis = Column(Numeric(precision=18, scale=6), nullable=False)
    current_price = Column(Numeric(precision=18, scale=4), default=Decimal("0"))
    market_value = Column(Numeric(precision=18, scale=2), default=Decimal("0"))
    unrealized_pl = Column(Numeric(precision=18, scale=2), default=Decimal("0"))
    unrealized_plpc = Column(Numeric(precision=10, scale=2), default=Decimal("0"))
    version = Column(Integer, nullable=False, default=0)
    updated_at_est = Column(DateTime, nullable=True)


class PortfolioSummaryORM(Base):
    """SQLAlchemy model for PortfolioSummary."""

    __tablename__ = "portfolio_summary"

    user_id = Column(String(64), primary_key=True)
    cash = Column(Numeric(precision=18, scale=2), nullable=False, default=Decimal("0"))
    equity = Column(Numeric(precision=18, scale=2), nullable=False, default=Decimal("0"))
    version = Column(Integer, nullable=False, default=0)
    updated_at_est = Column(DateTime, nullable=True)


class OrderORM(Base):
    """SQLAlchemy model for Order (one row per trade attempt)."""

    __tablename__ = "orders"

    order_id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(20), nullable=False)
    quantity = Column(Numeric(precision=18, scale=8), nullable=False)
    price = Column(Numeric(precision=18, scale=4), nullable=True)
    side = Column(SqlEnum(OrderSide, values_callable=_enum_values), nullable=False)
    status = Column(SqlEnum(OrderStatus, values_callable=_enum_values), nullable=False)
    message = Column(Text, nullable=True)
    created_at_est = Column(DateTime, nullable=False, default=datetime.utcnow)


class ConversationORM(Base):
    """SQLAlchemy model for a stored assistant turn."""

    __tablename__ = "conversations"

    conversation_id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    user_message = Column(Text, nullable=False)
    assistant_response = Column(Text, nullable=False)
    created_at_est = Column(DateTime, nullable=False)
