"""Pydantic schemas for API request/response."""

from finsight.api.schemas.prediction import (
    GeneratePredictionsRequest,
    IndicatorSnapshotResponse,
    PredictionResponse,
    SkippedSymbolResponse,
    PredictionBatchResponse,
    PredictionListResponse,
)
from finsight.api.schemas.trading import (
    TradeRequestBody,
    OrderResponse,
    OrderListResponse,
    TradeResponse,
    QuoteResponse,
)
from finsight.api.schemas.portfolio import (
    PositionResponse,
    PortfolioSummaryResponse,
    PortfolioResponse,
    DepositRequest,
)
from finsight.api.schemas.assistant import (
    AssistantRequest,
    IntentResponse,
    AssistantResponse,
    ConversationResponse,
)

__all__ = [
    "GeneratePredictionsRequest",
    "IndicatorSnapshotResponse",
    "PredictionResponse",
    "SkippedSymbolResponse",
    "PredictionBatchResponse",
    "PredictionListResponse",
    "TradeRequestBody",
    "OrderResponse",
    "OrderListResponse",
    "TradeResponse",
    "QuoteResponse",
    "PositionResponse",
    "PortfolioSummaryResponse",
    "PortfolioResponse",
    "DepositRequest",
    "AssistantRequest",
    "IntentResponse",
    "AssistantResponse",
    "ConversationResponse",
]
