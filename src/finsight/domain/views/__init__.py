"""View models for service outputs."""

from finsight.domain.views.results import (
    Quote,
    OrderFill,
    TradeRequest,
    TradeResult,
    PortfolioView,
    SkippedSymbol,
    PredictionBatchResult,
    AssistantReply,
    IngestSummary,
)

__all__ = [
    "Quote",
    "OrderFill",
    "TradeRequest",
    "TradeResult",
    "PortfolioView",
    "SkippedSymbol",
    "PredictionBatchResult",
    "AssistantReply",
    "IngestSummary",
]
