"""Prediction generation and feed endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from finsight.api.deps import get_prediction_service
from finsight.api.schemas import (
    GeneratePredictionsRequest,
    PredictionResponse,
    PredictionBatchResponse,
    PredictionListResponse,
    SkippedSymbolResponse,
)
from finsight.core.exceptions import NotFoundError
from finsight.core.timezone import parse_datetime_eastern
from finsight.services import PredictionService

router = APIRouter(prefix="/predictions", tags=["predictions"])


@router.post("/generate", response_model=PredictionBatchResponse)
def generate_predictions(
    body: GeneratePredictionsRequest,
    service: PredictionService = Depends(get_prediction_service),
) -> PredictionBatchResponse:
    """Run one prediction cycle for the given symbols (or the watchlist)."""
    result = service.generate(body.symbols)
    return PredictionBatchResponse(
        predictions=[PredictionResponse.model_validate(p) for p in result.predictions],
        skipped=[SkippedSymbolResponse(symbol=s.symbol, reason=s.reason) for s in result.skipped],
    )


@router.get("", response_model=PredictionListResponse)
def list_predictions(
    symbols: Optional[str] = Query(None, description="Comma-separated symbols"),
    start: Optional[datetime] = Query(None, description="Earliest prediction date"),
    end: Optional[datetime] = Query(None, description="Latest prediction date"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    service: PredictionService = Depends(get_prediction_service),
) -> PredictionListResponse:
    """Prediction feed, newest first."""
    symbol_list = [s for s in symbols.split(",") if s.strip()] if symbols else None
    predictions = service.get_predictions(
        symbols=symbol_list,
        start=parse_datetime_eastern(start) if start else None,
        end=parse_datetime_eastern(end) if end else None,
        limit=limit,
    )
    return PredictionListResponse(
        predictions=[PredictionResponse.model_validate(p) for p in predictions],
        total=len(predictions),
    )


@router.get("/{symbol}/latest", response_model=PredictionResponse)
def latest_prediction(
    symbol: str,
    service: PredictionService = Depends(get_prediction_service),
) -> PredictionResponse:
    """Most recent prediction for one symbol."""
    prediction = service.latest(symbol)
    if prediction is None:
        raise NotFoundError("Prediction", symbol.upper())
    return PredictionResponse.model_validate(prediction)
