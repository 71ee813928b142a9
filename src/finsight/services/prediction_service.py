"""
Prediction orchestrator.

For every watched symbol: fetch daily history, compute the indicator
snapshot, fuse it into a prediction and persist the result. Symbols are
independent; one failing never stops the others.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from finsight.core.exceptions import AppError, InsufficientHistory
from finsight.core.timezone import now_eastern, add_days
from finsight.domain.models import Prediction, PricePoint, IndicatorSnapshot
from finsight.domain.views import PredictionBatchResult, SkippedSymbol
from finsight.indicators import EMA_SEED_FIRST, compute_snapshot
from finsight.repositories.protocols import PriceRepository, PredictionRepository
from finsight.services.market_data_service import MarketDataService
from finsight.services.signal_fusion import FusionResult, fuse

logger = logging.getLogger(__name__)


def normalize_symbols(symbols: list[str]) -> list[str]:
    """Upper-case, strip and deduplicate symbols, keeping first-seen order."""
    seen: dict[str, None] = {}
    for symbol in symbols:
        cleaned = (symbol or "").strip().upper()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


@dataclass
class _SymbolOutcome:
    """What a worker produced for one symbol."""

    symbol: str
    bars: list[PricePoint]
    snapshot: Optional[IndicatorSnapshot] = None
    fusion: Optional[FusionResult] = None
    error: Optional[str] = None


class PredictionService:
    """Generates and serves rule-based price predictions."""

    def __init__(
        self,
        market_data: MarketDataService,
        price_repo: PriceRepository,
        prediction_repo: PredictionRepository,
        model_version: str,
        watchlist: Optional[list[str]] = None,
        history_days: int = 250,
        min_history: int = 200,
        horizon_days: int = 7,
        max_workers: int = 4,
        ema_seed: str = EMA_SEED_FIRST,
    ):
        self._market_data = market_data
        self._price_repo = price_repo
        self._prediction_repo = prediction_repo
        self._model_version = model_version
        self._watchlist = watchlist or []
        self._history_days = max(history_days, min_history)
        self._min_history = min_history
        self._horizon_days = horizon_days
        self._max_workers = max(1, max_workers)
        self._ema_seed = ema_seed

    def generate(self, symbols: Optional[list[str]] = None) -> PredictionBatchResult:
        """
        Run one prediction cycle.

        Uses the configured watchlist when no symbols are given. Returns the
        persisted predictions plus every skipped symbol with its reason.
        """
        targets = normalize_symbols(symbols if symbols else self._watchlist)
        result = PredictionBatchResult()
        if not targets:
            return result

        workers = min(self._max_workers, len(targets))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = list(executor.map(self._evaluate, targets))

        # Sessions are not shared across threads: all writes happen here
        prediction_date = now_eastern()
        target_date = add_days(prediction_date, self._horizon_days)
        for outcome in outcomes:
            if outcome.bars:
                try:
                    self._ingest(outcome)
                except Exception as exc:
                    logger.warning("Could not store history for %s: %s", outcome.symbol, exc)
                    outcome.error = outcome.error or f"history storage failed: {exc}"

            if outcome.error is not None:
                logger.warning("Skipping %s: %s", outcome.symbol, outcome.error)
                result.skipped.append(SkippedSymbol(outcome.symbol, outcome.error))
                continue

            prediction = Prediction(
                symbol=outcome.symbol,
                predicted_price=outcome.fusion.predicted_price,
                confidence_level=outcome.fusion.confidence_level,
                risk_level=outcome.fusion.risk_level,
                recommendation=outcome.fusion.recommendation,
                prediction_date=prediction_date,
                target_date=target_date,
                model_version=self._model_version,
                features_used=outcome.snapshot,
            )
            try:
                stored = self._prediction_repo.create(prediction)
            except Exception as exc:
                reason = f"prediction storage failed: {exc}"
                logger.warning("Skipping %s: %s", outcome.symbol, reason)
                result.skipped.append(SkippedSymbol(outcome.symbol, reason))
                continue
            logger.info(
                "Predicted %s: %.2f -> %.2f (%s, confidence %d, risk %s)",
                stored.symbol,
                stored.features_used.last_price,
                stored.predicted_price,
                stored.recommendation.value,
                stored.confidence_level,
                stored.risk_level.value,
            )
            result.predictions.append(stored)

        return result

    def get_predictions(
        self,
        symbols: Optional[list[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Prediction]:
        """Prediction feed, newest first."""
        return self._prediction_repo.query(
            symbols=normalize_symbols(symbols) if symbols else None,
            start=start,
            end=end,
            limit=limit,
        )

    def latest(self, symbol: str) -> Optional[Prediction]:
        return self._prediction_repo.latest(symbol.strip().upper())

    def _evaluate(self, symbol: str) -> _SymbolOutcome:
        """Fetch, compute and fuse one symbol. Runs on a worker thread; no store access."""
        try:
            bars = self._market_data.get_daily_history(symbol, self._history_days)
        except Exception as exc:
            return _SymbolOutcome(symbol, [], error=f"history fetch failed: {exc}")

        outcome = _SymbolOutcome(symbol, bars)
        if len(bars) < self._min_history:
            outcome.error = str(
                InsufficientHistory(
                    f"{symbol} has {len(bars)} daily bars, {self._min_history} required",
                    required=self._min_history,
                    available=len(bars),
                )
            )
            return outcome

        try:
            outcome.snapshot = compute_snapshot(bars, seed=self._ema_seed)
            outcome.fusion = fuse(outcome.snapshot)
        except AppError as exc:
            outcome.error = exc.message
        except Exception as exc:
            outcome.error = f"indicator computation failed: {exc}"
        return outcome

    def _ingest(self, outcome: _SymbolOutcome) -> None:
        summary = self._price_repo.ingest(outcome.symbol, outcome.bars)
        logger.debug(
            "Stored %d new bars for %s (%d already present)",
            summary.inserted_count,
            outcome.symbol,
            summary.skipped_count,
        )
