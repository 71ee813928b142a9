"""
Unit tests for the prediction orchestrator.

Tests cover:
- One persisted prediction per eligible symbol
- Skipping symbols with short history, failed fetches, malformed bars or failed writes
- Symbol normalization and deduplication
- Price ingestion without duplicates
- Prediction feed queries
"""

from dataclasses import replace
from datetime import timedelta

import pytest

from finsight.domain.models import Recommendation, RiskLevel
from finsight.services import MarketDataService, PredictionService
from finsight.services.prediction_service import normalize_symbols

from tests.conftest import DeterministicMarketProvider, make_bars, wave_closes


class PartialBarProvider(DeterministicMarketProvider):
    """Serves BAD with a newest bar missing its high, like a partial upstream row."""

    def get_daily_history(self, symbol, limit):
        if symbol.upper() != "BAD":
            return super().get_daily_history(symbol, limit)
        bars = make_bars("BAD", wave_closes(100.0, 260), end=self._as_of)
        bars[-1] = replace(bars[-1], high=None)
        return bars[-limit:]


class RefusingPredictionRepository:
    """Delegates to a real repository but fails to store one symbol."""

    def __init__(self, inner, refuse: str):
        self._inner = inner
        self._refuse = refuse

    def create(self, prediction):
        if prediction.symbol == self._refuse:
            raise RuntimeError("database is locked")
        return self._inner.create(prediction)

    def __getattr__(self, name):
        return getattr(self._inner, name)


# =============================================================================
# GENERATION TESTS
# =============================================================================


class TestGenerate:
    """Tests for a prediction cycle."""

    def test_generates_prediction_for_each_symbol(self, prediction_service, prediction_repo):
        """
        GIVEN a watchlist of AAPL and MSFT with 260 bars each
        WHEN generate() runs without explicit symbols
        THEN one prediction per symbol is stored with the configured model version
        """
        result = prediction_service.generate()

        assert sorted(result.produced_symbols) == ["AAPL", "MSFT"]
        assert result.skipped == []
        stored = prediction_repo.query()
        assert len(stored) == 2
        for prediction in stored:
            assert prediction.model_version == "rule-based-test"
            assert prediction.prediction_id is not None
            assert 60 <= prediction.confidence_level <= 95
            assert isinstance(prediction.risk_level, RiskLevel)
            assert isinstance(prediction.recommendation, Recommendation)

    def test_target_date_is_seven_days_later(self, prediction_service):
        result = prediction_service.generate(["AAPL"])

        prediction = result.predictions[0]
        delta = prediction.target_date.replace(tzinfo=None) - prediction.prediction_date.replace(tzinfo=None)
        assert delta == timedelta(days=7)

    def test_short_history_is_skipped_and_batch_continues(self, prediction_service):
        """
        GIVEN SHORT with only 50 bars next to AAPL with 260
        WHEN both are predicted
        THEN AAPL gets a prediction and SHORT is skipped with a reason
        """
        result = prediction_service.generate(["SHORT", "AAPL"])

        assert result.produced_symbols == ["AAPL"]
        assert len(result.skipped) == 1
        assert result.skipped[0].symbol == "SHORT"
        assert "200" in result.skipped[0].reason

    def test_fetch_failure_is_skipped(self, prediction_service):
        result = prediction_service.generate(["AAPL", "NOPE"])

        assert result.produced_symbols == ["AAPL"]
        assert result.skipped[0].symbol == "NOPE"
        assert "fetch failed" in result.skipped[0].reason

    def test_malformed_bar_is_skipped_and_batch_continues(self, fixed_now, price_repo, prediction_repo):
        """
        GIVEN BAD, whose newest bar has no high, between AAPL and MSFT
        WHEN the three are predicted
        THEN AAPL and MSFT get predictions, BAD is skipped and none of its bars are stored
        """
        service = PredictionService(
            market_data=MarketDataService(provider=PartialBarProvider(as_of=fixed_now)),
            price_repo=price_repo,
            prediction_repo=prediction_repo,
            model_version="v",
            max_workers=3,
        )

        result = service.generate(["AAPL", "BAD", "MSFT"])

        assert result.produced_symbols == ["AAPL", "MSFT"]
        assert [s.symbol for s in result.skipped] == ["BAD"]
        assert "indicator computation failed" in result.skipped[0].reason
        assert price_repo.list_history("BAD") == []
        assert len(price_repo.list_history("MSFT")) == 250

    def test_prediction_write_failure_skips_only_that_symbol(self, market_data_service, price_repo, prediction_repo):
        service = PredictionService(
            market_data=market_data_service,
            price_repo=price_repo,
            prediction_repo=RefusingPredictionRepository(prediction_repo, refuse="AAPL"),
            model_version="v",
        )

        result = service.generate(["AAPL", "MSFT"])

        assert result.produced_symbols == ["MSFT"]
        assert result.skipped[0].symbol == "AAPL"
        assert "prediction storage failed" in result.skipped[0].reason
        assert [p.symbol for p in prediction_repo.query()] == ["MSFT"]

    def test_all_failing_provider_produces_nothing(self, failing_provider, price_repo, prediction_repo):
        service = PredictionService(
            market_data=MarketDataService(provider=failing_provider),
            price_repo=price_repo,
            prediction_repo=prediction_repo,
            model_version="v",
        )

        result = service.generate(["AAPL", "MSFT"])

        assert result.predictions == []
        assert [s.symbol for s in result.skipped] == ["AAPL", "MSFT"]
        assert prediction_repo.query() == []

    def test_symbols_are_deduplicated(self, prediction_service, deterministic_provider):
        result = prediction_service.generate(["aapl", "AAPL ", " Aapl"])

        assert result.produced_symbols == ["AAPL"]
        assert deterministic_provider.history_calls == ["AAPL"]

    def test_empty_symbol_list_without_watchlist(self, market_data_service, price_repo, prediction_repo):
        service = PredictionService(
            market_data=market_data_service,
            price_repo=price_repo,
            prediction_repo=prediction_repo,
            model_version="v",
        )

        result = service.generate([])

        assert result.predictions == []
        assert result.skipped == []

    def test_repeated_runs_accumulate_predictions(self, prediction_service, prediction_repo):
        prediction_service.generate(["AAPL"])
        prediction_service.generate(["AAPL"])

        assert len(prediction_repo.query(symbols=["AAPL"])) == 2

    def test_same_input_gives_same_prediction(self, prediction_service):
        first = prediction_service.generate(["MSFT"]).predictions[0]
        second = prediction_service.generate(["MSFT"]).predictions[0]

        assert first.predicted_price == second.predicted_price
        assert first.recommendation == second.recommendation
        assert first.features_used == second.features_used


# =============================================================================
# INGESTION TESTS
# =============================================================================


class TestIngestion:
    def test_fetched_bars_are_stored_once(self, prediction_service, price_repo):
        """
        GIVEN two prediction runs over the same history
        WHEN bars are ingested each time
        THEN the store holds each (symbol, timestamp) once
        """
        prediction_service.generate(["AAPL"])
        prediction_service.generate(["AAPL"])

        history = price_repo.list_history("AAPL")
        assert len(history) == 250
        stamps = [b.timestamp for b in history]
        assert len(set(stamps)) == len(stamps)

    def test_short_history_bars_are_still_stored(self, prediction_service, price_repo):
        prediction_service.generate(["SHORT"])

        assert len(price_repo.list_history("SHORT")) == 50


# =============================================================================
# FEED TESTS
# =============================================================================


class TestPredictionFeed:
    def test_latest_returns_most_recent(self, prediction_service):
        prediction_service.generate(["AAPL", "MSFT"])

        latest = prediction_service.latest("aapl")

        assert latest is not None
        assert latest.symbol == "AAPL"

    def test_latest_unknown_symbol_is_none(self, prediction_service):
        assert prediction_service.latest("AAPL") is None

    def test_feed_filters_by_symbol(self, prediction_service):
        prediction_service.generate(["AAPL", "MSFT"])

        feed = prediction_service.get_predictions(symbols=["msft"])

        assert [p.symbol for p in feed] == ["MSFT"]


class TestNormalizeSymbols:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (["aapl", "MSFT", "aapl"], ["AAPL", "MSFT"]),
            ([" tsla ", "", "  "], ["TSLA"]),
            ([], []),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_symbols(raw) == expected
