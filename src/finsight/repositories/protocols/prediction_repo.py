"""Prediction repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from finsight.domain.models import Prediction


class PredictionRepository(Protocol):
    """Interface for the prediction time series (insert-only)."""

    def create(self, prediction: Prediction) -> Prediction:
        """Persist a new prediction and return it with its id assigned."""
        ...

    def query(
        self,
        symbols: Optional[list[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Prediction]:
        """Predictions newest first, filtered by symbol and prediction_date range."""
        ...

    def latest(self, symbol: str) -> Optional[Prediction]:
        """Most recent prediction for a symbol."""
        ...
