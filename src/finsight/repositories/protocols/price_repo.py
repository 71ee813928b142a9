"""Price history repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from finsight.domain.models import PricePoint
from finsight.domain.views import IngestSummary


class PriceRepository(Protocol):
    """Interface for the append-only daily bar store."""

    def ingest(self, symbol: str, bars: list[PricePoint]) -> IngestSummary:
        """Store bars whose (symbol, timestamp) is not already present."""
        ...

    def list_history(
        self,
        symbol: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[PricePoint]:
        """Bars ascending by timestamp; with limit, the most recent `limit` bars."""
        ...
