"""Portfolio repository protocol (positions and per-user summary)."""

from decimal import Decimal
from typing import Protocol, Optional

from finsight.domain.models import Position, PortfolioSummary


class PortfolioRepository(Protocol):
    """Interface for position and summary data access."""

    def get_position(self, user_id: str, symbol: str) -> Optional[Position]:
        """Get the position for one symbol, or None when nothing is held."""
        ...

    def list_positions(self, user_id: str) -> list[Position]:
        """Get all open positions for a user, ordered by symbol."""
        ...

    def get_summary(self, user_id: str) -> Optional[PortfolioSummary]:
        """Get the cash/equity summary for a user."""
        ...

    def deposit_cash(self, user_id: str, amount: Decimal) -> PortfolioSummary:
        """Add cash to a user's summary, creating the summary if needed."""
        ...

    def apply_reconciliation(
        self,
        position: Position,
        cash: Decimal,
        expected_position_version: Optional[int],
        expected_summary_version: Optional[int],
    ) -> tuple[Optional[Position], PortfolioSummary]:
        """
        Write a reconciled position and the new cash balance atomically.

        A position with zero quantity is deleted. An expected version of None
        means the row must not exist yet. Equity is recomputed from the
        stored positions in the same transaction. Raises
        ReconciliationConflict (with nothing written) when either row changed
        since it was read. Returns the stored position (None when deleted)
        and the new summary.
        """
        ...
