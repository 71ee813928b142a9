"""Order and conversation history repository protocols."""

from typing import Protocol, Optional

from finsight.domain.models import Order, Conversation


class OrderRepository(Protocol):
    """Interface for the append-only order log."""

    def create(self, order: Order) -> Order:
        """Append an order record."""
        ...

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> list[Order]:
        """Orders for a user, newest first."""
        ...


class ConversationRepository(Protocol):
    """Interface for stored assistant turns."""

    def create(self, conversation: Conversation) -> Conversation:
        ...

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> list[Conversation]:
        ...
