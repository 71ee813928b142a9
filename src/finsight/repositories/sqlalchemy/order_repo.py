"""SQLAlchemy implementations of OrderRepository and ConversationRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from finsight.core.timezone import to_eastern, to_naive_eastern
from finsight.domain.models import Order, Conversation
from finsight.repositories.sqlalchemy.orm_models import OrderORM, ConversationORM


class SqlAlchemyOrderRepository:
    """SQLAlchemy-backed order log."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, order: Order) -> Order:
        """Append an order record."""
        orm_order = OrderORM(
            order_id=order.order_id,
            user_id=order.user_id,
            symbol=order.symbol,
            quantity=order.quantity,
            price=order.price,
            side=order.side,
            status=order.status,
            message=order.message,
            created_at_est=to_naive_eastern(order.created_at),
        )
        self._db.add(orm_order)
        self._db.commit()
        self._db.refresh(orm_order)
        return self._to_domain(orm_order)

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> list[Order]:
        """Orders for a user, newest first."""
        query = (
            self._db.query(OrderORM)
            .filter(OrderORM.user_id == user_id)
            .order_by(OrderORM.created_at_est.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_domain(o) for o in query.all()]

    @staticmethod
    def _to_domain(orm: OrderORM) -> Order:
        return Order(
            order_id=orm.order_id,
            user_id=orm.user_id,
            symbol=orm.symbol,
            quantity=Decimal(str(orm.quantity)),
            price=Decimal(str(orm.price)) if orm.price is not None else None,
            side=orm.side,
            status=orm.status,
            message=orm.message,
            created_at=to_eastern(orm.created_at_est),
        )


class SqlAlchemyConversationRepository:
    """SQLAlchemy-backed conversation history."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, conversation: Conversation) -> Conversation:
        orm_conv = ConversationORM(
            conversation_id=conversation.conversation_id,
            user_id=conversation.user_id,
            user_message=conversation.user_message,
            assistant_response=conversation.assistant_response,
            created_at_est=to_naive_eastern(conversation.created_at),
        )
        self._db.add(orm_conv)
        self._db.commit()
        self._db.refresh(orm_conv)
        return self._to_domain(orm_conv)

    def list_by_user(self, user_id: str, limit: Optional[int] = None) -> list[Conversation]:
        query = (
            self._db.query(ConversationORM)
            .filter(ConversationORM.user_id == user_id)
            .order_by(ConversationORM.created_at_est.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_domain(c) for c in query.all()]

    @staticmethod
    def _to_domain(orm: ConversationORM) -> Conversation:
        return Conversation(
            conversation_id=orm.conversation_id,
            user_id=orm.user_id,
            user_message=orm.user_message,
            assistant_response=orm.assistant_response,
            created_at=to_eastern(orm.created_at_est),
        )
