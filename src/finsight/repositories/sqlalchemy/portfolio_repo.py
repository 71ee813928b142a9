"""SQLAlchemy implementation of PortfolioRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from finsight.core.exceptions import ReconciliationConflict
from finsight.core.timezone import now_eastern, to_eastern, to_naive_eastern
from finsight.domain.models import Position, PortfolioSummary, quantize_money
from finsight.repositories.sqlalchemy.orm_models import PositionORM, PortfolioSummaryORM


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


class SqlAlchemyPortfolioRepository:
    """SQLAlchemy-backed positions and summaries with optimistic versioning."""

    def __init__(self, db: Session):
        self._db = db

    # Position operations

    def get_position(self, user_id: str, symbol: str) -> Optional[Position]:
        """Get the position for a specific symbol."""
        orm_pos = (
            self._db.query(PositionORM)
            .filter(
                PositionORM.user_id == user_id,
                PositionORM.symbol == symbol,
            )
            .first()
        )
        return self._position_to_domain(orm_pos) if orm_pos else None

    def list_positions(self, user_id: str) -> list[Position]:
        """Get all positions for a user."""
        orm_positions = (
            self._db.query(PositionORM)
            .filter(PositionORM.user_id == user_id)
            .order_by(PositionORM.symbol)
            .all()
        )
        return [self._position_to_domain(p) for p in orm_positions]

    # Summary operations

    def get_summary(self, user_id: str) -> Optional[PortfolioSummary]:
        """Get the summary for a user."""
        orm_summary = (
            self._db.query(PortfolioSummaryORM)
            .filter(PortfolioSummaryORM.user_id == user_id)
            .first()
        )
        return self._summary_to_domain(orm_summary) if orm_summary else None

    def deposit_cash(self, user_id: str, amount: Decimal) -> PortfolioSummary:
        """Add cash to a user's summary, creating it on first deposit."""
        orm_summary = (
            self._db.query(PortfolioSummaryORM)
            .filter(PortfolioSummaryORM.user_id == user_id)
            .first()
        )
        now = to_naive_eastern(now_eastern())
        if orm_summary:
            orm_summary.cash = quantize_money(_dec(orm_summary.cash) + amount)
            orm_summary.version = (orm_summary.version or 0) + 1
            orm_summary.updated_at_est = now
        else:
            orm_summary = PortfolioSummaryORM(
                user_id=user_id,
                cash=quantize_money(amount),
                equity=Decimal("0"),
                version=1,
                updated_at_est=now,
            )
            self._db.add(orm_summary)

        self._db.commit()
        self._db.refresh(orm_summary)
        return self._summary_to_domain(orm_summary)

    # Reconciliation

    def apply_reconciliation(
        self,
        position: Position,
        cash: Decimal,
        expected_position_version: Optional[int],
        expected_summary_version: Optional[int],
    ) -> tuple[Optional[Position], PortfolioSummary]:
        """Write the reconciled position and cash in one transaction (see protocol)."""
        user_id, symbol = position.user_id, position.symbol
        now = to_naive_eastern(now_eastern())
        try:
            self._write_position(position, expected_position_version, now)
            self._db.flush()

            equity = quantize_money(
                sum(
                    (
                        _dec(row.market_value)
                        for row in self._db.query(PositionORM.market_value)
                        .filter(PositionORM.user_id == user_id)
                        .all()
                    ),
                    Decimal("0"),
                )
            )
            self._write_summary(user_id, cash, equity, expected_summary_version, now)
            self._db.commit()
        except ReconciliationConflict:
            self._db.rollback()
            raise
        except IntegrityError as exc:
            # Another writer inserted the row first
            self._db.rollback()
            raise ReconciliationConflict(user_id, symbol) from exc

        return self.get_position(user_id, symbol), self.get_summary(user_id)

    def _write_position(self, position: Position, expected_version: Optional[int], now) -> None:
        user_id, symbol = position.user_id, position.symbol
        if expected_version is None:
            exists = (
                self._db.query(PositionORM.version)
                .filter(PositionORM.user_id == user_id, PositionORM.symbol == symbol)
                .first()
            )
            if exists is not None:
                raise ReconciliationConflict(user_id, symbol)
            if position.quantity > 0:
                self._db.add(
                    PositionORM(
                        user_id=user_id,
                        symbol=symbol,
                        quantity=position.quantity,
                        cost_basis=position.cost_basis,
                        current_price=position.current_price,
                        market_value=position.market_value,
                        unrealized_pl=position.unrealized_pl,
                        unrealized_plpc=position.unrealized_plpc,
                        version=1,
                        updated_at_est=now,
                    )
                )
            return

        query = self._db.query(PositionORM).filter(
            PositionORM.user_id == user_id,
            PositionORM.symbol == symbol,
            PositionORM.version == expected_version,
        )
        if position.quantity == 0:
            count = query.delete(synchronize_session=False)
        else:
            count = query.update(
                {
                    PositionORM.quantity: position.quantity,
                    PositionORM.cost_basis: position.cost_basis,
                    PositionORM.current_price: position.current_price,
                    PositionORM.market_value: position.market_value,
                    PositionORM.unrealized_pl: position.unrealized_pl,
                    PositionORM.unrealized_plpc: position.unrealized_plpc,
                    PositionORM.version: expected_version + 1,
                    PositionORM.updated_at_est: now,
                },
                synchronize_session=False,
            )
        if count != 1:
            raise ReconciliationConflict(user_id, symbol)

    def _write_summary(
        self,
        user_id: str,
        cash: Decimal,
        equity: Decimal,
        expected_version: Optional[int],
        now,
    ) -> None:
        if expected_version is None:
            exists = (
                self._db.query(PortfolioSummaryORM.version)
                .filter(PortfolioSummaryORM.user_id == user_id)
                .first()
            )
            if exists is not None:
                raise ReconciliationConflict(user_id, "*")
            self._db.add(
                PortfolioSummaryORM(
                    user_id=user_id,
                    cash=cash,
                    equity=equity,
                    version=1,
                    updated_at_est=now,
                )
            )
            self._db.flush()
            return

        count = (
            self._db.query(PortfolioSummaryORM)
            .filter(
                PortfolioSummaryORM.user_id == user_id,
                PortfolioSummaryORM.version == expected_version,
            )
            .update(
                {
                    PortfolioSummaryORM.cash: cash,
                    PortfolioSummaryORM.equity: equity,
                    PortfolioSummaryORM.version: expected_version + 1,
                    PortfolioSummaryORM.updated_at_est: now,
                },
                synchronize_session=False,
            )
        )
        if count != 1:
            raise ReconciliationConflict(user_id, "*")

    @staticmethod
    def _position_to_domain(orm: PositionORM) -> Position:
        """Convert ORM position to domain model."""
        return Position(
            user_id=orm.user_id,
            symbol=orm.symbol,
            quantity=_dec(orm.quantity),
            cost_basis=_dec(orm.cost_basis),
            current_price=_dec(orm.current_price),
            market_value=_dec(orm.market_value),
            unrealized_pl=_dec(orm.unrealized_pl),
            unrealized_plpc=_dec(orm.unrealized_plpc),
            version=orm.version or 0,
            updated_at=to_eastern(orm.updated_at_est) if orm.updated_at_est else None,
        )

    @staticmethod
    def _summary_to_domain(orm: PortfolioSummaryORM) -> PortfolioSummary:
        """Convert ORM summary to domain model."""
        return PortfolioSummary(
            user_id=orm.user_id,
            cash=_dec(orm.cash),
            equity=_dec(orm.equity),
            version=orm.version or 0,
            updated_at=to_eastern(orm.updated_at_est) if orm.updated_at_est else None,
        )
