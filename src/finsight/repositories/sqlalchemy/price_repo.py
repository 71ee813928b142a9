"""SQLAlchemy implementation of PriceRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finsight.core.timezone import to_eastern, to_naive_eastern
from finsight.domain.models import PricePoint
from finsight.domain.views import IngestSummary
from finsight.repositories.sqlalchemy.orm_models import PricePointORM


class SqlAlchemyPriceRepository:
    """SQLAlchemy-backed append-only store of daily bars."""

    def __init__(self, db: Session):
        self._db = db

    def ingest(self, symbol: str, bars: list[PricePoint]) -> IngestSummary:
        """Insert bars whose timestamp is not stored yet; existing bars are left untouched."""
        symbol = symbol.upper()
        summary = IngestSummary(symbol=symbol)
        if not bars:
            return summary

        stamps = [to_naive_eastern(b.timestamp) for b in bars]
        existing = {
            row.timestamp_est
            for row in self._db.query(PricePointORM.timestamp_est)
            .filter(
                PricePointORM.symbol == symbol,
                PricePointORM.timestamp_est >= min(stamps),
                PricePointORM.timestamp_est <= max(stamps),
            )
            .all()
        }

        for bar, stamp in zip(bars, stamps):
            if stamp in existing:
                summary.skipped_count += 1
                continue
            existing.add(stamp)
            self._db.add(
                PricePointORM(
                    symbol=symbol,
                    timestamp_est=stamp,
                    open=bar.open,
                    high=bar.high,
                    low=bar.low,
                    close=bar.close,
                    volume=bar.volume,
                )
            )
            summary.inserted_count += 1

        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise
        return summary

    def list_history(
        self,
        symbol: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[PricePoint]:
        """Bars ascending by timestamp; with limit, the most recent `limit` bars."""
        query = self._db.query(PricePointORM).filter(PricePointORM.symbol == symbol.upper())
        if start:
            query = query.filter(PricePointORM.timestamp_est >= to_naive_eastern(start))
        if end:
            query = query.filter(PricePointORM.timestamp_est <= to_naive_eastern(end))

        if limit is not None:
            rows = query.order_by(PricePointORM.timestamp_est.desc()).limit(limit).all()
            rows.reverse()
        else:
            rows = query.order_by(PricePointORM.timestamp_est).all()
        return [self._to_domain(r) for r in rows]

    @staticmethod
    def _to_domain(orm: PricePointORM) -> PricePoint:
        """Convert ORM model to domain model."""
        return PricePoint(
            symbol=orm.symbol,
            timestamp=to_eastern(orm.timestamp_est),
            open=orm.open,
            high=orm.high,
            low=orm.low,
            close=orm.close,
            volume=orm.volume or 0.0,
        )
