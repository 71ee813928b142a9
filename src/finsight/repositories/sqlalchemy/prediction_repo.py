"""SQLAlchemy implementation of PredictionRepository."""

import json
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finsight.core.timezone import to_eastern, to_naive_eastern
from finsight.domain.models import Prediction, IndicatorSnapshot
from finsight.repositories.sqlalchemy.orm_models import PredictionORM


class SqlAlchemyPredictionRepository:
    """SQLAlchemy-backed prediction repository. Rows are never updated."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, prediction: Prediction) -> Prediction:
        """Persist a new prediction."""
        if prediction.prediction_id is None:
            prediction = replace(prediction, prediction_id=str(uuid.uuid4()))
        orm_pred = PredictionORM(
            prediction_id=prediction.prediction_id,
            symbol=prediction.symbol,
            predicted_price=prediction.predicted_price,
            confidence_level=prediction.confidence_level,
            risk_level=prediction.risk_level,
            recommendation=prediction.recommendation,
            prediction_date_est=to_naive_eastern(prediction.prediction_date),
            target_date_est=to_naive_eastern(prediction.target_date),
            model_version=prediction.model_version,
            features_used_json=json.dumps(prediction.features_used.to_dict()),
        )
        self._db.add(orm_pred)
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise
        self._db.refresh(orm_pred)
        return self._to_domain(orm_pred)

    def query(
        self,
        symbols: Optional[list[str]] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Prediction]:
        """Query predictions with filters, newest first."""
        query = self._db.query(PredictionORM)
        if symbols:
            query = query.filter(PredictionORM.symbol.in_([s.upper() for s in symbols]))
        if start:
            query = query.filter(PredictionORM.prediction_date_est >= to_naive_eastern(start))
        if end:
            query = query.filter(PredictionORM.prediction_date_est <= to_naive_eastern(end))
        query = query.order_by(PredictionORM.prediction_date_est.desc(), PredictionORM.symbol)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_domain(p) for p in query.all()]

    def latest(self, symbol: str) -> Optional[Prediction]:
        """Most recent prediction for a symbol."""
        orm_pred = (
            self._db.query(PredictionORM)
            .filter(PredictionORM.symbol == symbol.upper())
            .order_by(PredictionORM.prediction_date_est.desc())
            .first()
        )
        return self._to_domain(orm_pred) if orm_pred else None

    @staticmethod
    def _to_domain(orm: PredictionORM) -> Prediction:
        """Convert ORM model to domain model."""
        return Prediction(
            prediction_id=orm.prediction_id,
            symbol=orm.symbol,
            predicted_price=orm.predicted_price,
            confidence_level=orm.confidence_level,
            risk_level=orm.risk_level,
            recommendation=orm.recommendation,
            prediction_date=to_eastern(orm.prediction_date_est),
            target_date=to_eastern(orm.target_date_est),
            model_version=orm.model_version,
            features_used=IndicatorSnapshot.from_dict(json.loads(orm.features_used_json)),
        )
