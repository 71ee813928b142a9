"""SQLAlchemy repository implementations."""

from finsight.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from finsight.repositories.sqlalchemy.price_repo import SqlAlchemyPriceRepository
from finsight.repositories.sqlalchemy.prediction_repo import SqlAlchemyPredictionRepository
from finsight.repositories.sqlalchemy.portfolio_repo import SqlAlchemyPortfolioRepository
from finsight.repositories.sqlalchemy.order_repo import (
    SqlAlchemyOrderRepository,
    SqlAlchemyConversationRepository,
)

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyPriceRepository",
    "SqlAlchemyPredictionRepository",
    "SqlAlchemyPortfolioRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyConversationRepository",
]
