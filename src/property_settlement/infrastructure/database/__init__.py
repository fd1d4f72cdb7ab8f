"""Database infrastructure: engine, ORM model, and SQL-backed store."""

from property_settlement.infrastructure.database.engine import (
    build_engine,
    build_engine_from_settings,
    build_session_factory,
    close_db,
    init_db,
)
from property_settlement.infrastructure.database.orm_models import (
    Base,
    TransactionRecord,
)
from property_settlement.infrastructure.database.repositories import (
    SqlTransactionStore,
    dump_transaction,
    load_transaction,
)

__all__ = [
    "Base",
    "TransactionRecord",
    "SqlTransactionStore",
    "dump_transaction",
    "load_transaction",
    "build_engine",
    "build_engine_from_settings",
    "build_session_factory",
    "init_db",
    "close_db",
]
