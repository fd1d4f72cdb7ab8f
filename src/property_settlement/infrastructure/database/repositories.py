"""SQL-backed transaction store.

Implements the TransactionStore protocol on top of an async session factory.
Each call opens its own short-lived session and commits before returning;
the orchestrator's per-transaction lock serializes writers to one row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import TypeAdapter
from sqlalchemy import select

from property_settlement.domain.models import Transaction
from property_settlement.infrastructure.database.orm_models import TransactionRecord

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

_codec: TypeAdapter[Transaction] = TypeAdapter(Transaction)


def dump_transaction(transaction: Transaction) -> dict:
    """Serialize an aggregate to a JSON-compatible dict."""
    return _codec.dump_python(transaction, mode="json")


def load_transaction(data: dict) -> Transaction:
    """Rebuild an aggregate from the output of ``dump_transaction``."""
    return _codec.validate_python(data)


class SqlTransactionStore:
    """TransactionStore persisting one row per aggregate."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, transaction: Transaction) -> None:
        async with self._session_factory() as session, session.begin():
            session.add(
                TransactionRecord(
                    id=transaction.id,
                    status=transaction.status.value,
                    property_address=transaction.property.address,
                    price=transaction.property.price,
                    aggregate=dump_transaction(transaction),
                    created_at=transaction.created_at,
                    updated_at=transaction.updated_at,
                )
            )

    async def get(self, transaction_id: str) -> Transaction | None:
        async with self._session_factory() as session:
            record = await session.get(TransactionRecord, transaction_id)
            if record is None:
                return None
            return load_transaction(record.aggregate)

    async def save(self, transaction: Transaction) -> None:
        async with self._session_factory() as session, session.begin():
            record = await session.get(TransactionRecord, transaction.id)
            if record is None:
                raise KeyError(transaction.id)
            record.status = transaction.status.value
            record.aggregate = dump_transaction(transaction)
            record.updated_at = transaction.updated_at

    async def list_all(self) -> list[Transaction]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TransactionRecord).order_by(TransactionRecord.created_at.asc())
            )
            return [load_transaction(r.aggregate) for r in result.scalars().all()]
