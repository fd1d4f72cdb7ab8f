"""SQLAlchemy 2.0 ORM model for persisted transactions.

One table:
    property_transactions: one row per transaction aggregate.

Design decisions:
    - The full aggregate (documents, payments, escrow, audit log, contract)
      is stored as a single JSON document. It is only ever read and written
      whole, under the orchestrator's per-transaction lock.
    - status, property_address and price are denormalized into columns so
      they can be filtered and indexed without parsing the document.
    - CHECK constraint on status to prevent invalid enum values at DB level.
    - JSON maps to JSONB on PostgreSQL and to plain JSON elsewhere (SQLite).
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal  # noqa: TC003 - needed at runtime by SQLAlchemy Mapped[]

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from property_settlement.domain.enums import TransactionStatus

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in TransactionStatus)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TransactionRecord(Base):
    """Persisted form of a Transaction aggregate."""

    __tablename__ = "property_transactions"

    # --- Primary Key ---
    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Transaction identifier (UUID string)",
    )

    # --- Denormalized lookup columns ---
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Current lifecycle phase (guarded by TransactionStateMachine)",
    )
    property_address: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(18, 2),
        nullable=False,
        comment="Agreed property price",
    )

    # --- Aggregate ---
    aggregate: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        comment="Full transaction aggregate including its audit log",
    )

    # --- Timestamps ---
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_transaction_valid_status"),
        CheckConstraint("price > 0", name="ck_transaction_positive_price"),
        Index("idx_transaction_status", "status"),
        Index("idx_transaction_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TransactionRecord id={self.id} status={self.status} price={self.price}>"
