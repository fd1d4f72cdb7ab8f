"""Transaction aggregate and its nested records.

Plain dataclasses: the orchestrator owns and mutates them, the stores persist
them, and the API layer reads them through pydantic ``from_attributes``
schemas. No framework imports here.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from property_settlement.domain.enums import (
    AuditAction,
    DocumentType,
    PartyRole,
    PaymentMethod,
    TransactionStatus,
)


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Property:
    id: str
    address: str
    price: Decimal
    square_meters: float
    description: str | None = None


@dataclass
class Party:
    id: str
    name: str
    email: str
    phone_number: str
    role: PartyRole


@dataclass
class GeneratedContract:
    """Opaque purchase agreement returned by a ContractGenerator."""

    id: str
    template_version: str
    generated_at: datetime
    property_address: str
    seller_name: str
    buyer_name: str
    agreed_price: Decimal
    content: str
    signed_at: datetime | None = None
    signed_by: str | None = None


@dataclass
class Document:
    type: DocumentType
    uploaded_by: str
    id: str = field(default_factory=new_id)
    uploaded_at: datetime = field(default_factory=utcnow)
    verified: bool = False
    verified_by: str | None = None
    verified_at: datetime | None = None
    notes: str | None = None


@dataclass
class Payment:
    amount: Decimal
    paid_by: str
    method: PaymentMethod
    reference: str
    id: str = field(default_factory=new_id)
    paid_at: datetime = field(default_factory=utcnow)
    confirmed: bool = False


@dataclass
class EscrowAccount:
    id: str = field(default_factory=new_id)
    balance: Decimal = Decimal("0")
    held_since: datetime = field(default_factory=utcnow)
    released: bool = False


@dataclass(frozen=True)
class AuditEvent:
    """One immutable entry of the append-only audit trail."""

    actor: str
    action: AuditAction
    description: str
    timestamp: datetime = field(default_factory=utcnow)
    previous_status: TransactionStatus | None = None
    new_status: TransactionStatus | None = None


@dataclass
class Transaction:
    """Aggregate root for a single property sale."""

    property: Property
    seller: Party
    buyer: Party
    id: str = field(default_factory=new_id)
    status: TransactionStatus = TransactionStatus.INITIATED
    documents: list[Document] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)
    escrow: EscrowAccount | None = None
    audit_log: list[AuditEvent] = field(default_factory=list)
    contract: GeneratedContract | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    dispute_reason: str | None = None

    def find_document(self, document_id: str) -> Document | None:
        return next((d for d in self.documents if d.id == document_id), None)

    def find_payment(self, payment_id: str) -> Payment | None:
        return next((p for p in self.payments if p.id == payment_id), None)

    def verified_document_types(self) -> set[DocumentType]:
        return {d.type for d in self.documents if d.verified}

    def confirmed_total(self) -> Decimal:
        return sum((p.amount for p in self.payments if p.confirmed), Decimal("0"))
