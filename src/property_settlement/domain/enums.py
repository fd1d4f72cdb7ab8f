"""Domain enumerations for property settlement.

These enums define the canonical phases and tags used throughout the system.
They are framework-agnostic (no SQLAlchemy, no FastAPI imports).
"""

import enum


class TransactionStatus(enum.StrEnum):
    """Lifecycle phases of a property sale transaction.

    Phase transitions are enforced by the TransactionStateMachine guard.
    See domain/state_machine.py for the transition table.
    """

    INITIATED = "INITIATED"
    CONTRACT_GENERATED = "CONTRACT_GENERATED"
    DOCUMENTS_PENDING = "DOCUMENTS_PENDING"
    DOCUMENTS_VERIFIED = "DOCUMENTS_VERIFIED"
    PAYMENT_PENDING = "PAYMENT_PENDING"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    OWNERSHIP_TRANSFER_PENDING = "OWNERSHIP_TRANSFER_PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DISPUTED = "DISPUTED"


TERMINAL_STATUSES: frozenset[TransactionStatus] = frozenset(
    {TransactionStatus.COMPLETED, TransactionStatus.CANCELLED}
)


class DocumentType(enum.StrEnum):
    """Kinds of documents collected before payment may begin."""

    TITLE_DEED = "TITLE_DEED"
    IDENTITY_SELLER = "IDENTITY_SELLER"
    IDENTITY_BUYER = "IDENTITY_BUYER"
    PURCHASE_AGREEMENT = "PURCHASE_AGREEMENT"
    MORTGAGE_APPROVAL = "MORTGAGE_APPROVAL"
    INSPECTION_REPORT = "INSPECTION_REPORT"


# Each of these needs at least one verified document before payment.
REQUIRED_DOCUMENTS: tuple[DocumentType, ...] = (
    DocumentType.TITLE_DEED,
    DocumentType.IDENTITY_SELLER,
    DocumentType.IDENTITY_BUYER,
    DocumentType.PURCHASE_AGREEMENT,
)


class PaymentMethod(enum.StrEnum):
    BANK_TRANSFER = "BANK_TRANSFER"
    ESCROW = "ESCROW"
    MORTGAGE = "MORTGAGE"


class PartyRole(enum.StrEnum):
    SELLER = "SELLER"
    BUYER = "BUYER"
    AGENT = "AGENT"
    NOTARY = "NOTARY"


class AuditAction(enum.StrEnum):
    """Action tags recorded in a transaction's audit log.

    Every phase transition MUST produce exactly one STATUS_CHANGED event.
    This is the append-only trail used to reconstruct a transaction's history.
    """

    # Lifecycle
    TRANSACTION_INITIATED = "TRANSACTION_INITIATED"
    CONTRACT_GENERATED = "CONTRACT_GENERATED"
    STATUS_CHANGED = "STATUS_CHANGED"

    # Escrow
    ESCROW_OPENED = "ESCROW_OPENED"
    ESCROW_FUNDED = "ESCROW_FUNDED"
    ESCROW_RELEASED = "ESCROW_RELEASED"

    # Documents
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_VERIFIED = "DOCUMENT_VERIFIED"

    # Payments
    PAYMENT_SUBMITTED = "PAYMENT_SUBMITTED"
    PAYMENT_CONFIRMED = "PAYMENT_CONFIRMED"

    # Closing
    OWNERSHIP_TRANSFERRED = "OWNERSHIP_TRANSFERRED"
    TRANSACTION_CANCELLED = "TRANSACTION_CANCELLED"

    # Disputes
    DISPUTE_RAISED = "DISPUTE_RAISED"
    DISPUTE_RESOLVED = "DISPUTE_RESOLVED"
