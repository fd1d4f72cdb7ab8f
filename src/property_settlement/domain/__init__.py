"""Domain layer: pure business logic with zero framework dependencies."""

from property_settlement.domain.collaborators import (
    ContractGenerator,
    DocumentScorer,
    ScoringRequest,
    ScoringResult,
    TransactionStore,
)
from property_settlement.domain.enums import (
    REQUIRED_DOCUMENTS,
    AuditAction,
    DocumentType,
    PartyRole,
    PaymentMethod,
    TransactionStatus,
)
from property_settlement.domain.exceptions import (
    ClosedTransactionError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    SettlementError,
    TransactionNotFoundError,
)
from property_settlement.domain.models import (
    AuditEvent,
    Document,
    EscrowAccount,
    GeneratedContract,
    Party,
    Payment,
    Property,
    Transaction,
)
from property_settlement.domain.state_machine import (
    TransactionStateMachine,
    validate_transition,
)

__all__ = [
    "REQUIRED_DOCUMENTS",
    "AuditAction",
    "DocumentType",
    "PartyRole",
    "PaymentMethod",
    "TransactionStatus",
    "ClosedTransactionError",
    "InvalidInputError",
    "InvalidStateError",
    "NotFoundError",
    "SettlementError",
    "TransactionNotFoundError",
    "AuditEvent",
    "Document",
    "EscrowAccount",
    "GeneratedContract",
    "Party",
    "Payment",
    "Property",
    "Transaction",
    "TransactionStateMachine",
    "validate_transition",
    "ContractGenerator",
    "DocumentScorer",
    "ScoringRequest",
    "ScoringResult",
    "TransactionStore",
]
