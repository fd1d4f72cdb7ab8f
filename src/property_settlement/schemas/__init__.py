"""Pydantic API schemas."""

from property_settlement.schemas.transaction import (
    AuditEventResponse,
    CancelTransactionRequest,
    CompleteTransferRequest,
    ConfirmPaymentRequest,
    DocumentResponse,
    EscrowResponse,
    HealthResponse,
    InitiateTransactionRequest,
    NotaryDecisionResponse,
    OpenEscrowRequest,
    PartySchema,
    PaymentResponse,
    ProcessPaymentRequest,
    PropertySchema,
    RaiseDisputeRequest,
    ResolveDisputeRequest,
    TransactionResponse,
    TransactionStatusResponse,
    UploadDocumentRequest,
    VerifyDocumentRequest,
)

__all__ = [
    "AuditEventResponse",
    "CancelTransactionRequest",
    "CompleteTransferRequest",
    "ConfirmPaymentRequest",
    "DocumentResponse",
    "EscrowResponse",
    "HealthResponse",
    "InitiateTransactionRequest",
    "NotaryDecisionResponse",
    "OpenEscrowRequest",
    "PartySchema",
    "PaymentResponse",
    "ProcessPaymentRequest",
    "PropertySchema",
    "RaiseDisputeRequest",
    "ResolveDisputeRequest",
    "TransactionResponse",
    "TransactionStatusResponse",
    "UploadDocumentRequest",
    "VerifyDocumentRequest",
]
