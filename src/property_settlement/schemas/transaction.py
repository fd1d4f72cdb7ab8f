"""Pydantic schemas for the Transaction API.

These schemas define the request/response shapes for the REST API. They are
separate from the domain dataclasses to keep the wire format and the
aggregate free to evolve independently.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - needed at runtime by pydantic
from decimal import Decimal  # noqa: TC003 - needed at runtime by pydantic

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from property_settlement.domain.enums import (
    AuditAction,
    DocumentType,
    PartyRole,
    PaymentMethod,
    TransactionStatus,
)

# ---------------------------------------------------------------------------
# Shared value shapes (used both in requests and responses)
# ---------------------------------------------------------------------------


class PropertySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1, examples=["prop-001"])
    address: str = Field(
        ...,
        min_length=3,
        max_length=500,
        examples=["Keizersgracht 123, 1015 CJ Amsterdam"],
    )
    price: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Agreed sale price",
        examples=[350000],
    )
    square_meters: float = Field(..., gt=0, examples=[120])
    description: str | None = Field(default=None, max_length=2000)


class PartySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone_number: str = Field(..., min_length=3, max_length=40)
    role: PartyRole


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------


class InitiateTransactionRequest(BaseModel):
    """Request body for initiating a new transaction."""

    property: PropertySchema
    seller: PartySchema
    buyer: PartySchema


class OpenEscrowRequest(BaseModel):
    actor: str = Field(default="SYSTEM", min_length=1)


class UploadDocumentRequest(BaseModel):
    document_type: DocumentType
    uploaded_by: str = Field(..., min_length=1)
    notes: str | None = Field(default=None, max_length=2000)


class VerifyDocumentRequest(BaseModel):
    verified_by: str = Field(default="NOTARY", min_length=1)


class ProcessPaymentRequest(BaseModel):
    amount: Decimal = Field(
        ...,
        description="Payment amount; must be positive",
        examples=[350000],
    )
    paid_by: str = Field(..., min_length=1)
    method: PaymentMethod
    reference: str | None = Field(
        default=None,
        description="Bank or escrow reference; generated when omitted",
    )


class ConfirmPaymentRequest(BaseModel):
    confirmed_by: str = Field(default="BANK", min_length=1)


class CompleteTransferRequest(BaseModel):
    notary_id: str = Field(default="NOTARY", min_length=1)


class CancelTransactionRequest(BaseModel):
    actor: str = Field(default="SYSTEM", min_length=1)
    reason: str = Field(default="No reason provided", min_length=1, max_length=2000)


class RaiseDisputeRequest(BaseModel):
    actor: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=2000)


class ResolveDisputeRequest(BaseModel):
    actor: str = Field(..., min_length=1)
    resolution: str = Field(..., min_length=1, max_length=2000)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: DocumentType
    uploaded_by: str
    uploaded_at: datetime
    verified: bool
    verified_by: str | None
    verified_at: datetime | None
    notes: str | None


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    amount: Decimal
    paid_by: str
    paid_at: datetime
    method: PaymentMethod
    reference: str
    confirmed: bool


class EscrowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    balance: Decimal
    held_since: datetime
    released: bool


class AuditEventResponse(BaseModel):
    """Response schema for an audit event."""

    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    actor: str
    action: AuditAction
    description: str
    previous_status: TransactionStatus | None
    new_status: TransactionStatus | None


class ContractResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    template_version: str
    generated_at: datetime
    property_address: str
    seller_name: str
    buyer_name: str
    agreed_price: Decimal
    content: str
    signed_at: datetime | None
    signed_by: str | None


class TransactionResponse(BaseModel):
    """Response schema for the full transaction aggregate."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    property: PropertySchema
    seller: PartySchema
    buyer: PartySchema
    status: TransactionStatus
    documents: list[DocumentResponse]
    payments: list[PaymentResponse]
    escrow: EscrowResponse | None
    audit_log: list[AuditEventResponse]
    contract: ContractResponse | None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None
    cancelled_at: datetime | None
    dispute_reason: str | None


class TransactionStatusResponse(BaseModel):
    """Lightweight status check response."""

    transaction_id: str
    status: TransactionStatus
    dispute_reason: str | None
    allowed_events: list[str] = Field(
        description="State machine events that can fire from the current status"
    )


class NotaryDecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_id: str
    document_type: DocumentType
    score: float
    threshold: float
    approved: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    store_backend: str = "memory"
    store: str = "unknown"
