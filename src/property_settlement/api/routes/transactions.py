"""Transaction REST API routes.

These endpoints expose the orchestrator's operations over HTTP. The
simulation script calls the same service layer, ensuring consistency.

Routes:
    POST   /api/v1/transactions                                  Initiate
    GET    /api/v1/transactions                                  List all
    GET    /api/v1/transactions/{id}                             Full record
    GET    /api/v1/transactions/{id}/status                      Status + allowed events
    GET    /api/v1/transactions/{id}/audit                       Audit trail
    POST   /api/v1/transactions/{id}/escrow                      Open escrow
    POST   /api/v1/transactions/{id}/documents                   Upload document
    PATCH  /api/v1/transactions/{id}/documents/{doc_id}/verify   Verify document
    POST   /api/v1/transactions/{id}/notary-review               AI notary review
    POST   /api/v1/transactions/{id}/payments                    Submit payment
    PATCH  /api/v1/transactions/{id}/payments/{pay_id}/confirm   Confirm payment
    POST   /api/v1/transactions/{id}/complete                    Transfer ownership
    POST   /api/v1/transactions/{id}/cancel                      Cancel
    POST   /api/v1/transactions/{id}/dispute                     Raise dispute
    POST   /api/v1/transactions/{id}/dispute/resolve             Resolve dispute
"""

from __future__ import annotations

import secrets
import time

from fastapi import APIRouter, Depends

from property_settlement.api.deps import get_notary_service, get_transaction_service
from property_settlement.domain.models import Party, Property
from property_settlement.schemas.transaction import (
    AuditEventResponse,
    CancelTransactionRequest,
    CompleteTransferRequest,
    ConfirmPaymentRequest,
    DocumentResponse,
    EscrowResponse,
    InitiateTransactionRequest,
    NotaryDecisionResponse,
    OpenEscrowRequest,
    PaymentResponse,
    ProcessPaymentRequest,
    RaiseDisputeRequest,
    ResolveDisputeRequest,
    TransactionResponse,
    TransactionStatusResponse,
    UploadDocumentRequest,
    VerifyDocumentRequest,
)
from property_settlement.services.notary_service import NotaryAgentService
from property_settlement.services.transaction_service import TransactionService

router = APIRouter(prefix="/api/v1/transactions", tags=["Transactions"])


def _payment_reference() -> str:
    return f"REF-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


# ---------------------------------------------------------------------------
# Initiate
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=201,
    summary="Initiate a new transaction",
)
async def initiate_transaction(
    request: InitiateTransactionRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """Create a transaction; it comes back already in DOCUMENTS_PENDING."""
    tx = await svc.initiate_transaction(
        property=Property(**request.property.model_dump()),
        seller=Party(**request.seller.model_dump()),
        buyer=Party(**request.buyer.model_dump()),
    )
    return TransactionResponse.model_validate(tx)


# ---------------------------------------------------------------------------
# Escrow
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/escrow",
    response_model=EscrowResponse,
    status_code=201,
    summary="Open the escrow account",
)
async def open_escrow(
    transaction_id: str,
    request: OpenEscrowRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> EscrowResponse:
    escrow = await svc.open_escrow(transaction_id, request.actor)
    return EscrowResponse.model_validate(escrow)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/documents",
    response_model=DocumentResponse,
    status_code=201,
    summary="Upload a document",
)
async def upload_document(
    transaction_id: str,
    request: UploadDocumentRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> DocumentResponse:
    """Attach a document. Valid only in DOCUMENTS_PENDING."""
    document = await svc.upload_document(
        transaction_id,
        request.document_type,
        request.uploaded_by,
        request.notes,
    )
    return DocumentResponse.model_validate(document)


@router.patch(
    "/{transaction_id}/documents/{document_id}/verify",
    response_model=DocumentResponse,
    summary="Verify a document",
)
async def verify_document(
    transaction_id: str,
    document_id: str,
    request: VerifyDocumentRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> DocumentResponse:
    document = await svc.verify_document(transaction_id, document_id, request.verified_by)
    return DocumentResponse.model_validate(document)


@router.post(
    "/{transaction_id}/notary-review",
    response_model=list[NotaryDecisionResponse],
    summary="Run the AI notary agent over pending documents",
)
async def notary_review(
    transaction_id: str,
    notary: NotaryAgentService = Depends(get_notary_service),
) -> list[NotaryDecisionResponse]:
    decisions = await notary.verify_all_documents(transaction_id)
    return [NotaryDecisionResponse.model_validate(d) for d in decisions]


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/payments",
    response_model=PaymentResponse,
    status_code=201,
    summary="Submit a payment",
)
async def process_payment(
    transaction_id: str,
    request: ProcessPaymentRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> PaymentResponse:
    """Record an unconfirmed payment. Valid only in PAYMENT_PENDING."""
    payment = await svc.process_payment(
        transaction_id,
        amount=request.amount,
        paid_by=request.paid_by,
        method=request.method,
        reference=request.reference or _payment_reference(),
    )
    return PaymentResponse.model_validate(payment)


@router.patch(
    "/{transaction_id}/payments/{payment_id}/confirm",
    response_model=PaymentResponse,
    summary="Confirm a payment",
)
async def confirm_payment(
    transaction_id: str,
    payment_id: str,
    request: ConfirmPaymentRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> PaymentResponse:
    payment = await svc.confirm_payment(transaction_id, payment_id, request.confirmed_by)
    return PaymentResponse.model_validate(payment)


# ---------------------------------------------------------------------------
# Closing, cancellation and disputes
# ---------------------------------------------------------------------------


@router.post(
    "/{transaction_id}/complete",
    response_model=TransactionResponse,
    summary="Complete the ownership transfer",
)
async def complete_transfer(
    transaction_id: str,
    request: CompleteTransferRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    tx = await svc.complete_ownership_transfer(transaction_id, request.notary_id)
    return TransactionResponse.model_validate(tx)


@router.post(
    "/{transaction_id}/cancel",
    response_model=TransactionResponse,
    summary="Cancel the transaction",
)
async def cancel_transaction(
    transaction_id: str,
    request: CancelTransactionRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    tx = await svc.cancel_transaction(transaction_id, request.actor, request.reason)
    return TransactionResponse.model_validate(tx)


@router.post(
    "/{transaction_id}/dispute",
    response_model=TransactionResponse,
    summary="Raise a dispute",
)
async def raise_dispute(
    transaction_id: str,
    request: RaiseDisputeRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    tx = await svc.raise_dispute(transaction_id, request.actor, request.reason)
    return TransactionResponse.model_validate(tx)


@router.post(
    "/{transaction_id}/dispute/resolve",
    response_model=TransactionResponse,
    summary="Resolve a dispute",
)
async def resolve_dispute(
    transaction_id: str,
    request: ResolveDisputeRequest,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """Clear the dispute and return to OWNERSHIP_TRANSFER_PENDING."""
    tx = await svc.resolve_dispute(transaction_id, request.actor, request.resolution)
    return TransactionResponse.model_validate(tx)


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=list[TransactionResponse],
    summary="List transactions",
)
async def list_transactions(
    svc: TransactionService = Depends(get_transaction_service),
) -> list[TransactionResponse]:
    return [TransactionResponse.model_validate(tx) for tx in await svc.list_transactions()]


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get transaction details",
)
async def get_transaction(
    transaction_id: str,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    tx = await svc.get_transaction(transaction_id)
    return TransactionResponse.model_validate(tx)


@router.get(
    "/{transaction_id}/status",
    response_model=TransactionStatusResponse,
    summary="Get lightweight status check",
)
async def get_status(
    transaction_id: str,
    svc: TransactionService = Depends(get_transaction_service),
) -> TransactionStatusResponse:
    """Return the current status and allowed next state-machine events."""
    return TransactionStatusResponse(**await svc.get_status(transaction_id))


@router.get(
    "/{transaction_id}/audit",
    response_model=list[AuditEventResponse],
    summary="Get audit trail",
)
async def get_audit_log(
    transaction_id: str,
    svc: TransactionService = Depends(get_transaction_service),
) -> list[AuditEventResponse]:
    events = await svc.get_audit_log(transaction_id)
    return [AuditEventResponse.model_validate(e) for e in events]
