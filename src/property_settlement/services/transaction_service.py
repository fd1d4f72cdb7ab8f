"""Transaction Service: the orchestrator for the post-agreement lifecycle.

This is the application layer that coordinates between:
    - Domain state machine (transition guard)
    - Transaction store (keyed persistence)
    - Contract generator (collaborator, called once at creation)
    - Audit log (append-only trail on the aggregate)

Both the REST routes and the simulation call into this service, so every
business rule lives here. Each mutating call loads a private copy of the
aggregate under a per-transaction lock, validates, mutates, and saves it
back only when everything succeeded.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from statemachine.exceptions import TransitionNotAllowed

from property_settlement.domain.enums import (
    REQUIRED_DOCUMENTS,
    TERMINAL_STATUSES,
    AuditAction,
    PaymentMethod,
    TransactionStatus,
)
from property_settlement.domain.exceptions import (
    ClosedTransactionError,
    DocumentAlreadyVerifiedError,
    DocumentNotFoundError,
    EscrowAlreadyOpenError,
    InvalidInputError,
    InvalidStateError,
    NonPositiveAmountError,
    PaymentAlreadyConfirmedError,
    PaymentNotFoundError,
    TransactionNotFoundError,
)
from property_settlement.domain.models import (
    AuditEvent,
    Document,
    EscrowAccount,
    Payment,
    Transaction,
    utcnow,
)
from property_settlement.domain.state_machine import (
    TransactionStateMachine,
    source_statuses,
    validate_transition,
)
from property_settlement.logging_config import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from property_settlement.domain.collaborators import (
        ContractGenerator,
        TransactionStore,
    )
    from property_settlement.domain.enums import DocumentType
    from property_settlement.domain.models import Party, Property

logger = get_logger(__name__)

SYSTEM_ACTOR = "SYSTEM"

# Documents and payments can still be verified/confirmed while a
# transaction is open, but never once it is closed.
_OPEN_STATUSES = [s for s in TransactionStatus if s not in TERMINAL_STATUSES]


def _money(amount: Decimal) -> str:
    return f"€{amount:,}"


class TransactionService:
    """Manages the property transaction lifecycle."""

    def __init__(
        self,
        store: TransactionStore,
        contract_generator: ContractGenerator,
    ) -> None:
        self._store = store
        self._contract_generator = contract_generator
        self._locks: dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # 1. Initiate
    # ------------------------------------------------------------------

    async def initiate_transaction(
        self,
        property: Property,  # noqa: A002
        seller: Party,
        buyer: Party,
    ) -> Transaction:
        """Create a transaction and run it through to DOCUMENTS_PENDING."""
        tx = Transaction(property=property, seller=seller, buyer=buyer)
        self._record(
            tx,
            SYSTEM_ACTOR,
            AuditAction.TRANSACTION_INITIATED,
            f"Transaction created for property at {property.address}",
            new_status=TransactionStatus.INITIATED,
        )

        contract = self._contract_generator.generate(tx)
        tx.contract = contract
        self._fire(tx, "contract_generated", SYSTEM_ACTOR, "generate contract")
        self._record(
            tx,
            SYSTEM_ACTOR,
            AuditAction.CONTRACT_GENERATED,
            f"Purchase agreement auto-generated "
            f"(id: {contract.id}, template: {contract.template_version})",
        )

        self._fire(tx, "request_documents", SYSTEM_ACTOR, "request documents")
        await self._store.add(tx)
        self._locks[tx.id] = asyncio.Lock()

        logger.info(
            "transaction.initiated",
            transaction_id=tx.id,
            price=str(property.price),
            status=tx.status,
        )
        return tx

    # ------------------------------------------------------------------
    # 2. Escrow
    # ------------------------------------------------------------------

    async def open_escrow(self, transaction_id: str, actor: str) -> EscrowAccount:
        """Open the (single) escrow account for a transaction."""
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            if tx.escrow is not None:
                raise EscrowAlreadyOpenError(transaction_id)

            escrow = EscrowAccount()
            tx.escrow = escrow
            self._touch(tx)
            self._record(
                tx, actor, AuditAction.ESCROW_OPENED, f"Escrow account {escrow.id} opened"
            )
            await self._store.save(tx)

        logger.info("escrow.opened", transaction_id=transaction_id, escrow_id=escrow.id)
        return escrow

    # ------------------------------------------------------------------
    # 3. Documents
    # ------------------------------------------------------------------

    async def upload_document(
        self,
        transaction_id: str,
        document_type: DocumentType,
        uploaded_by: str,
        notes: str | None = None,
    ) -> Document:
        """Attach an unverified document. Legal only in DOCUMENTS_PENDING."""
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            self._assert_status(
                tx, [TransactionStatus.DOCUMENTS_PENDING], "upload documents"
            )

            document = Document(type=document_type, uploaded_by=uploaded_by, notes=notes)
            tx.documents.append(document)
            self._touch(tx)
            self._record(
                tx,
                uploaded_by,
                AuditAction.DOCUMENT_UPLOADED,
                f'Document "{document_type}" uploaded (id: {document.id})',
            )
            await self._store.save(tx)

        logger.info(
            "document.uploaded",
            transaction_id=transaction_id,
            document_id=document.id,
            type=document_type,
        )
        return document

    async def verify_document(
        self,
        transaction_id: str,
        document_id: str,
        verified_by: str,
    ) -> Document:
        """Mark a document verified, advancing to PAYMENT_PENDING when complete.

        Once every required document kind has at least one verified document,
        DOCUMENTS_PENDING -> DOCUMENTS_VERIFIED -> PAYMENT_PENDING happens
        within this same call.
        """
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            self._assert_status(tx, _OPEN_STATUSES, "verify documents")

            document = tx.find_document(document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
            if document.verified:
                raise DocumentAlreadyVerifiedError(document_id)

            document.verified = True
            document.verified_by = verified_by
            document.verified_at = utcnow()
            self._touch(tx)
            self._record(
                tx,
                verified_by,
                AuditAction.DOCUMENT_VERIFIED,
                f'Document "{document.type}" verified by {verified_by}',
            )

            if (
                tx.status == TransactionStatus.DOCUMENTS_PENDING
                and self._all_required_documents_verified(tx)
            ):
                self._fire(tx, "documents_verified", verified_by, "verify documents")
                self._fire(tx, "request_payment", SYSTEM_ACTOR, "request payment")

            await self._store.save(tx)

        logger.info(
            "document.verified",
            transaction_id=transaction_id,
            document_id=document_id,
            by=verified_by,
            status=tx.status,
        )
        return document

    # ------------------------------------------------------------------
    # 4. Payment
    # ------------------------------------------------------------------

    async def process_payment(
        self,
        transaction_id: str,
        amount: Decimal,
        paid_by: str,
        method: PaymentMethod,
        reference: str,
    ) -> Payment:
        """Record an unconfirmed payment. Legal only in PAYMENT_PENDING.

        Escrow-method payments are credited to the escrow balance on
        submission, before confirmation.
        """
        if not isinstance(amount, Decimal):
            try:
                amount = Decimal(str(amount))
            except (InvalidOperation, ValueError) as exc:
                raise InvalidInputError(f"Invalid payment amount: {amount!r}") from exc
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            self._assert_status(tx, [TransactionStatus.PAYMENT_PENDING], "process payment")
            if not amount.is_finite() or amount <= 0:
                raise NonPositiveAmountError(amount)

            payment = Payment(amount=amount, paid_by=paid_by, method=method, reference=reference)
            tx.payments.append(payment)
            self._touch(tx)
            self._record(
                tx,
                paid_by,
                AuditAction.PAYMENT_SUBMITTED,
                f"Payment of {_money(amount)} submitted via {method} (ref: {reference})",
            )

            if method == PaymentMethod.ESCROW and tx.escrow is not None:
                tx.escrow.balance += amount
                self._record(
                    tx,
                    SYSTEM_ACTOR,
                    AuditAction.ESCROW_FUNDED,
                    f"{_money(amount)} deposited into escrow",
                )

            await self._store.save(tx)

        logger.info(
            "payment.submitted",
            transaction_id=transaction_id,
            payment_id=payment.id,
            amount=str(amount),
            method=method,
        )
        return payment

    async def confirm_payment(
        self,
        transaction_id: str,
        payment_id: str,
        confirmed_by: str,
    ) -> Payment:
        """Confirm a payment, advancing to OWNERSHIP_TRANSFER_PENDING when paid.

        The confirmed total is compared against the property price after every
        confirmation; overpayment is accepted as-is.
        """
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            self._assert_status(tx, _OPEN_STATUSES, "confirm payments")

            payment = tx.find_payment(payment_id)
            if payment is None:
                raise PaymentNotFoundError(payment_id)
            if payment.confirmed:
                raise PaymentAlreadyConfirmedError(payment_id)

            payment.confirmed = True
            self._touch(tx)
            self._record(
                tx,
                confirmed_by,
                AuditAction.PAYMENT_CONFIRMED,
                f"Payment {payment_id} confirmed by {confirmed_by}",
            )

            total_confirmed = tx.confirmed_total()
            if (
                tx.status == TransactionStatus.PAYMENT_PENDING
                and total_confirmed >= tx.property.price
            ):
                self._fire(tx, "payment_received", confirmed_by, "receive payment")
                self._fire(tx, "request_transfer", SYSTEM_ACTOR, "request ownership transfer")

            await self._store.save(tx)

        logger.info(
            "payment.confirmed",
            transaction_id=transaction_id,
            payment_id=payment_id,
            total_confirmed=str(total_confirmed),
            status=tx.status,
        )
        return payment

    # ------------------------------------------------------------------
    # 5. Ownership Transfer
    # ------------------------------------------------------------------

    async def complete_ownership_transfer(
        self, transaction_id: str, notary_id: str
    ) -> Transaction:
        """Release escrow and close the transaction as COMPLETED."""
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            self._guard(tx, "complete_transfer", "complete transfer")

            if tx.escrow is not None and not tx.escrow.released:
                tx.escrow.released = True
                self._record(
                    tx,
                    notary_id,
                    AuditAction.ESCROW_RELEASED,
                    f"Escrow funds ({_money(tx.escrow.balance)}) released to seller",
                )

            self._fire(tx, "complete_transfer", notary_id, "complete transfer")
            tx.completed_at = utcnow()
            self._record(
                tx,
                notary_id,
                AuditAction.OWNERSHIP_TRANSFERRED,
                f'Property "{tx.property.address}" transferred from '
                f"{tx.seller.name} to {tx.buyer.name}",
            )
            await self._store.save(tx)

        logger.info("transaction.completed", transaction_id=transaction_id, notary=notary_id)
        return tx

    # ------------------------------------------------------------------
    # 6. Cancel / Dispute
    # ------------------------------------------------------------------

    async def cancel_transaction(
        self, transaction_id: str, actor: str, reason: str
    ) -> Transaction:
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            if tx.status == TransactionStatus.COMPLETED:
                raise ClosedTransactionError("Cannot cancel a completed transaction")

            self._fire(tx, "cancel", actor, "cancel transaction")
            tx.cancelled_at = utcnow()
            self._record(
                tx, actor, AuditAction.TRANSACTION_CANCELLED, f"Cancelled: {reason}"
            )
            await self._store.save(tx)

        logger.info("transaction.cancelled", transaction_id=transaction_id, by=actor)
        return tx

    async def raise_dispute(
        self, transaction_id: str, actor: str, reason: str
    ) -> Transaction:
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            if tx.status in TERMINAL_STATUSES:
                raise ClosedTransactionError("Cannot raise dispute on a closed transaction")

            self._guard(tx, "raise_dispute", "raise dispute")
            tx.dispute_reason = reason
            self._fire(tx, "raise_dispute", actor, "raise dispute")
            self._record(tx, actor, AuditAction.DISPUTE_RAISED, f"Dispute: {reason}")
            await self._store.save(tx)

        logger.info("transaction.dispute_raised", transaction_id=transaction_id, by=actor)
        return tx

    async def resolve_dispute(
        self, transaction_id: str, actor: str, resolution: str
    ) -> Transaction:
        """Clear the dispute and return to OWNERSHIP_TRANSFER_PENDING."""
        async with self._lock(transaction_id):
            tx = await self._get_or_raise(transaction_id)
            self._guard(tx, "resolve_dispute", "resolve dispute")

            tx.dispute_reason = None
            self._fire(tx, "resolve_dispute", actor, "resolve dispute")
            self._record(
                tx, actor, AuditAction.DISPUTE_RESOLVED, f"Resolution: {resolution}"
            )
            await self._store.save(tx)

        logger.info("transaction.dispute_resolved", transaction_id=transaction_id, by=actor)
        return tx

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_transaction(self, transaction_id: str) -> Transaction:
        return await self._get_or_raise(transaction_id)

    async def list_transactions(self) -> list[Transaction]:
        return await self._store.list_all()

    async def get_audit_log(self, transaction_id: str) -> list[AuditEvent]:
        tx = await self._get_or_raise(transaction_id)
        return tx.audit_log

    async def get_status(self, transaction_id: str) -> dict:
        """Get the current status with the state-machine events allowed from it."""
        tx = await self._get_or_raise(transaction_id)
        sm = TransactionStateMachine(current_status=tx.status)
        return {
            "transaction_id": tx.id,
            "status": tx.status,
            "dispute_reason": tx.dispute_reason,
            "allowed_events": sm.get_allowed_events(),
        }

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _lock(self, transaction_id: str) -> AsyncIterator[None]:
        """Hold the per-transaction lock. Unknown ids never get an entry."""
        lock = self._locks.get(transaction_id)
        if lock is None:
            await self._get_or_raise(transaction_id)
            lock = self._locks.setdefault(transaction_id, asyncio.Lock())
        async with lock:
            yield

    async def _get_or_raise(self, transaction_id: str) -> Transaction:
        tx = await self._store.get(transaction_id)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        return tx

    @staticmethod
    def _touch(tx: Transaction) -> None:
        tx.updated_at = utcnow()

    @staticmethod
    def _record(
        tx: Transaction,
        actor: str,
        action: AuditAction,
        description: str,
        previous_status: TransactionStatus | None = None,
        new_status: TransactionStatus | None = None,
    ) -> None:
        tx.audit_log.append(
            AuditEvent(
                actor=actor,
                action=action,
                description=description,
                previous_status=previous_status,
                new_status=new_status,
            )
        )

    @staticmethod
    def _assert_status(
        tx: Transaction,
        allowed: list[TransactionStatus],
        operation: str,
    ) -> None:
        if tx.status not in allowed:
            raise InvalidStateError(operation, tx.status, allowed)

    @staticmethod
    def _guard(tx: Transaction, event_name: str, operation: str) -> TransactionStatus:
        """Return the status ``event_name`` leads to, or raise InvalidStateError."""
        try:
            return validate_transition(tx.status, event_name)
        except TransitionNotAllowed as err:
            raise InvalidStateError(operation, tx.status, source_statuses(event_name)) from err

    def _fire(self, tx: Transaction, event_name: str, actor: str, operation: str) -> None:
        """Apply a guarded transition and log its STATUS_CHANGED event."""
        new_status = self._guard(tx, event_name, operation)
        previous = tx.status
        tx.status = new_status
        self._touch(tx)
        self._record(
            tx,
            actor,
            AuditAction.STATUS_CHANGED,
            f"Status: {previous} → {new_status}",
            previous_status=previous,
            new_status=new_status,
        )

    @staticmethod
    def _all_required_documents_verified(tx: Transaction) -> bool:
        verified = tx.verified_document_types()
        return all(doc_type in verified for doc_type in REQUIRED_DOCUMENTS)
