"""Domain exceptions for property settlement.

These exceptions are framework-agnostic and represent business rule violations.
They are caught and translated to HTTP responses by the API layer's middleware.
"""

from __future__ import annotations

from collections.abc import Iterable


class SettlementError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "SETTLEMENT_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Not Found ---


class NotFoundError(SettlementError):
    """Base for unknown transaction, document or payment identifiers."""


class TransactionNotFoundError(NotFoundError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            message=f"Transaction {transaction_id} not found",
            code="TRANSACTION_NOT_FOUND",
        )
        self.transaction_id = transaction_id


class DocumentNotFoundError(NotFoundError):
    def __init__(self, document_id: str) -> None:
        super().__init__(
            message=f"Document {document_id} not found",
            code="DOCUMENT_NOT_FOUND",
        )
        self.document_id = document_id


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(
            message=f"Payment {payment_id} not found",
            code="PAYMENT_NOT_FOUND",
        )
        self.payment_id = payment_id


# --- Invalid State ---


class InvalidStateError(SettlementError):
    """Raised when an operation is not legal in the transaction's current phase.

    Example: uploading a document once the transaction is CANCELLED.
    """

    def __init__(
        self,
        operation: str,
        current_status: str,
        expected: Iterable[str],
    ) -> None:
        expected_list = [str(s) for s in expected]
        super().__init__(
            message=(
                f'Cannot {operation} when status is "{current_status}". '
                f"Expected: {' or '.join(expected_list)}"
            ),
            code="INVALID_STATE",
        )
        self.operation = operation
        self.current_status = str(current_status)
        self.expected = expected_list


# --- Invalid Input ---


class InvalidInputError(SettlementError):
    """Base for requests that are well-formed but violate a business rule."""

    def __init__(self, message: str, code: str = "INVALID_INPUT") -> None:
        super().__init__(message=message, code=code)


class NonPositiveAmountError(InvalidInputError):
    def __init__(self, amount: object) -> None:
        super().__init__(
            message="Payment amount must be positive",
            code="NON_POSITIVE_AMOUNT",
        )
        self.amount = amount


class EscrowAlreadyOpenError(InvalidInputError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(
            message="Escrow already open for this transaction",
            code="ESCROW_ALREADY_OPEN",
        )
        self.transaction_id = transaction_id


class DocumentAlreadyVerifiedError(InvalidInputError):
    def __init__(self, document_id: str) -> None:
        super().__init__(
            message=f"Document {document_id} is already verified",
            code="DOCUMENT_ALREADY_VERIFIED",
        )
        self.document_id = document_id


class PaymentAlreadyConfirmedError(InvalidInputError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(
            message="Payment already confirmed",
            code="PAYMENT_ALREADY_CONFIRMED",
        )
        self.payment_id = payment_id


class DocumentRejectedError(InvalidInputError):
    """Raised when the notary agent scores a document below its threshold."""

    def __init__(self, document_type: str, score: float, threshold: float) -> None:
        super().__init__(
            message=(
                f'AI Notary Agent rejected document "{document_type}": '
                f"confidence {score:.2f} below threshold {threshold:.2f}"
            ),
            code="DOCUMENT_REJECTED",
        )
        self.document_type = document_type
        self.score = score
        self.threshold = threshold


# --- Conflict on closed transaction ---


class ClosedTransactionError(SettlementError):
    """Raised when cancelling or disputing a transaction that is already closed."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="TRANSACTION_CLOSED")
