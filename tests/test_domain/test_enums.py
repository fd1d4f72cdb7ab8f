"""Tests for domain enumerations."""

from __future__ import annotations

from property_settlement.domain.enums import (
    REQUIRED_DOCUMENTS,
    TERMINAL_STATUSES,
    AuditAction,
    DocumentType,
    PaymentMethod,
    TransactionStatus,
)


class TestTransactionStatus:
    def test_all_statuses_exist(self) -> None:
        expected = {
            "INITIATED", "CONTRACT_GENERATED", "DOCUMENTS_PENDING",
            "DOCUMENTS_VERIFIED", "PAYMENT_PENDING", "PAYMENT_RECEIVED",
            "OWNERSHIP_TRANSFER_PENDING", "COMPLETED", "CANCELLED", "DISPUTED",
        }
        actual = {s.value for s in TransactionStatus}
        assert actual == expected

    def test_status_is_str_enum(self) -> None:
        assert isinstance(TransactionStatus.INITIATED, str)
        assert TransactionStatus.INITIATED == "INITIATED"

    def test_terminal_statuses(self) -> None:
        assert TERMINAL_STATUSES == {TransactionStatus.COMPLETED, TransactionStatus.CANCELLED}
        assert TransactionStatus.DISPUTED not in TERMINAL_STATUSES


class TestDocumentType:
    def test_required_documents(self) -> None:
        assert set(REQUIRED_DOCUMENTS) == {
            DocumentType.TITLE_DEED,
            DocumentType.IDENTITY_SELLER,
            DocumentType.IDENTITY_BUYER,
            DocumentType.PURCHASE_AGREEMENT,
        }

    def test_optional_documents_not_required(self) -> None:
        assert DocumentType.MORTGAGE_APPROVAL not in REQUIRED_DOCUMENTS
        assert DocumentType.INSPECTION_REPORT not in REQUIRED_DOCUMENTS


class TestAuditAction:
    def test_all_actions_exist(self) -> None:
        # 3 lifecycle + 3 escrow + 2 document + 2 payment + 2 closing + 2 dispute
        assert len(AuditAction) == 14


class TestPaymentMethod:
    def test_payment_methods(self) -> None:
        assert {m.value for m in PaymentMethod} == {"BANK_TRANSFER", "ESCROW", "MORTGAGE"}
