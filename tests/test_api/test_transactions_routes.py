"""Tests for the REST API: routing, schemas and error translation."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from property_settlement.api.middleware import error_status
from property_settlement.config import Settings
from property_settlement.domain.exceptions import (
    ClosedTransactionError,
    InvalidStateError,
    NonPositiveAmountError,
    SettlementError,
    TransactionNotFoundError,
)
from property_settlement.main import create_app

BASE = "/api/v1/transactions"

INITIATE_BODY = {
    "property": {
        "id": "prop-001",
        "address": "Mannerheimintie 12, Helsinki",
        "price": "350000",
        "square_meters": 85,
        "description": "3-bedroom apartment, city centre",
    },
    "seller": {
        "id": "seller-001",
        "name": "Anna Virtanen",
        "email": "anna@example.com",
        "phone_number": "+358401234567",
        "role": "SELLER",
    },
    "buyer": {
        "id": "buyer-001",
        "name": "Matti Korhonen",
        "email": "matti@example.com",
        "phone_number": "+358409876543",
        "role": "BUYER",
    },
}

REQUIRED = ["TITLE_DEED", "IDENTITY_SELLER", "IDENTITY_BUYER", "PURCHASE_AGREEMENT"]


@pytest.fixture
def client():
    app = create_app(Settings(app_env="development", store_backend="memory"))
    with TestClient(app) as test_client:
        yield test_client


def _initiate(client: TestClient) -> str:
    response = client.post(BASE, json=INITIATE_BODY)
    assert response.status_code == 201
    return response.json()["id"]


def _upload_all(client: TestClient, tx_id: str, kinds: list[str]) -> list[str]:
    ids = []
    for kind in kinds:
        response = client.post(
            f"{BASE}/{tx_id}/documents",
            json={"document_type": kind, "uploaded_by": "seller-001"},
        )
        assert response.status_code == 201
        ids.append(response.json()["id"])
    return ids


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["store"] == "healthy"
        assert body["store_backend"] == "memory"

    def test_request_id_echoed(self, client) -> None:
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestLifecycleOverHttp:
    def test_initiate(self, client) -> None:
        response = client.post(BASE, json=INITIATE_BODY)
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "DOCUMENTS_PENDING"
        assert body["contract"]["template_version"] == "v2.1-AI"
        assert len(body["audit_log"]) == 4

    def test_happy_path_with_notary(self, client) -> None:
        tx_id = _initiate(client)
        assert client.post(f"{BASE}/{tx_id}/escrow", json={}).status_code == 201
        _upload_all(client, tx_id, REQUIRED)

        review = client.post(f"{BASE}/{tx_id}/notary-review")
        assert review.status_code == 200
        assert [d["document_type"] for d in review.json()] == REQUIRED

        status = client.get(f"{BASE}/{tx_id}/status").json()
        assert status["status"] == "PAYMENT_PENDING"
        assert "payment_received" in status["allowed_events"]

        payment = client.post(
            f"{BASE}/{tx_id}/payments",
            json={"amount": "350000", "paid_by": "buyer-001", "method": "ESCROW"},
        )
        assert payment.status_code == 201
        assert payment.json()["reference"].startswith("REF-")

        confirm = client.patch(
            f"{BASE}/{tx_id}/payments/{payment.json()['id']}/confirm",
            json={"confirmed_by": "bank-001"},
        )
        assert confirm.status_code == 200
        assert confirm.json()["confirmed"] is True

        done = client.post(f"{BASE}/{tx_id}/complete", json={"notary_id": "notary-001"})
        assert done.status_code == 200
        assert done.json()["status"] == "COMPLETED"
        assert done.json()["escrow"]["released"] is True

        audit = client.get(f"{BASE}/{tx_id}/audit").json()
        assert audit[-1]["action"] == "OWNERSHIP_TRANSFERRED"

    def test_manual_verify(self, client) -> None:
        tx_id = _initiate(client)
        (doc_id,) = _upload_all(client, tx_id, ["TITLE_DEED"])
        response = client.patch(
            f"{BASE}/{tx_id}/documents/{doc_id}/verify", json={"verified_by": "notary-001"}
        )
        assert response.status_code == 200
        assert response.json()["verified"] is True
        assert response.json()["verified_by"] == "notary-001"

    def test_dispute_flow(self, client) -> None:
        tx_id = _initiate(client)
        raised = client.post(
            f"{BASE}/{tx_id}/dispute", json={"actor": "buyer-001", "reason": "Title unclear"}
        )
        assert raised.json()["status"] == "DISPUTED"
        assert raised.json()["dispute_reason"] == "Title unclear"

        resolved = client.post(
            f"{BASE}/{tx_id}/dispute/resolve",
            json={"actor": "system-001", "resolution": "Title cleared"},
        )
        assert resolved.json()["status"] == "OWNERSHIP_TRANSFER_PENDING"
        assert resolved.json()["dispute_reason"] is None

    def test_list(self, client) -> None:
        first = _initiate(client)
        second = _initiate(client)
        ids = [tx["id"] for tx in client.get(BASE).json()]
        assert ids == [first, second]


class TestErrorTranslation:
    def test_unknown_transaction_is_404(self, client) -> None:
        response = client.get(f"{BASE}/nope")
        assert response.status_code == 404
        assert response.json() == {
            "error": "TRANSACTION_NOT_FOUND",
            "message": "Transaction nope not found",
        }

    def test_unknown_document_is_404(self, client) -> None:
        tx_id = _initiate(client)
        response = client.patch(f"{BASE}/{tx_id}/documents/missing/verify", json={})
        assert response.status_code == 404
        assert response.json()["error"] == "DOCUMENT_NOT_FOUND"

    def test_invalid_state_is_400(self, client) -> None:
        tx_id = _initiate(client)
        response = client.post(
            f"{BASE}/{tx_id}/payments",
            json={"amount": "1000", "paid_by": "buyer-001", "method": "BANK_TRANSFER"},
        )
        assert response.status_code == 400
        assert response.json() == {
            "error": "INVALID_STATE",
            "message": (
                'Cannot process payment when status is "DOCUMENTS_PENDING". '
                "Expected: PAYMENT_PENDING"
            ),
        }

    def test_duplicate_escrow_is_400(self, client) -> None:
        tx_id = _initiate(client)
        client.post(f"{BASE}/{tx_id}/escrow", json={})
        response = client.post(f"{BASE}/{tx_id}/escrow", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Escrow already open for this transaction"

    def test_non_positive_payment_is_400(self, client) -> None:
        tx_id = _initiate(client)
        for doc_id in _upload_all(client, tx_id, REQUIRED):
            client.patch(f"{BASE}/{tx_id}/documents/{doc_id}/verify", json={})
        response = client.post(
            f"{BASE}/{tx_id}/payments",
            json={"amount": "-500", "paid_by": "buyer-001", "method": "ESCROW"},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Payment amount must be positive"

    def test_cancel_completed_is_400(self, client) -> None:
        tx_id = _initiate(client)
        for doc_id in _upload_all(client, tx_id, REQUIRED):
            client.patch(f"{BASE}/{tx_id}/documents/{doc_id}/verify", json={})
        payment = client.post(
            f"{BASE}/{tx_id}/payments",
            json={"amount": "350000", "paid_by": "buyer-001", "method": "BANK_TRANSFER"},
        ).json()
        client.patch(f"{BASE}/{tx_id}/payments/{payment['id']}/confirm", json={})
        client.post(f"{BASE}/{tx_id}/complete", json={})

        response = client.post(f"{BASE}/{tx_id}/cancel", json={"reason": "Too late"})
        assert response.status_code == 400
        assert response.json() == {
            "error": "TRANSACTION_CLOSED",
            "message": "Cannot cancel a completed transaction",
        }

    def test_bad_document_type_is_422(self, client) -> None:
        tx_id = _initiate(client)
        response = client.post(
            f"{BASE}/{tx_id}/documents",
            json={"document_type": "BIRTH_CERTIFICATE", "uploaded_by": "seller-001"},
        )
        assert response.status_code == 422

    def test_bad_email_is_422(self, client) -> None:
        body = {**INITIATE_BODY, "seller": {**INITIATE_BODY["seller"], "email": "not-an-email"}}
        assert client.post(BASE, json=body).status_code == 422


class TestErrorStatusTable:
    @pytest.mark.parametrize(
        ("exc", "expected"),
        [
            (TransactionNotFoundError("tx"), 404),
            (
                InvalidStateError("complete transfer", "DISPUTED", ["OWNERSHIP_TRANSFER_PENDING"]),
                400,
            ),
            (NonPositiveAmountError(0), 400),
            (ClosedTransactionError("Cannot cancel a completed transaction"), 400),
            (SettlementError("anything"), 400),
        ],
    )
    def test_error_status(self, exc, expected) -> None:
        status_code, event = error_status(exc)
        assert status_code == expected
        assert event.startswith("request.")
