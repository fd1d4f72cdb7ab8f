"""Shared test fixtures for the property settlement test suite.

Provides:
    - Sample property and parties (price 350000)
    - A TransactionService wired to an in-memory store
    - Helpers that drive a transaction to a given phase
"""

from __future__ import annotations

from decimal import Decimal

import pytest
import pytest_asyncio

from property_settlement.domain.enums import DocumentType, PartyRole, PaymentMethod
from property_settlement.domain.models import Party, Property
from property_settlement.infrastructure.memory_store import InMemoryTransactionStore
from property_settlement.services.contract_service import TemplateContractGenerator
from property_settlement.services.transaction_service import TransactionService

REQUIRED_UPLOADS = [
    (DocumentType.TITLE_DEED, "seller-001"),
    (DocumentType.IDENTITY_SELLER, "seller-001"),
    (DocumentType.IDENTITY_BUYER, "buyer-001"),
    (DocumentType.PURCHASE_AGREEMENT, "seller-001"),
]

# ---------------------------------------------------------------------------
# Domain Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_property() -> Property:
    return Property(
        id="prop-001",
        address="Mannerheimintie 12, Helsinki",
        price=Decimal("350000"),
        square_meters=85,
        description="3-bedroom apartment, city centre",
    )


@pytest.fixture
def seller() -> Party:
    return Party(
        id="seller-001",
        name="Anna Virtanen",
        email="anna@example.com",
        phone_number="+358401234567",
        role=PartyRole.SELLER,
    )


@pytest.fixture
def buyer() -> Party:
    return Party(
        id="buyer-001",
        name="Matti Korhonen",
        email="matti@example.com",
        phone_number="+358409876543",
        role=PartyRole.BUYER,
    )


# ---------------------------------------------------------------------------
# Service Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryTransactionStore:
    return InMemoryTransactionStore()


@pytest.fixture
def service(store: InMemoryTransactionStore) -> TransactionService:
    return TransactionService(store, TemplateContractGenerator())


# ---------------------------------------------------------------------------
# Phase helpers
# ---------------------------------------------------------------------------


async def upload_required(svc: TransactionService, transaction_id: str) -> list[str]:
    """Upload one document of each required kind; return their ids."""
    ids = []
    for doc_type, uploaded_by in REQUIRED_UPLOADS:
        document = await svc.upload_document(transaction_id, doc_type, uploaded_by)
        ids.append(document.id)
    return ids


async def reach_payment_pending(
    svc: TransactionService, prop: Property, seller: Party, buyer: Party
) -> str:
    tx = await svc.initiate_transaction(prop, seller, buyer)
    await svc.open_escrow(tx.id, "system-001")
    for document_id in await upload_required(svc, tx.id):
        await svc.verify_document(tx.id, document_id, "notary-001")
    return tx.id


async def reach_transfer_pending(
    svc: TransactionService, prop: Property, seller: Party, buyer: Party
) -> str:
    tx_id = await reach_payment_pending(svc, prop, seller, buyer)
    payment = await svc.process_payment(
        tx_id, prop.price, buyer.id, PaymentMethod.ESCROW, "FI-BANK-2024-12345"
    )
    await svc.confirm_payment(tx_id, payment.id, "bank-001")
    return tx_id


@pytest_asyncio.fixture
async def payment_pending_id(
    service: TransactionService, sample_property: Property, seller: Party, buyer: Party
) -> str:
    """A transaction with all required documents verified."""
    return await reach_payment_pending(service, sample_property, seller, buyer)


@pytest_asyncio.fixture
async def transfer_pending_id(
    service: TransactionService, sample_property: Property, seller: Party, buyer: Party
) -> str:
    """A transaction paid in full through escrow, awaiting the notary."""
    return await reach_transfer_pending(service, sample_property, seller, buyer)
