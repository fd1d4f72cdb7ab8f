#!/usr/bin/env python3
"""Property Settlement: end-to-end simulation.

Drives the orchestrator directly (no HTTP) through four scenarios:

    Scenario 1: Happy Path
        - Anna (seller) and Matti (buyer) agree on a €350,000 apartment
        - Escrow opened, 4 required documents uploaded
        - AI notary agent verifies everything -> PAYMENT_PENDING
        - Escrow payment confirmed by the bank -> OWNERSHIP_TRANSFER_PENDING
        - Notary completes the transfer -> COMPLETED, escrow released

    Scenario 2: Cancellation
        - 2 of 4 documents uploaded, then the buyer cancels
        - AI notary review on the cancelled transaction is refused

    Scenario 3: Dispute
        - Transaction reaches OWNERSHIP_TRANSFER_PENDING
        - Seller disputes; completing the transfer is refused
        - Dispute resolved; the transfer now succeeds

    Scenario 4: Edge-Case Guards
        - Duplicate verification, non-positive payment, premature transfer,
          and a dispute on a completed transaction are all refused

Usage:
    # In-memory store (default):
    python simulation.py

    # SQLite in-memory through the SQL store:
    python simulation.py --sqlite

    # Run a specific scenario:
    python simulation.py --scenario 3
"""

from __future__ import annotations

import argparse
import asyncio
from decimal import Decimal

# ---------------------------------------------------------------------------
# Configure structured logging BEFORE importing app modules
# ---------------------------------------------------------------------------
from property_settlement.logging_config import get_logger, setup_logging

setup_logging(log_level="WARNING", json_logs=False)
logger = get_logger("simulation")

from property_settlement.domain.enums import (  # noqa: E402
    DocumentType,
    PartyRole,
    PaymentMethod,
    TransactionStatus,
)
from property_settlement.domain.exceptions import SettlementError  # noqa: E402
from property_settlement.domain.models import Party, Property  # noqa: E402
from property_settlement.infrastructure.memory_store import (  # noqa: E402
    InMemoryTransactionStore,
)
from property_settlement.services.contract_service import (  # noqa: E402
    TemplateContractGenerator,
)
from property_settlement.services.notary_service import (  # noqa: E402
    MockDocumentScorer,
    NotaryAgentService,
)
from property_settlement.services.transaction_service import (  # noqa: E402
    TransactionService,
)

# Module-level state
_sqlite_engine = None
_sqlite_session_factory = None

SELLER = Party(
    id="seller-001",
    name="Anna Virtanen",
    email="anna@example.com",
    phone_number="+358401234567",
    role=PartyRole.SELLER,
)
BUYER = Party(
    id="buyer-001",
    name="Matti Korhonen",
    email="matti@example.com",
    phone_number="+358409876543",
    role=PartyRole.BUYER,
)
NOTARY_ID = "notary-001"
BANK_ID = "bank-001"
SYSTEM_ID = "system-001"

PROPERTIES = {
    1: Property(
        id="prop-001",
        address="Mannerheimintie 12, Helsinki",
        price=Decimal("350000"),
        square_meters=85,
        description="3-bedroom apartment, city centre",
    ),
    2: Property(
        id="prop-002",
        address="Erottajankatu 5, Espoo",
        price=Decimal("280000"),
        square_meters=70,
        description="2-bedroom apartment, quiet neighborhood",
    ),
    3: Property(
        id="prop-003",
        address="Bulevardi 10, Vantaa",
        price=Decimal("420000"),
        square_meters=100,
        description="4-bedroom house, family-friendly",
    ),
}

REQUIRED_UPLOADS = [
    (DocumentType.TITLE_DEED, SELLER.id),
    (DocumentType.IDENTITY_SELLER, SELLER.id),
    (DocumentType.IDENTITY_BUYER, BUYER.id),
    (DocumentType.PURCHASE_AGREEMENT, SELLER.id),
]


# ---------------------------------------------------------------------------
# Store lifecycle helpers
# ---------------------------------------------------------------------------
async def init_store(use_sqlite: bool = False):
    """Return the store a scenario runs against; the SQLite engine is shared."""
    global _sqlite_engine, _sqlite_session_factory

    if not use_sqlite:
        return InMemoryTransactionStore()

    from property_settlement.infrastructure.database.engine import (
        build_engine,
        build_session_factory,
        init_db,
    )
    from property_settlement.infrastructure.database.repositories import (
        SqlTransactionStore,
    )

    if _sqlite_engine is None:
        _sqlite_engine = build_engine("sqlite+aiosqlite:///:memory:")
        await init_db(_sqlite_engine)
        _sqlite_session_factory = build_session_factory(_sqlite_engine)
        logger.info("database.sqlite_initialized")
    return SqlTransactionStore(_sqlite_session_factory)


async def shutdown_store() -> None:
    global _sqlite_engine, _sqlite_session_factory

    if _sqlite_engine is not None:
        from property_settlement.infrastructure.database.engine import close_db

        await close_db(_sqlite_engine)
        _sqlite_engine = None
        _sqlite_session_factory = None


async def build_services(
    use_sqlite: bool,
) -> tuple[TransactionService, NotaryAgentService]:
    store = await init_store(use_sqlite)
    transactions = TransactionService(store, TemplateContractGenerator())
    notary = NotaryAgentService(transactions, MockDocumentScorer())
    return transactions, notary


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    print(f"\n--- {text} ---\n")


def ok(text: str) -> None:
    print(f"  ✅ {text}")


def refused(exc: SettlementError) -> None:
    print(f"  🛡️  Refused [{exc.code}]: {exc.message}")


async def print_status(svc: TransactionService, transaction_id: str) -> None:
    status = await svc.get_status(transaction_id)
    print(f"  Status: {status['status']}")
    if status["dispute_reason"]:
        print(f"  Dispute: {status['dispute_reason']}")


async def print_audit_trail(svc: TransactionService, transaction_id: str) -> None:
    events = await svc.get_audit_log(transaction_id)
    print("\n  📜 Audit Trail:")
    for i, evt in enumerate(events, 1):
        print(f"    {i:>2}. [{evt.action:<24}] {evt.description} (by {evt.actor})")
    print()


async def upload_required(svc: TransactionService, transaction_id: str) -> list[str]:
    document_ids = []
    for doc_type, uploaded_by in REQUIRED_UPLOADS:
        document = await svc.upload_document(transaction_id, doc_type, uploaded_by)
        document_ids.append(document.id)
    return document_ids


async def reach_transfer_pending(
    svc: TransactionService,
    notary: NotaryAgentService,
    prop: Property,
    reference: str,
) -> str:
    tx = await svc.initiate_transaction(prop, SELLER, BUYER)
    await svc.open_escrow(tx.id, SYSTEM_ID)
    await upload_required(svc, tx.id)
    await notary.verify_all_documents(tx.id)
    payment = await svc.process_payment(
        tx.id, prop.price, BUYER.id, PaymentMethod.ESCROW, reference
    )
    await svc.confirm_payment(tx.id, payment.id, BANK_ID)
    return tx.id


# ===========================================================================
# Scenario 1: Happy Path
# ===========================================================================
async def scenario_1_happy_path(use_sqlite: bool = False) -> None:
    banner("SCENARIO 1: Happy Path — Full Lifecycle")
    svc, notary = await build_services(use_sqlite)
    prop = PROPERTIES[1]

    section("Step 1: Initiate transaction (contract auto-generated)")
    tx = await svc.initiate_transaction(prop, SELLER, BUYER)
    ok(f"Transaction created: {tx.id}")
    print(f"  Property: {prop.address} — €{prop.price:,}")
    print(f"  Contract: {tx.contract.id} ({tx.contract.template_version})")
    await print_status(svc, tx.id)

    section("Step 2: Open escrow")
    escrow = await svc.open_escrow(tx.id, SYSTEM_ID)
    ok(f"Escrow account {escrow.id} opened")

    section("Step 3: Upload the 4 required documents")
    await upload_required(svc, tx.id)
    ok("Documents uploaded")

    section("Step 4: AI notary agent reviews documents")
    for decision in await notary.verify_all_documents(tx.id):
        print(
            f"  🤖 {decision.document_type:<20} score {decision.score:.2f} "
            f"(threshold {decision.threshold:.2f})"
        )
    await print_status(svc, tx.id)

    section("Step 5: Buyer pays into escrow, bank confirms")
    payment = await svc.process_payment(
        tx.id, prop.price, BUYER.id, PaymentMethod.ESCROW, "FI-BANK-2024-12345"
    )
    await svc.confirm_payment(tx.id, payment.id, BANK_ID)
    ok(f"Payment {payment.id} confirmed")
    await print_status(svc, tx.id)

    section("Step 6: Notary completes ownership transfer")
    done = await svc.complete_ownership_transfer(tx.id, NOTARY_ID)
    ok(f'Ownership of "{prop.address}" transferred')
    print(f"  Escrow released: {done.escrow.released} (€{done.escrow.balance:,})")
    assert done.status == TransactionStatus.COMPLETED

    await print_audit_trail(svc, tx.id)


# ===========================================================================
# Scenario 2: Cancellation
# ===========================================================================
async def scenario_2_cancellation(use_sqlite: bool = False) -> None:
    banner("SCENARIO 2: Cancellation — Buyer Changes Mind")
    svc, notary = await build_services(use_sqlite)

    section("Step 1: Initiate, open escrow, upload 2 of 4 documents")
    tx = await svc.initiate_transaction(PROPERTIES[2], SELLER, BUYER)
    await svc.open_escrow(tx.id, SYSTEM_ID)
    await svc.upload_document(tx.id, DocumentType.TITLE_DEED, SELLER.id)
    await svc.upload_document(tx.id, DocumentType.IDENTITY_BUYER, BUYER.id)
    await print_status(svc, tx.id)

    section("Step 2: Buyer cancels")
    await svc.cancel_transaction(tx.id, BUYER.id, "Buyer changed mind")
    await print_status(svc, tx.id)

    section("Step 3: AI notary review on a cancelled transaction")
    try:
        await notary.verify_all_documents(tx.id)
    except SettlementError as exc:
        refused(exc)

    await print_audit_trail(svc, tx.id)


# ===========================================================================
# Scenario 3: Dispute
# ===========================================================================
async def scenario_3_dispute(use_sqlite: bool = False) -> None:
    banner("SCENARIO 3: Dispute — Raised Before Transfer, Then Resolved")
    svc, notary = await build_services(use_sqlite)

    section("Step 1: Run through to OWNERSHIP_TRANSFER_PENDING")
    tx_id = await reach_transfer_pending(svc, notary, PROPERTIES[3], "FI-BANK-2024-99876")
    await print_status(svc, tx_id)

    section("Step 2: Seller raises a dispute")
    await svc.raise_dispute(tx_id, SELLER.id, "Payment amount seems incorrect.")
    await print_status(svc, tx_id)

    section("Step 3: Attempt transfer while disputed")
    try:
        await svc.complete_ownership_transfer(tx_id, NOTARY_ID)
    except SettlementError as exc:
        refused(exc)

    section("Step 4: Resolve the dispute and complete")
    await svc.resolve_dispute(
        tx_id,
        SYSTEM_ID,
        "Investigation confirmed payment is correct. Proceeding to ownership transfer.",
    )
    await print_status(svc, tx_id)
    await svc.complete_ownership_transfer(tx_id, NOTARY_ID)
    await print_status(svc, tx_id)

    await print_audit_trail(svc, tx_id)


# ===========================================================================
# Scenario 4: Edge-Case Guards
# ===========================================================================
async def scenario_4_guards(use_sqlite: bool = False) -> None:
    banner("SCENARIO 4: Edge-Case Guards — Invalid Operations")
    svc, _ = await build_services(use_sqlite)
    prop = PROPERTIES[1]

    tx = await svc.initiate_transaction(prop, SELLER, BUYER)
    await svc.open_escrow(tx.id, SYSTEM_ID)
    first, *rest = await upload_required(svc, tx.id)
    await svc.verify_document(tx.id, first, NOTARY_ID)

    section("Guard 1: Verify an already-verified document")
    try:
        await svc.verify_document(tx.id, first, NOTARY_ID)
    except SettlementError as exc:
        refused(exc)

    for document_id in rest:
        await svc.verify_document(tx.id, document_id, NOTARY_ID)

    section("Guard 2: Payment with amount <= 0")
    try:
        await svc.process_payment(
            tx.id, Decimal("-500"), BUYER.id, PaymentMethod.ESCROW, "BAD-REF-1"
        )
    except SettlementError as exc:
        refused(exc)

    section("Guard 3: Ownership transfer before payment")
    try:
        await svc.complete_ownership_transfer(tx.id, NOTARY_ID)
    except SettlementError as exc:
        refused(exc)

    payment = await svc.process_payment(
        tx.id, prop.price, BUYER.id, PaymentMethod.BANK_TRANSFER, "FI-BANK-2024-55555"
    )
    await svc.confirm_payment(tx.id, payment.id, BANK_ID)
    await svc.complete_ownership_transfer(tx.id, NOTARY_ID)

    section("Guard 4: Dispute on a completed transaction")
    try:
        await svc.raise_dispute(tx.id, BUYER.id, "Changed my mind")
    except SettlementError as exc:
        refused(exc)

    await print_status(svc, tx.id)


# ===========================================================================
# Main
# ===========================================================================
SCENARIOS = {
    1: scenario_1_happy_path,
    2: scenario_2_cancellation,
    3: scenario_3_dispute,
    4: scenario_4_guards,
}


async def run(scenario: int = 0, use_sqlite: bool = False) -> None:
    """Run one scenario, or all of them when ``scenario`` is 0."""
    if scenario and scenario not in SCENARIOS:
        print(f"Unknown scenario {scenario}. Available: {', '.join(map(str, SCENARIOS))}")
        return

    try:
        print("\n" + "🏠" * 35)
        print("  PROPERTY SETTLEMENT — SIMULATION")
        store_type = "SQLite (in-memory)" if use_sqlite else "In-memory"
        print(f"  Store: {store_type}")
        print("🏠" * 35 + "\n")

        selected = [SCENARIOS[scenario]] if scenario else list(SCENARIOS.values())
        for run_scenario in selected:
            await run_scenario(use_sqlite)

        print("\n" + "=" * 70)
        print("  ✅ SIMULATION FINISHED")
        print("=" * 70 + "\n")
    finally:
        await shutdown_store()


def main() -> None:
    parser = argparse.ArgumentParser(description="Property Settlement Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1-4). Default: run all.",
    )
    parser.add_argument(
        "--sqlite",
        action="store_true",
        help="Persist through the SQL store on SQLite in-memory.",
    )
    args = parser.parse_args()
    asyncio.run(run(scenario=args.scenario, use_sqlite=args.sqlite))


if __name__ == "__main__":
    main()
