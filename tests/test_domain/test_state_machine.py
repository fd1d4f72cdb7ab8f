"""Tests for the TransactionStateMachine domain guard.

These tests verify that:
    1. The full lifecycle walks INITIATED -> COMPLETED.
    2. Cancellation and disputes are reachable from the right phases only.
    3. Terminal phases accept no events.
    4. The module helpers (validate_transition, can_fire, source_statuses) agree.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from property_settlement.domain.enums import TERMINAL_STATUSES, TransactionStatus
from property_settlement.domain.state_machine import (
    TransactionStateMachine,
    can_fire,
    source_statuses,
    validate_transition,
)

NON_TERMINAL = [s for s in TransactionStatus if s not in TERMINAL_STATUSES]


class TestHappyPath:
    """Test the full happy-path lifecycle: INITIATED -> COMPLETED."""

    def test_full_lifecycle(self) -> None:
        sm = TransactionStateMachine("INITIATED")
        assert sm.status == "INITIATED"

        sm.contract_generated()
        assert sm.status == "CONTRACT_GENERATED"

        sm.request_documents()
        assert sm.status == "DOCUMENTS_PENDING"

        sm.documents_verified()
        assert sm.status == "DOCUMENTS_VERIFIED"

        sm.request_payment()
        assert sm.status == "PAYMENT_PENDING"

        sm.payment_received()
        assert sm.status == "PAYMENT_RECEIVED"

        sm.request_transfer()
        assert sm.status == "OWNERSHIP_TRANSFER_PENDING"

        sm.complete_transfer()
        assert sm.status == "COMPLETED"

    def test_default_start_is_initiated(self) -> None:
        assert TransactionStateMachine().status == TransactionStatus.INITIATED


class TestCancelPath:
    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_cancel_from_every_open_phase(self, status: TransactionStatus) -> None:
        assert validate_transition(status, "cancel") == TransactionStatus.CANCELLED

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES))
    def test_cancel_from_closed_phase(self, status: TransactionStatus) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition(status, "cancel")


class TestDisputePath:
    def test_dispute_from_transfer_pending(self) -> None:
        sm = TransactionStateMachine("OWNERSHIP_TRANSFER_PENDING")
        sm.raise_dispute()
        assert sm.status == "DISPUTED"

    def test_dispute_not_raised_twice(self) -> None:
        sm = TransactionStateMachine("DISPUTED")
        with pytest.raises(TransitionNotAllowed):
            sm.raise_dispute()

    def test_resolve_returns_to_transfer_pending(self) -> None:
        sm = TransactionStateMachine("DISPUTED")
        sm.resolve_dispute()
        assert sm.status == "OWNERSHIP_TRANSFER_PENDING"

    def test_resolve_only_from_disputed(self) -> None:
        assert source_statuses("resolve_dispute") == [TransactionStatus.DISPUTED]

    def test_dispute_sources_are_resting_phases(self) -> None:
        assert source_statuses("raise_dispute") == [
            TransactionStatus.DOCUMENTS_PENDING,
            TransactionStatus.PAYMENT_PENDING,
            TransactionStatus.OWNERSHIP_TRANSFER_PENDING,
        ]

    @pytest.mark.parametrize(
        "status",
        ["INITIATED", "CONTRACT_GENERATED", "DOCUMENTS_VERIFIED", "PAYMENT_RECEIVED"],
    )
    def test_no_dispute_from_transient_phases(self, status: str) -> None:
        assert not can_fire(status, "raise_dispute")


class TestIllegalTransitions:
    """Verify that illegal transitions raise TransitionNotAllowed."""

    def test_documents_pending_to_completed(self) -> None:
        sm = TransactionStateMachine("DOCUMENTS_PENDING")
        with pytest.raises(TransitionNotAllowed):
            sm.complete_transfer()

    def test_disputed_cannot_complete(self) -> None:
        sm = TransactionStateMachine("DISPUTED")
        with pytest.raises(TransitionNotAllowed):
            sm.complete_transfer()

    def test_payment_pending_cannot_skip_received(self) -> None:
        sm = TransactionStateMachine("PAYMENT_PENDING")
        with pytest.raises(TransitionNotAllowed):
            sm.request_transfer()

    def test_completed_is_final(self) -> None:
        sm = TransactionStateMachine("COMPLETED")
        assert sm.get_allowed_events() == []

    def test_cancelled_is_final(self) -> None:
        sm = TransactionStateMachine("CANCELLED")
        assert sm.get_allowed_events() == []


class TestAllowedEvents:
    """Test the get_allowed_events helper."""

    def test_documents_pending_allowed(self) -> None:
        sm = TransactionStateMachine("DOCUMENTS_PENDING")
        assert sm.get_allowed_events() == ["documents_verified", "cancel", "raise_dispute"]

    def test_disputed_allowed(self) -> None:
        sm = TransactionStateMachine("DISPUTED")
        assert sm.get_allowed_events() == ["cancel", "resolve_dispute"]


class TestValidateTransitionFunction:
    """Test the convenience functions."""

    def test_valid_transition(self) -> None:
        result = validate_transition("PAYMENT_PENDING", "payment_received")
        assert result == "PAYMENT_RECEIVED"

    def test_can_fire(self) -> None:
        assert can_fire("OWNERSHIP_TRANSFER_PENDING", "complete_transfer")
        assert not can_fire("DISPUTED", "complete_transfer")

    def test_complete_transfer_sources(self) -> None:
        assert source_statuses("complete_transfer") == [
            TransactionStatus.OWNERSHIP_TRANSFER_PENDING
        ]

    def test_invalid_event_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition("PAYMENT_PENDING", "nonexistent_event")

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            TransactionStateMachine("INVALID_STATUS")
