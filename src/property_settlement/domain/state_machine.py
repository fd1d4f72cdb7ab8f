"""Transaction State Machine Guard.

Uses python-statemachine to enforce legal phase transitions at the domain level.
No matter what the API or the orchestrator attempts, an illegal transition
(e.g., DOCUMENTS_PENDING -> COMPLETED) will raise TransitionNotAllowed.

The state machine is instantiated per-transaction and validates transitions
before the aggregate's status field is updated.

Transition table:
    INITIATED                  -> CONTRACT_GENERATED         (contract_generated)
    CONTRACT_GENERATED         -> DOCUMENTS_PENDING          (request_documents)
    DOCUMENTS_PENDING          -> DOCUMENTS_VERIFIED         (documents_verified)
    DOCUMENTS_VERIFIED         -> PAYMENT_PENDING            (request_payment)
    PAYMENT_PENDING            -> PAYMENT_RECEIVED           (payment_received)
    PAYMENT_RECEIVED           -> OWNERSHIP_TRANSFER_PENDING (request_transfer)
    OWNERSHIP_TRANSFER_PENDING -> COMPLETED                  (complete_transfer)
    <any non-terminal>         -> CANCELLED                  (cancel)
    DOCUMENTS_PENDING          -> DISPUTED                   (raise_dispute)
    PAYMENT_PENDING            -> DISPUTED                   (raise_dispute)
    OWNERSHIP_TRANSFER_PENDING -> DISPUTED                   (raise_dispute)
    DISPUTED                   -> OWNERSHIP_TRANSFER_PENDING (resolve_dispute)
"""

from __future__ import annotations

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from property_settlement.domain.enums import TransactionStatus


class TransactionStateMachine(StateMachine):
    """State machine that guards property transaction lifecycle transitions.

    Usage:
        sm = TransactionStateMachine(current_status="DOCUMENTS_PENDING")
        sm.documents_verified()  # transitions to DOCUMENTS_VERIFIED
        sm.status                # "DOCUMENTS_VERIFIED"
    """

    # --- States ---
    INITIATED = State("INITIATED", initial=True)
    CONTRACT_GENERATED = State("CONTRACT_GENERATED")
    DOCUMENTS_PENDING = State("DOCUMENTS_PENDING")
    DOCUMENTS_VERIFIED = State("DOCUMENTS_VERIFIED")
    PAYMENT_PENDING = State("PAYMENT_PENDING")
    PAYMENT_RECEIVED = State("PAYMENT_RECEIVED")
    OWNERSHIP_TRANSFER_PENDING = State("OWNERSHIP_TRANSFER_PENDING")
    COMPLETED = State("COMPLETED", final=True)
    CANCELLED = State("CANCELLED", final=True)
    DISPUTED = State("DISPUTED")

    # --- Events / Transitions ---

    # Automatic hops
    contract_generated = INITIATED.to(CONTRACT_GENERATED)
    request_documents = CONTRACT_GENERATED.to(DOCUMENTS_PENDING)
    documents_verified = DOCUMENTS_PENDING.to(DOCUMENTS_VERIFIED)
    request_payment = DOCUMENTS_VERIFIED.to(PAYMENT_PENDING)
    payment_received = PAYMENT_PENDING.to(PAYMENT_RECEIVED)
    request_transfer = PAYMENT_RECEIVED.to(OWNERSHIP_TRANSFER_PENDING)

    # Closing
    complete_transfer = OWNERSHIP_TRANSFER_PENDING.to(COMPLETED)

    # Cancellation
    cancel = (
        INITIATED.to(CANCELLED)
        | CONTRACT_GENERATED.to(CANCELLED)
        | DOCUMENTS_PENDING.to(CANCELLED)
        | DOCUMENTS_VERIFIED.to(CANCELLED)
        | PAYMENT_PENDING.to(CANCELLED)
        | PAYMENT_RECEIVED.to(CANCELLED)
        | OWNERSHIP_TRANSFER_PENDING.to(CANCELLED)
        | DISPUTED.to(CANCELLED)
    )

    # Disputes
    # Only from the phases a stored transaction can rest in
    raise_dispute = (
        DOCUMENTS_PENDING.to(DISPUTED)
        | PAYMENT_PENDING.to(DISPUTED)
        | OWNERSHIP_TRANSFER_PENDING.to(DISPUTED)
    )
    resolve_dispute = DISPUTED.to(OWNERSHIP_TRANSFER_PENDING)

    def __init__(self, current_status: str = "INITIATED") -> None:
        """Initialize the state machine at a given status.

        Args:
            current_status: The current TransactionStatus value.
                           Must match one of the State value strings exactly.
        """
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        # start_value expects the string value, not the State object
        super().__init__(start_value=str(current_status))

    @property
    def status(self) -> TransactionStatus:
        """Return the current state as a TransactionStatus."""
        return TransactionStatus(self.current_state.value)

    def get_allowed_events(self) -> list[str]:
        """Return the event names that can fire from the current state."""
        return [name for name in EVENT_NAMES if can_fire(self.status, name)]


EVENT_NAMES: tuple[str, ...] = (
    "contract_generated",
    "request_documents",
    "documents_verified",
    "request_payment",
    "payment_received",
    "request_transfer",
    "complete_transfer",
    "cancel",
    "raise_dispute",
    "resolve_dispute",
)


def validate_transition(current_status: str, event_name: str) -> TransactionStatus:
    """Validate a state transition and return the new status.

    Creates a throwaway state machine, fires the named event, and returns
    the resulting status. The caller's aggregate is never touched.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the status or event name is invalid.
    """
    if event_name not in EVENT_NAMES:
        raise ValueError(
            f"Unknown event '{event_name}'. Valid events: {', '.join(EVENT_NAMES)}"
        )
    sm = TransactionStateMachine(current_status=current_status)
    getattr(sm, event_name)()
    return sm.status


def can_fire(current_status: str, event_name: str) -> bool:
    """Return True if ``event_name`` is legal from ``current_status``."""
    try:
        validate_transition(current_status, event_name)
    except TransitionNotAllowed:
        return False
    return True


def source_statuses(event_name: str) -> list[TransactionStatus]:
    """Return every status from which ``event_name`` may fire, in lifecycle order."""
    return [status for status in TransactionStatus if can_fire(status, event_name)]
