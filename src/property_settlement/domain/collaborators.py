"""Collaborator Protocols.

Defines the capability interfaces the orchestrator and the notary agent
depend on. These are Protocols (structural subtyping) so concrete
implementations don't need to inherit from a base class.

The domain layer has ZERO imports from storage engines or external services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from property_settlement.domain.enums import DocumentType
    from property_settlement.domain.models import GeneratedContract, Transaction


@runtime_checkable
class ContractGenerator(Protocol):
    """Produces the purchase agreement once per transaction, at creation.

    Concrete implementations:
        - services/contract_service.py (plain-text template)
    """

    def generate(self, transaction: Transaction) -> GeneratedContract:
        ...


@dataclass(frozen=True)
class ScoringRequest:
    """Input to a document scorer.

    Attributes:
        transaction_id: Identifier of the owning transaction.
        document_id: Identifier of the document being scored.
        document_type: Kind tag of the document.
        notes: Free-text note attached at upload time, if any.
    """

    transaction_id: str
    document_id: str
    document_type: DocumentType
    notes: str | None = None


@dataclass(frozen=True)
class ScoringResult:
    """Output from a document scorer.

    Attributes:
        score: Authenticity confidence between 0.0 and 1.0.
        details: Human-readable explanation of the score.
        logs: Raw scorer output kept for troubleshooting.
    """

    score: float
    details: str = ""
    logs: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"score": self.score, "details": self.details, "logs": self.logs}


@runtime_checkable
class DocumentScorer(Protocol):
    """Scores the authenticity of an uploaded document.

    Concrete implementations:
        - services/notary_service.py MockDocumentScorer (deterministic)
    """

    async def score(self, request: ScoringRequest) -> ScoringResult:
        ...


@runtime_checkable
class TransactionStore(Protocol):
    """Keyed store of transaction aggregates, one record per identifier.

    Concrete implementations:
        - infrastructure/memory_store.py          (process memory)
        - infrastructure/database/repositories.py (SQLAlchemy)
    """

    async def add(self, transaction: Transaction) -> None:
        ...

    async def get(self, transaction_id: str) -> Transaction | None:
        ...

    async def save(self, transaction: Transaction) -> None:
        ...

    async def list_all(self) -> list[Transaction]:
        ...
