"""Notary Service: the AI notary agent that reviews uploaded documents.

For every unverified document on a transaction the agent:
    1. Asks a DocumentScorer for an authenticity confidence score.
    2. Compares it to the per-kind threshold.
    3. Verifies the document through the TransactionService if it passes,
       or stops the review with DocumentRejectedError if it does not.

The agent never flips a document itself; the orchestrator stays the only
writer, so the aggregation rules and audit trail apply as for a human
notary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from property_settlement.domain.collaborators import ScoringRequest, ScoringResult
from property_settlement.domain.enums import DocumentType
from property_settlement.domain.exceptions import DocumentRejectedError
from property_settlement.logging_config import get_logger

if TYPE_CHECKING:
    from property_settlement.domain.collaborators import DocumentScorer
    from property_settlement.services.transaction_service import TransactionService

logger = get_logger(__name__)

AI_NOTARY_ID = "ai-notary-agent-v1"

CONFIDENCE_THRESHOLDS: dict[DocumentType, float] = {
    DocumentType.TITLE_DEED: 0.95,
    DocumentType.IDENTITY_SELLER: 0.97,
    DocumentType.IDENTITY_BUYER: 0.97,
    DocumentType.PURCHASE_AGREEMENT: 0.92,
    DocumentType.MORTGAGE_APPROVAL: 0.93,
    DocumentType.INSPECTION_REPORT: 0.90,
}


class MockDocumentScorer:
    """Deterministic scorer for demos and tests.

    Returns a fixed score per document kind with zero network calls.
    Pass ``overrides`` to force a score for specific kinds.
    """

    DEFAULT_SCORES: dict[DocumentType, float] = {
        DocumentType.TITLE_DEED: 0.98,
        DocumentType.IDENTITY_SELLER: 0.99,
        DocumentType.IDENTITY_BUYER: 0.99,
        DocumentType.PURCHASE_AGREEMENT: 0.97,
        DocumentType.MORTGAGE_APPROVAL: 0.96,
        DocumentType.INSPECTION_REPORT: 0.94,
    }

    def __init__(self, overrides: dict[DocumentType, float] | None = None) -> None:
        self._scores = {**self.DEFAULT_SCORES, **(overrides or {})}

    async def score(self, request: ScoringRequest) -> ScoringResult:
        value = self._scores.get(request.document_type, 0.90)
        return ScoringResult(
            score=value,
            details=f"Mock authenticity score for {request.document_type}",
            logs={"mode": "dry-run", "scorer": "mock"},
        )


@dataclass(frozen=True)
class NotaryDecision:
    document_id: str
    document_type: DocumentType
    score: float
    threshold: float
    approved: bool


class NotaryAgentService:
    """Reviews every unverified document of a transaction."""

    def __init__(
        self,
        transactions: TransactionService,
        scorer: DocumentScorer,
        default_threshold: float = 0.95,
        notary_id: str = AI_NOTARY_ID,
    ) -> None:
        self._transactions = transactions
        self._scorer = scorer
        self._default_threshold = default_threshold
        self._notary_id = notary_id

    def threshold_for(self, document_type: DocumentType) -> float:
        return CONFIDENCE_THRESHOLDS.get(document_type, self._default_threshold)

    async def verify_all_documents(self, transaction_id: str) -> list[NotaryDecision]:
        """Score and verify each pending document, in upload order.

        Returns:
            One approved NotaryDecision per document the agent verified.

        Raises:
            DocumentRejectedError: On the first document scoring below its
                threshold. Documents approved before it stay verified.
        """
        tx = await self._transactions.get_transaction(transaction_id)
        pending = [d for d in tx.documents if not d.verified]
        logger.info(
            "notary.review_started",
            transaction_id=transaction_id,
            documents=len(pending),
        )

        decisions: list[NotaryDecision] = []
        for document in pending:
            result = await self._scorer.score(
                ScoringRequest(
                    transaction_id=transaction_id,
                    document_id=document.id,
                    document_type=document.type,
                    notes=document.notes,
                )
            )
            threshold = self.threshold_for(document.type)
            approved = result.score >= threshold
            logger.info(
                "notary.document_scored",
                transaction_id=transaction_id,
                document_id=document.id,
                type=document.type,
                score=result.score,
                threshold=threshold,
                approved=approved,
            )
            if not approved:
                raise DocumentRejectedError(document.type, result.score, threshold)

            await self._transactions.verify_document(
                transaction_id, document.id, self._notary_id
            )
            decisions.append(
                NotaryDecision(
                    document_id=document.id,
                    document_type=document.type,
                    score=result.score,
                    threshold=threshold,
                    approved=True,
                )
            )

        logger.info("notary.review_finished", transaction_id=transaction_id)
        return decisions
