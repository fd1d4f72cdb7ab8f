"""Application services: use case orchestration."""

from property_settlement.services.contract_service import TemplateContractGenerator
from property_settlement.services.notary_service import (
    MockDocumentScorer,
    NotaryAgentService,
)
from property_settlement.services.transaction_service import TransactionService

__all__ = [
    "MockDocumentScorer",
    "NotaryAgentService",
    "TemplateContractGenerator",
    "TransactionService",
]
