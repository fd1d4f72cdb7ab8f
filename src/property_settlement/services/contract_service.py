"""Contract Service: renders the purchase agreement for a new transaction.

Template-backed implementation of the ContractGenerator protocol. An
LLM-backed or e-signature-provider generator can replace it as long as it
returns a GeneratedContract from ``generate()``.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from property_settlement.domain.models import GeneratedContract, utcnow
from property_settlement.logging_config import get_logger

if TYPE_CHECKING:
    from property_settlement.domain.models import Transaction

logger = get_logger(__name__)

DEFAULT_TEMPLATE_VERSION = "v2.1-AI"
_RULE = "─" * 42


class TemplateContractGenerator:
    """Fills a fixed plain-text purchase agreement from transaction fields."""

    def __init__(self, template_version: str = DEFAULT_TEMPLATE_VERSION) -> None:
        self._template_version = template_version

    def generate(self, transaction: Transaction) -> GeneratedContract:
        contract = GeneratedContract(
            id=f"CONTRACT-{uuid.uuid4().hex[:8].upper()}",
            template_version=self._template_version,
            generated_at=utcnow(),
            property_address=transaction.property.address,
            seller_name=transaction.seller.name,
            buyer_name=transaction.buyer.name,
            agreed_price=transaction.property.price,
            content=self._render(transaction),
        )
        logger.info(
            "contract.generated",
            transaction_id=transaction.id,
            contract_id=contract.id,
            template=contract.template_version,
        )
        return contract

    def _render(self, transaction: Transaction) -> str:
        prop = transaction.property
        seller = transaction.seller
        buyer = transaction.buyer
        return "\n".join(
            [
                "PURCHASE AGREEMENT",
                _RULE,
                f"Property : {prop.address}",
                f"           {prop.square_meters:g} m²  |  {prop.description or ''}",
                f"Seller   : {seller.name} <{seller.email}>",
                f"Buyer    : {buyer.name} <{buyer.email}>",
                f"Price    : €{prop.price:,}",
                f"Date     : {utcnow().date().isoformat()}",
                _RULE,
                "This agreement is auto-generated and legally binding upon e-signature",
                "by both parties. Funds will be held in escrow until deed transfer.",
            ]
        )
