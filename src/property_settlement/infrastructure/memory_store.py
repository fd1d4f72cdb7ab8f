"""In-process transaction store.

Holds one aggregate per identifier. Records go in and come out as deep
copies, so a caller can never mutate a stored transaction without an
explicit ``save()``; the orchestrator relies on this to discard the working
copy of a failed operation.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from property_settlement.domain.models import Transaction


class InMemoryTransactionStore:
    """Dict-backed TransactionStore, scoped to the owning service's lifetime."""

    def __init__(self) -> None:
        self._records: dict[str, Transaction] = {}

    async def add(self, transaction: Transaction) -> None:
        if transaction.id in self._records:
            raise ValueError(f"Transaction {transaction.id} already stored")
        self._records[transaction.id] = copy.deepcopy(transaction)

    async def get(self, transaction_id: str) -> Transaction | None:
        record = self._records.get(transaction_id)
        return copy.deepcopy(record) if record is not None else None

    async def save(self, transaction: Transaction) -> None:
        if transaction.id not in self._records:
            raise KeyError(transaction.id)
        self._records[transaction.id] = copy.deepcopy(transaction)

    async def list_all(self) -> list[Transaction]:
        return [copy.deepcopy(tx) for tx in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)
