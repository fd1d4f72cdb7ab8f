"""Tests for the in-process transaction store."""

from __future__ import annotations

import pytest

from property_settlement.domain.collaborators import TransactionStore
from property_settlement.domain.enums import TransactionStatus
from property_settlement.domain.models import Transaction
from property_settlement.infrastructure.memory_store import InMemoryTransactionStore


@pytest.fixture
def transaction(sample_property, seller, buyer) -> Transaction:
    return Transaction(property=sample_property, seller=seller, buyer=buyer)


class TestInMemoryTransactionStore:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryTransactionStore(), TransactionStore)

    @pytest.mark.asyncio
    async def test_add_and_get(self, transaction) -> None:
        store = InMemoryTransactionStore()
        await store.add(transaction)

        loaded = await store.get(transaction.id)
        assert loaded == transaction
        assert loaded is not transaction
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_get_unknown(self) -> None:
        assert await InMemoryTransactionStore().get("missing") is None

    @pytest.mark.asyncio
    async def test_add_duplicate(self, transaction) -> None:
        store = InMemoryTransactionStore()
        await store.add(transaction)
        with pytest.raises(ValueError, match="already stored"):
            await store.add(transaction)

    @pytest.mark.asyncio
    async def test_mutation_needs_save(self, transaction) -> None:
        store = InMemoryTransactionStore()
        await store.add(transaction)

        working = await store.get(transaction.id)
        working.status = TransactionStatus.CANCELLED
        assert (await store.get(transaction.id)).status == TransactionStatus.INITIATED

        await store.save(working)
        assert (await store.get(transaction.id)).status == TransactionStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_save_unknown(self, transaction) -> None:
        with pytest.raises(KeyError):
            await InMemoryTransactionStore().save(transaction)

    @pytest.mark.asyncio
    async def test_list_all(self, sample_property, seller, buyer) -> None:
        store = InMemoryTransactionStore()
        first = Transaction(property=sample_property, seller=seller, buyer=buyer)
        second = Transaction(property=sample_property, seller=seller, buyer=buyer)
        await store.add(first)
        await store.add(second)

        assert [tx.id for tx in await store.list_all()] == [first.id, second.id]
