"""Infrastructure: transaction store implementations."""

from property_settlement.infrastructure.memory_store import InMemoryTransactionStore

__all__ = ["InMemoryTransactionStore"]
