"""Abstract repository for the append-only stock ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.stock import StockLedgerEntry


class StockLedgerRepository(ABC):

    @abstractmethod
    def add(self, entry: StockLedgerEntry) -> None:
        """Append an entry. Entries are never updated or deleted."""

    @abstractmethod
    def entries_for_order(self, order_id: str) -> list[StockLedgerEntry]:
        """Return every entry tied to an order, oldest first."""

    @abstractmethod
    def net_delta(self, product_id: str) -> int:
        """Return the sum of all deltas recorded for a product."""
