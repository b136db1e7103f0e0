"""Abstract repository for outbox events."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.outbox import OutboxEvent


class OutboxRepository(ABC):

    @abstractmethod
    def add(self, event: OutboxEvent) -> None:
        """Store a new event as part of the current transaction."""

    @abstractmethod
    def fetch_unpublished(self, limit: int) -> list[OutboxEvent]:
        """Lock and return up to ``limit`` unpublished events, oldest first.

        Rows already locked by another relay are skipped, not waited on.
        """

    @abstractmethod
    def save(self, event: OutboxEvent) -> None:
        """Persist changes to an event (its ``published_at``)."""
