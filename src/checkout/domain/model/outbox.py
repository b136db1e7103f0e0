"""Outbox events: domain events persisted with the mutation that caused them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from checkout.domain.exceptions import ValidationError


@dataclass
class OutboxEvent:

    id: str
    aggregate_type: str
    aggregate_id: str
    event_type: str
    payload: dict
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    published_at: datetime | None = None

    @staticmethod
    def record(aggregate_type: str, aggregate_id: str, event_type: str, payload: dict) -> OutboxEvent:
        if not aggregate_type or not event_type:
            raise ValidationError("Outbox events need an aggregate type and event type")
        return OutboxEvent(
            id=str(uuid4()),
            aggregate_type=aggregate_type,
            aggregate_id=str(aggregate_id),
            event_type=event_type,
            payload=payload,
        )

    @property
    def topic(self) -> str:
        return f"{self.aggregate_type}-{self.event_type}"

    @property
    def is_published(self) -> bool:
        return self.published_at is not None

    def mark_published(self, at: datetime | None = None) -> None:
        """Set ``published_at``. An event is only ever published once."""
        if self.published_at is not None:
            raise ValidationError(f"Outbox event {self.id} already published")
        self.published_at = at or datetime.now(timezone.utc)
