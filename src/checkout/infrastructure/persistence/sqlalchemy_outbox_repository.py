"""SQLAlchemy-backed implementation of OutboxRepository.

``fetch_unpublished`` takes row locks with SKIP LOCKED so several relay
processes can drain the table side by side without sending an event
twice.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from checkout.domain.model.outbox import OutboxEvent
from checkout.domain.repository.outbox_repository import OutboxRepository
from checkout.infrastructure.persistence.database import as_utc
from checkout.infrastructure.persistence.orm import OutboxEventRow


class SqlAlchemyOutboxRepository(OutboxRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, event: OutboxEvent) -> None:
        self._session.add(
            OutboxEventRow(
                id=event.id,
                aggregate_type=event.aggregate_type,
                aggregate_id=event.aggregate_id,
                event_type=event.event_type,
                payload=event.payload,
                created_at=event.created_at,
                published_at=event.published_at,
            )
        )
        self._session.flush()

    def fetch_unpublished(self, limit: int) -> list[OutboxEvent]:
        rows = self._session.scalars(
            select(OutboxEventRow)
            .where(OutboxEventRow.published_at.is_(None))
            .order_by(OutboxEventRow.created_at, OutboxEventRow.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        ).all()
        return [self._to_domain(row) for row in rows]

    def save(self, event: OutboxEvent) -> None:
        row = self._session.get(OutboxEventRow, event.id)
        row.published_at = event.published_at
        self._session.flush()

    @staticmethod
    def _to_domain(row: OutboxEventRow) -> OutboxEvent:
        return OutboxEvent(
            id=row.id,
            aggregate_type=row.aggregate_type,
            aggregate_id=row.aggregate_id,
            event_type=row.event_type,
            payload=row.payload,
            created_at=as_utc(row.created_at),
            published_at=as_utc(row.published_at),
        )
