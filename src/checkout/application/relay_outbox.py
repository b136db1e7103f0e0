"""Application service: relay unpublished outbox events to the broker.

One call to ``run_once()`` is one relay cycle:

1. Lock up to ``batch_size`` unpublished events, oldest first, skipping
   rows another relay instance already holds.
2. Publish each to ``{aggregate_type}-{event_type}`` keyed by the
   aggregate id, marking it published as soon as the broker acks.
3. Stop at the first failure so later events of the same aggregate
   cannot overtake it, and commit what was published.

If the commit itself fails every ``published_at`` of the cycle is rolled
back and those events go out again next cycle (at-least-once).
"""

from __future__ import annotations

import structlog

from checkout.domain.exceptions import OutboxPublishError, ValidationError
from checkout.domain.port.message_broker import MessageBroker
from checkout.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 100


class OutboxRelay:

    def __init__(
        self,
        uow: UnitOfWork,
        broker: MessageBroker,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size <= 0:
            raise ValidationError("Outbox batch size must be positive")
        self._uow = uow
        self._broker = broker
        self._batch_size = batch_size

    def run_once(self) -> int:
        """Run one cycle and return how many events were published."""
        published = 0
        with self._uow as uow:
            batch = uow.outbox.fetch_unpublished(self._batch_size)
            if not batch:
                return 0

            for event in batch:
                try:
                    self._broker.publish(event.topic, event.aggregate_id, event.payload)
                except OutboxPublishError as exc:
                    logger.error(
                        "Outbox publish failed, stopping cycle",
                        event_id=event.id,
                        topic=event.topic,
                        error=str(exc),
                        remaining=len(batch) - published,
                    )
                    break
                event.mark_published()
                uow.outbox.save(event)
                published += 1

            uow.commit()

        logger.info("Outbox cycle complete", published=published, fetched=len(batch))
        return published
