"""Background worker driving the outbox relay.

The worker owns the broker connection for its whole lifetime: opened
once when it starts, closed when it stops.  Each tick runs one relay
cycle; a failing cycle is logged and retried on the next tick.
Between ticks the worker idles on the broker connection in short slices
so heartbeats keep flowing and ``stop()`` takes effect within a slice.

Several workers (one per process) may run against the same database;
they split the work through row locks alone.
"""

from __future__ import annotations

import threading
import time

import structlog

from checkout.application.relay_outbox import OutboxRelay
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.infrastructure.messaging.pika_broker import PikaMessageBroker

logger = structlog.get_logger(__name__)

IDLE_SLICE_SEC = 1.0


class OutboxRelayWorker:

    def __init__(
        self,
        uow: UnitOfWork,
        broker: PikaMessageBroker,
        poll_interval: float = 60.0,
        batch_size: int = 100,
    ) -> None:
        self._broker = broker
        self._relay = OutboxRelay(uow, broker, batch_size=batch_size)
        self._poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run(self) -> None:
        """Relay until ``stop()`` is called. Blocks the calling thread."""
        logger.info("Outbox relay starting", poll_interval=self._poll_interval)
        with self._broker:
            while not self._stop.is_set():
                self.tick()
                self._idle()
        logger.info("Outbox relay stopped")

    def tick(self) -> int:
        """Run one cycle; never raises."""
        try:
            return self._relay.run_once()
        except Exception:
            logger.exception("Outbox relay cycle failed")
            return 0

    def _idle(self) -> None:
        deadline = time.monotonic() + self._poll_interval
        while not self._stop.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            self._broker.sleep(min(remaining, IDLE_SLICE_SEC))

    def start(self) -> threading.Thread:
        """Run the relay on a daemon thread."""
        self._thread = threading.Thread(target=self.run, name="outbox-relay", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
