"""RabbitMQ implementation of MessageBroker.

One connection and one confirm-mode channel live for as long as the
broker is open; a failed publish drops them and the next publish
reconnects with exponential backoff.  Messages go to a durable topic
exchange with the topic as routing key and the aggregate key in the
``correlation_id`` and ``key`` header.
"""

from __future__ import annotations

import json
import time

import pika
import pika.exceptions
import structlog

from checkout.domain.exceptions import OutboxPublishError
from checkout.domain.port.message_broker import MessageBroker

logger = structlog.get_logger(__name__)


class PikaMessageBroker(MessageBroker):

    def __init__(
        self,
        url: str,
        exchange: str = "checkout.events",
        max_connect_attempts: int = 5,
        max_wait_sec: float = 60.0,
    ) -> None:
        self._url = url
        self._exchange = exchange
        self._max_connect_attempts = max_connect_attempts
        self._max_wait_sec = max_wait_sec
        self._connection: pika.BlockingConnection | None = None
        self._channel = None

    def __enter__(self) -> PikaMessageBroker:
        self.open()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # --- Lifecycle ------------------------------------------------------------

    def open(self) -> None:
        attempt = 0
        while True:
            try:
                params = pika.URLParameters(self._url)
                params.heartbeat = 30
                params.blocked_connection_timeout = 300
                connection = pika.BlockingConnection(params)
                channel = connection.channel()
                channel.exchange_declare(
                    exchange=self._exchange, exchange_type="topic", durable=True
                )
                channel.confirm_delivery()
            except pika.exceptions.AMQPError as exc:
                attempt += 1
                if attempt >= self._max_connect_attempts:
                    raise OutboxPublishError(f"Cannot connect to broker: {exc}") from exc
                sleep = min(2 ** attempt, self._max_wait_sec)
                logger.warning(
                    "Broker connect failed, retrying",
                    attempt=attempt,
                    retry_in=sleep,
                    error=str(exc),
                )
                time.sleep(sleep)
                continue
            self._connection, self._channel = connection, channel
            logger.info("Connected to broker", exchange=self._exchange)
            return

    def close(self) -> None:
        connection, self._connection, self._channel = self._connection, None, None
        if connection is not None and connection.is_open:
            try:
                connection.close()
            except pika.exceptions.AMQPError as exc:
                logger.warning("Broker connection did not close cleanly", error=str(exc))

    @property
    def is_open(self) -> bool:
        return self._connection is not None and self._connection.is_open

    def sleep(self, seconds: float) -> None:
        """Wait on the connection so heartbeats keep being answered."""
        if not self.is_open:
            time.sleep(seconds)
            return
        try:
            self._connection.sleep(seconds)
        except pika.exceptions.AMQPError as exc:
            logger.warning("Broker connection lost while idle", error=str(exc))
            self.close()

    # --- MessageBroker interface ----------------------------------------------

    def publish(self, topic: str, key: str, payload: dict) -> None:
        if not self.is_open:
            self.close()
            self.open()
        try:
            self._channel.basic_publish(
                exchange=self._exchange,
                routing_key=topic,
                body=json.dumps(payload).encode("utf-8"),
                properties=pika.BasicProperties(
                    content_type="application/json",
                    delivery_mode=2,  # persistent
                    correlation_id=key,
                    headers={"key": key},
                ),
            )
        except pika.exceptions.AMQPError as exc:
            # Channel or connection may be unusable now; reconnect next time
            self.close()
            raise OutboxPublishError(f"Publish to {topic} failed: {exc}") from exc
