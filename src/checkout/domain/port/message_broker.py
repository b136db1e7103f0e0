"""Outbound port onto the message broker used by the outbox relay."""

from __future__ import annotations

from abc import ABC, abstractmethod


class MessageBroker(ABC):

    @abstractmethod
    def publish(self, topic: str, key: str, payload: dict) -> None:
        """Publish one message and wait for the broker's acknowledgement.

        ``key`` groups messages that must stay in order (the aggregate id).
        Raises OutboxPublishError if the broker does not accept it.
        """
