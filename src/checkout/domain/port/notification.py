"""Outbound notification port."""

from __future__ import annotations

from abc import ABC, abstractmethod


class NotificationPort(ABC):

    @abstractmethod
    def send_order_confirmation(self, customer_id: str, order_id: str) -> None:
        """Tell the customer their order is confirmed. Fire-and-forget."""
