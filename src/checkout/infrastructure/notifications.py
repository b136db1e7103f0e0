"""Notification adapter that records confirmations in the log.

Delivery (e-mail, push) is handled by another service reading the
``order.confirmed`` event; this only leaves a trace for operators.
"""

from __future__ import annotations

import structlog

from checkout.domain.port.notification import NotificationPort

logger = structlog.get_logger(__name__)


class LoggingNotifier(NotificationPort):

    def send_order_confirmation(self, customer_id: str, order_id: str) -> None:
        logger.info("Order confirmation queued", customer_id=customer_id, order_id=order_id)
