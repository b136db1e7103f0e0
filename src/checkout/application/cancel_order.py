"""Application service: Cancel Order use case.

Allowed while the order is pending, confirmed or processing.  The
stock reserved at checkout is released in the same transaction as the
status change, and an ``order.cancelled`` event is recorded.  If the
customer already paid, a ``refund.requested`` event is recorded too;
the payment side executes the refund on its own.
"""

from __future__ import annotations

import structlog

from checkout.application import events
from checkout.application.dto import OrderDTO
from checkout.application.mapping import order_to_dto
from checkout.domain.exceptions import EntityNotFoundError
from checkout.domain.model.order import PaymentStatus
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.order_state_machine import OrderStateMachine
from checkout.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class CancelOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow
        self._machine = OrderStateMachine()

    def handle(self, order_id: str, reason: str | None = None) -> OrderDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, lock=True)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")

            was_paid = order.payment_status == PaymentStatus.PAID
            self._machine.cancel(order, reason)
            StockLedger(uow.stock_entries, uow.catalog).release(order.id)

            uow.orders.save(order)
            uow.outbox.add(events.order_cancelled(order, reason))
            if was_paid:
                uow.outbox.add(events.refund_requested(order, reason))
            uow.commit()

        logger.info("Order cancelled", order_id=order_id, refund_requested=was_paid)
        return order_to_dto(order)
