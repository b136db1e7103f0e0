"""Application service: move a confirmed order through fulfillment.

confirmed -> processing -> shipped -> delivered.  Confirmation itself
only happens through payment and cancellation has its own use case.
"""

from __future__ import annotations

import structlog

from checkout.application import events
from checkout.application.dto import OrderDTO
from checkout.application.mapping import order_to_dto
from checkout.domain.exceptions import EntityNotFoundError, ValidationError
from checkout.domain.model.order import OrderStatus
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.order_state_machine import OrderStateMachine

logger = structlog.get_logger(__name__)

FULFILLMENT_STATUSES = (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED)


class AdvanceOrderHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow
        self._machine = OrderStateMachine()

    def handle(self, order_id: str, target: OrderStatus | str, note: str | None = None) -> OrderDTO:
        if not isinstance(target, OrderStatus):
            try:
                target = OrderStatus(target)
            except ValueError:
                raise ValidationError(f"Unknown order status '{target}'") from None
        if target not in FULFILLMENT_STATUSES:
            raise ValidationError(
                f"Orders can only be advanced to "
                f"{', '.join(s.value for s in FULFILLMENT_STATUSES)}"
            )

        with self._uow as uow:
            order = uow.orders.get_by_id(order_id, lock=True)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")

            previous = order.status
            self._machine.transition(order, target)
            if note:
                order.add_note(note)
            uow.orders.save(order)
            uow.outbox.add(events.order_status_changed(order))
            uow.commit()

        logger.info(
            "Order advanced",
            order_id=order_id,
            from_status=previous.value,
            to_status=target.value,
        )
        return order_to_dto(order)
