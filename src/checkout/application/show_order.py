"""Application service: Get Order Status use case (query)."""

from __future__ import annotations

from checkout.application.dto import OrderStatusDTO
from checkout.application.mapping import order_to_status_dto
from checkout.domain.exceptions import EntityNotFoundError
from checkout.domain.repository.unit_of_work import UnitOfWork


class GetOrderStatusHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, order_id: str) -> OrderStatusDTO:
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order {order_id} not found")
            return order_to_status_dto(order)
