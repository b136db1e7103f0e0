"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str, lock: bool = False) -> Order | None:
        """Return an order by its ID, or None if not found.

        With ``lock`` the row stays locked until the transaction ends.
        """

    @abstractmethod
    def get_by_idempotency_key(self, customer_id: str, key: str) -> Order | None:
        """Return the order a customer already placed with this key."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order together with its items.

        Raises DuplicateOrderError when a new order reuses an idempotency
        key the customer already placed an order under.
        """
