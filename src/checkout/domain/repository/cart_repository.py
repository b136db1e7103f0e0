"""Abstract repository for the Cart aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def get_by_customer(self, customer_id: str) -> Cart | None:
        """Return the customer's cart, or None if they never added anything."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist a new or updated cart, including its items."""
