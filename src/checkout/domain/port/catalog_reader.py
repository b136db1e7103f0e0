"""Read port onto the product catalog."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.product import CatalogProduct


class CatalogReader(ABC):

    @abstractmethod
    def get_product(self, product_id: str, lock: bool = False) -> CatalogProduct | None:
        """Return the product, or None if it does not exist.

        With ``lock`` the product row is locked for the rest of the
        transaction so concurrent reservations of it serialise.
        """
