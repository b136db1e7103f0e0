"""Catalog access for the checkout core: reads plus seeding writes."""

from __future__ import annotations

from abc import abstractmethod

from checkout.domain.model.product import CatalogProduct
from checkout.domain.port.catalog_reader import CatalogReader


class CatalogRepository(CatalogReader):

    @abstractmethod
    def save(self, product: CatalogProduct) -> None:
        """Persist a new or updated product."""
