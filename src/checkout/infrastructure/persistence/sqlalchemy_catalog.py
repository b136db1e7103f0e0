"""SQLAlchemy-backed implementation of CatalogRepository."""

from __future__ import annotations

from sqlalchemy.orm import Session

from checkout.domain.model.product import CatalogProduct
from checkout.domain.model.value_objects import Money
from checkout.domain.repository.catalog_repository import CatalogRepository
from checkout.infrastructure.persistence.orm import ProductRow


class SqlAlchemyCatalog(CatalogRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- CatalogReader interface ----------------------------------------------

    def get_product(self, product_id: str, lock: bool = False) -> CatalogProduct | None:
        row = self._session.get(ProductRow, product_id, with_for_update=lock)
        return self._to_domain(row) if row is not None else None

    # --- CatalogRepository interface ------------------------------------------

    def save(self, product: CatalogProduct) -> None:
        row = self._session.get(ProductRow, product.id)
        if row is None:
            row = ProductRow(id=product.id)
            self._session.add(row)
        row.name = product.name
        row.price = product.price.amount
        row.currency = product.price.currency
        row.stock_quantity = product.stock_quantity
        row.track_inventory = product.track_inventory
        row.is_active = product.is_active
        self._session.flush()

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> CatalogProduct:
        return CatalogProduct(
            id=row.id,
            name=row.name,
            price=Money(row.price, row.currency),
            stock_quantity=row.stock_quantity,
            track_inventory=row.track_inventory,
            is_active=row.is_active,
        )
