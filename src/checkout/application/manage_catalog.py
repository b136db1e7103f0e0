"""Application services: catalog seeding and goods receipt.

The catalog is owned by another service in production; these use cases
exist so a development database can be filled and restocked.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import structlog

from checkout.application.dto import ProductDTO
from checkout.domain.exceptions import ValidationError
from checkout.domain.model.product import CatalogProduct
from checkout.domain.model.value_objects import DEFAULT_CURRENCY, Money
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


def parse_amount(raw: Decimal | str | int, label: str = "Amount") -> Decimal:
    if isinstance(raw, Decimal):
        return raw
    try:
        return Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationError(f"{label} must be a number, got '{raw}'") from None


class AddProductHandler:

    def __init__(self, uow: UnitOfWork, currency: str = DEFAULT_CURRENCY) -> None:
        self._uow = uow
        self._currency = currency

    def handle(
        self,
        product_id: str,
        name: str,
        price: Decimal | str,
        stock_quantity: int = 0,
        track_inventory: bool = True,
    ) -> ProductDTO:
        """Create the product, or overwrite it if the id already exists."""
        if not product_id or not product_id.strip():
            raise ValidationError("Product id is required")
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if stock_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")

        product = CatalogProduct(
            id=product_id.strip(),
            name=name.strip(),
            price=Money(parse_amount(price, "Price"), self._currency),
            stock_quantity=stock_quantity,
            track_inventory=track_inventory,
        )
        with self._uow as uow:
            uow.catalog.save(product)
            available = StockLedger(uow.stock_entries, uow.catalog).available(product.id)
            uow.commit()

        logger.info("Product saved", product_id=product.id, price=str(product.price))
        return _to_dto(product, available)


class RestockProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, quantity: int) -> ProductDTO:
        with self._uow as uow:
            ledger = StockLedger(uow.stock_entries, uow.catalog)
            ledger.restock(product_id, quantity)
            product = uow.catalog.get_product(product_id)
            available = ledger.available(product_id)
            uow.commit()

        return _to_dto(product, available)


def _to_dto(product: CatalogProduct, available: int) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        name=product.name,
        price=str(product.price),
        available=available if product.track_inventory else None,
        is_active=product.is_active,
    )
