"""Application service: Add Cart Item use case.

Creates the cart on first use.  The line keeps the catalog price of the
moment as a snapshot; checkout re-validates it.
"""

from __future__ import annotations

import structlog

from checkout.application.dto import CartDTO
from checkout.application.mapping import cart_to_dto
from checkout.domain.exceptions import EntityNotFoundError, InsufficientStockError, ValidationError
from checkout.domain.model.cart import Cart
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.pricing_engine import PricingEngine
from checkout.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class AddCartItemHandler:

    def __init__(self, uow: UnitOfWork, pricing: PricingEngine) -> None:
        self._uow = uow
        self._pricing = pricing

    def handle(
        self,
        customer_id: str,
        product_id: str,
        quantity: int,
        variant_id: str | None = None,
    ) -> CartDTO:
        with self._uow as uow:
            product = uow.catalog.get_product(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")
            if not product.is_active:
                raise ValidationError(f"Product '{product.name}' is not available")

            cart = uow.carts.get_by_customer(customer_id) or Cart.open(customer_id)
            item = cart.add_item(product.id, quantity, product.price, variant_id)

            if product.track_inventory:
                wanted = sum(
                    i.quantity.value for i in cart.items if i.product_id == product.id
                )
                available = StockLedger(uow.stock_entries, uow.catalog).available(product.id)
                if wanted > available:
                    raise InsufficientStockError(product.id, requested=wanted, available=available)

            uow.carts.save(cart)
            coupon = uow.coupons.get_by_code(cart.coupon_code) if cart.coupon_code else None
            uow.commit()

        logger.info(
            "Cart item added",
            customer_id=customer_id,
            product_id=product_id,
            quantity=item.quantity.value,
        )
        return cart_to_dto(cart, self._pricing, coupon)
