"""Application service: change or remove a cart line."""

from __future__ import annotations

from checkout.application.dto import CartDTO
from checkout.application.mapping import cart_to_dto
from checkout.domain.exceptions import EntityNotFoundError, InsufficientStockError
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.pricing_engine import PricingEngine
from checkout.domain.service.stock_ledger import StockLedger


class UpdateCartItemHandler:

    def __init__(self, uow: UnitOfWork, pricing: PricingEngine) -> None:
        self._uow = uow
        self._pricing = pricing

    def handle(self, customer_id: str, item_id: str, quantity: int) -> CartDTO:
        """Set a line's quantity. Zero removes the line."""
        with self._uow as uow:
            cart = uow.carts.get_by_customer(customer_id)
            if cart is None:
                raise EntityNotFoundError(f"No cart for customer '{customer_id}'")

            cart.update_quantity(item_id, quantity)

            if quantity > 0:
                product_id = next(i.product_id for i in cart.items if i.id == item_id)
                product = uow.catalog.get_product(product_id)
                if product is not None and product.track_inventory:
                    wanted = sum(
                        i.quantity.value for i in cart.items if i.product_id == product_id
                    )
                    available = StockLedger(uow.stock_entries, uow.catalog).available(product_id)
                    if wanted > available:
                        raise InsufficientStockError(product_id, requested=wanted, available=available)

            uow.carts.save(cart)
            coupon = uow.coupons.get_by_code(cart.coupon_code) if cart.coupon_code else None
            uow.commit()

        return cart_to_dto(cart, self._pricing, coupon)
