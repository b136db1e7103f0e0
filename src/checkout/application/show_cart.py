"""Application service: Show Cart use case (query)."""

from __future__ import annotations

from checkout.application.dto import CartDTO
from checkout.application.mapping import cart_to_dto
from checkout.domain.model.cart import Cart
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.pricing_engine import PricingEngine


class ShowCartHandler:

    def __init__(self, uow: UnitOfWork, pricing: PricingEngine) -> None:
        self._uow = uow
        self._pricing = pricing

    def handle(self, customer_id: str) -> CartDTO:
        """Return the cart with derived totals; an empty one if none exists."""
        with self._uow as uow:
            cart = uow.carts.get_by_customer(customer_id) or Cart.open(customer_id)
            coupon = uow.coupons.get_by_code(cart.coupon_code) if cart.coupon_code else None
            return cart_to_dto(cart, self._pricing, coupon)
