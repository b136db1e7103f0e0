"""Application service: attach or detach a coupon on the cart."""

from __future__ import annotations

import structlog

from checkout.application.dto import CartDTO
from checkout.application.mapping import cart_to_dto, priced_lines
from checkout.domain.exceptions import EntityNotFoundError
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.pricing_engine import PricingEngine

logger = structlog.get_logger(__name__)


class ApplyCouponHandler:

    def __init__(self, uow: UnitOfWork, pricing: PricingEngine) -> None:
        self._uow = uow
        self._pricing = pricing

    def handle(self, customer_id: str, code: str) -> CartDTO:
        """Validate the coupon against the current cart, then store it.

        Raises CouponInvalidError with the failing rule.
        """
        with self._uow as uow:
            cart = uow.carts.get_by_customer(customer_id)
            if cart is None:
                raise EntityNotFoundError(f"No cart for customer '{customer_id}'")

            coupon = uow.coupons.get_by_code(code)
            self._pricing.price(priced_lines(cart), coupon=coupon, coupon_code=code)

            cart.apply_coupon(code)
            uow.carts.save(cart)
            uow.commit()

        logger.info("Coupon applied", customer_id=customer_id, coupon_code=code)
        return cart_to_dto(cart, self._pricing, coupon)


class RemoveCouponHandler:

    def __init__(self, uow: UnitOfWork, pricing: PricingEngine) -> None:
        self._uow = uow
        self._pricing = pricing

    def handle(self, customer_id: str) -> CartDTO:
        with self._uow as uow:
            cart = uow.carts.get_by_customer(customer_id)
            if cart is None:
                raise EntityNotFoundError(f"No cart for customer '{customer_id}'")
            cart.remove_coupon()
            uow.carts.save(cart)
            uow.commit()

        return cart_to_dto(cart, self._pricing, None)
