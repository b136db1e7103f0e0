"""Application service: Create Order use case (checkout).

Turns the customer's cart into a pending order inside one transaction:
prices are re-read from the catalog, totals computed, stock reserved,
the order and its ``order.created`` outbox event written, and the cart
cleared.  Any failure before commit leaves nothing behind.

Payment is not taken here; see ProcessPaymentHandler.
"""

from __future__ import annotations

import structlog

from checkout.application import events
from checkout.application.dto import OrderDTO
from checkout.application.mapping import order_to_dto
from checkout.domain.exceptions import (
    DuplicateOrderError,
    EmptyCartError,
    EntityNotFoundError,
    ValidationError,
)
from checkout.domain.model.cart import Cart
from checkout.domain.model.order import Order, OrderItem, PaymentMethod
from checkout.domain.model.value_objects import ShippingAddress
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.pricing_engine import PricedLine, PricingEngine
from checkout.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        pricing: PricingEngine,
        redeem_coupons: bool = False,
    ) -> None:
        self._uow = uow
        self._pricing = pricing
        self._redeem_coupons = redeem_coupons

    def handle(
        self,
        customer_id: str,
        shipping_address: ShippingAddress | dict,
        payment_method: PaymentMethod | str,
        coupon_code: str | None = None,
        idempotency_key: str | None = None,
    ) -> OrderDTO:
        """Place an order from the customer's cart.

        Steps:
        1. Load the cart (fail if empty).
        2. Re-validate every line against the catalog (current price wins).
        3. Price the order and reserve stock.
        4. Persist order + ``order.created`` event, clear the cart, commit.

        A retry that races the first call past the idempotency lookup
        loses on the unique key and gets the winner's order back.
        """
        if isinstance(shipping_address, dict):
            shipping_address = ShippingAddress.from_dict(shipping_address)
        if not isinstance(payment_method, PaymentMethod):
            payment_method = PaymentMethod.parse(payment_method)

        try:
            return self._place(
                customer_id, shipping_address, payment_method, coupon_code, idempotency_key
            )
        except DuplicateOrderError:
            with self._uow as uow:
                existing = uow.orders.get_by_idempotency_key(customer_id, idempotency_key)
            if existing is None:
                raise
            logger.info(
                "Returning order placed by concurrent checkout",
                order_id=existing.id,
                idempotency_key=idempotency_key,
            )
            return order_to_dto(existing)

    # --- Internal helpers -----------------------------------------------------

    def _place(
        self,
        customer_id: str,
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        coupon_code: str | None,
        idempotency_key: str | None,
    ) -> OrderDTO:
        with self._uow as uow:
            if idempotency_key:
                existing = uow.orders.get_by_idempotency_key(customer_id, idempotency_key)
                if existing is not None:
                    logger.info(
                        "Returning order for repeated checkout",
                        order_id=existing.id,
                        idempotency_key=idempotency_key,
                    )
                    return order_to_dto(existing)

            cart = uow.carts.get_by_customer(customer_id)
            if cart is None or cart.is_empty:
                raise EmptyCartError(customer_id)

            items = self._revalidate(uow, cart)
            code = coupon_code or cart.coupon_code
            coupon = uow.coupons.get_by_code(code) if code else None

            prices = self._pricing.price(
                [
                    PricedLine(i.product_id, i.quantity.value, i.unit_price)
                    for i in items
                ],
                coupon=coupon,
                coupon_code=code,
            )

            order = Order.place(
                customer_id=customer_id,
                items=items,
                prices=prices,
                shipping_address=shipping_address,
                payment_method=payment_method,
                coupon_code=code,
                idempotency_key=idempotency_key,
            )

            StockLedger(uow.stock_entries, uow.catalog).reserve(
                order.id, order.reserved_quantities
            )

            if coupon is not None and self._redeem_coupons:
                coupon.redeem()
                uow.coupons.save(coupon)

            uow.orders.save(order)
            uow.outbox.add(events.order_created(order))

            cart.clear()
            uow.carts.save(cart)
            uow.commit()

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            total=str(order.total),
        )
        return order_to_dto(order)

    @staticmethod
    def _revalidate(uow: UnitOfWork, cart: Cart) -> list[OrderItem]:
        items: list[OrderItem] = []
        for line in cart.items:
            product = uow.catalog.get_product(line.product_id)
            if product is None:
                raise EntityNotFoundError(f"Product '{line.product_id}' not found")
            if not product.is_active:
                raise ValidationError(f"Product '{product.name}' is no longer available")

            if product.price != line.unit_price:
                logger.info(
                    "Cart price refreshed from catalog",
                    product_id=product.id,
                    cart_price=str(line.unit_price),
                    catalog_price=str(product.price),
                )

            items.append(
                OrderItem(
                    product_id=product.id,
                    quantity=line.quantity,
                    unit_price=product.price,  # <-- price snapshot
                    variant_id=line.variant_id,
                )
            )
        return items
