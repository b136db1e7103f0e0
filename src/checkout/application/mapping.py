"""Domain -> DTO mapping shared by the handlers."""

from __future__ import annotations

from checkout.application.dto import (
    CartDTO,
    CartItemDTO,
    OrderDTO,
    OrderItemDTO,
    OrderStatusDTO,
)
from checkout.domain.exceptions import CouponInvalidError
from checkout.domain.model.cart import Cart
from checkout.domain.model.coupon import Coupon
from checkout.domain.model.order import Order, PriceBreakdown
from checkout.domain.service.pricing_engine import PricedLine, PricingEngine

_TIME_FORMAT = "%Y-%m-%d %H:%M UTC"


def priced_lines(cart: Cart) -> list[PricedLine]:
    return [
        PricedLine(
            product_id=item.product_id,
            quantity=item.quantity.value,
            unit_price=item.unit_price,
        )
        for item in cart.items
    ]


def cart_to_dto(cart: Cart, pricing: PricingEngine, coupon: Coupon | None) -> CartDTO:
    """Map a cart, deriving totals.

    A stored coupon that no longer applies simply contributes no discount
    here; checkout is where it gets rejected.
    """
    lines = priced_lines(cart)
    try:
        prices = pricing.price(lines, coupon)
    except CouponInvalidError:
        prices = pricing.price(lines)
    return CartDTO(
        customer_id=cart.customer_id,
        items=[
            CartItemDTO(
                id=item.id,
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in cart.items
        ],
        coupon_code=cart.coupon_code,
        item_count=cart.item_count,
        **_breakdown(prices),
    )


def _breakdown(prices: PriceBreakdown) -> dict[str, str]:
    return {
        "subtotal": str(prices.subtotal),
        "tax": str(prices.tax),
        "shipping": str(prices.shipping),
        "discount": str(prices.discount),
        "total": str(prices.total),
    }


def _items(order: Order) -> list[OrderItemDTO]:
    return [
        OrderItemDTO(
            product_id=item.product_id,
            variant_id=item.variant_id,
            quantity=item.quantity.value,
            unit_price=str(item.unit_price),
            subtotal=str(item.subtotal),
        )
        for item in order.items
    ]


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        order_number=order.order_number,
        customer_id=order.customer_id,
        status=order.status.value,
        payment_status=order.payment_status.value,
        payment_method=order.payment_method.value,
        items=_items(order),
        subtotal=str(order.subtotal),
        tax=str(order.tax),
        shipping=str(order.shipping),
        discount=str(order.discount),
        total=str(order.total),
        coupon_code=order.coupon_code,
        notes=order.notes,
        created_at=order.created_at.strftime(_TIME_FORMAT),
    )


def order_to_status_dto(order: Order) -> OrderStatusDTO:
    return OrderStatusDTO(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status.value,
        payment_status=order.payment_status.value,
        total_amount=str(order.total),
        items=_items(order),
        created_at=order.created_at.strftime(_TIME_FORMAT),
        updated_at=order.updated_at.strftime(_TIME_FORMAT),
    )
