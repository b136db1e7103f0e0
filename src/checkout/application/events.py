"""Outbox event builders for the order aggregate.

Payloads are plain JSON: ids and formatted decimals as strings.
"""

from __future__ import annotations

from checkout.domain.model.order import Order
from checkout.domain.model.outbox import OutboxEvent

ORDER = "order"
PAYMENT = "payment"


def _amount(order: Order, field: str) -> str:
    return str(getattr(order, field).amount)


def order_created(order: Order) -> OutboxEvent:
    return OutboxEvent.record(ORDER, order.id, "order.created", {
        "order_id": order.id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "items": [
            {
                "product_id": item.product_id,
                "variant_id": item.variant_id,
                "quantity": item.quantity.value,
                "unit_price": str(item.unit_price.amount),
            }
            for item in order.items
        ],
        "subtotal": _amount(order, "subtotal"),
        "tax": _amount(order, "tax"),
        "shipping": _amount(order, "shipping"),
        "discount": _amount(order, "discount"),
        "total": _amount(order, "total"),
        "currency": order.total.currency,
        "coupon_code": order.coupon_code,
        "payment_method": order.payment_method.value,
    })


def order_confirmed(order: Order) -> OutboxEvent:
    return OutboxEvent.record(ORDER, order.id, "order.confirmed", {
        "order_id": order.id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "payment_reference": order.payment_reference,
        "total": _amount(order, "total"),
    })


def order_payment_failed(order: Order, error: str) -> OutboxEvent:
    return OutboxEvent.record(ORDER, order.id, "order.payment_failed", {
        "order_id": order.id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "error": error,
    })


def order_cancelled(order: Order, reason: str | None) -> OutboxEvent:
    return OutboxEvent.record(ORDER, order.id, "order.cancelled", {
        "order_id": order.id,
        "order_number": order.order_number,
        "customer_id": order.customer_id,
        "reason": reason,
        "released": order.reserved_quantities,
    })


def refund_requested(order: Order, reason: str | None) -> OutboxEvent:
    return OutboxEvent.record(PAYMENT, order.id, "refund.requested", {
        "order_id": order.id,
        "order_number": order.order_number,
        "payment_method": order.payment_method.value,
        "payment_reference": order.payment_reference,
        "amount": _amount(order, "total"),
        "currency": order.total.currency,
        "reason": reason,
    })


def order_status_changed(order: Order) -> OutboxEvent:
    return OutboxEvent.record(ORDER, order.id, f"order.{order.status.value}", {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status.value,
    })
