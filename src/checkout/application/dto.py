"""Read-only views handed back by the use cases.

Ids and enums are plain strings and money is preformatted (e.g.
"320.00 TRY") so callers never touch domain objects.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CartItemDTO:

    id: str
    product_id: str
    variant_id: str | None
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    """A cart with its derived totals."""

    customer_id: str
    items: list[CartItemDTO]
    coupon_code: str | None
    item_count: int
    subtotal: str
    tax: str
    shipping: str
    discount: str
    total: str


@dataclass(frozen=True)
class OrderItemDTO:

    product_id: str
    variant_id: str | None
    quantity: int
    unit_price: str
    subtotal: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    order_number: str
    customer_id: str
    status: str
    payment_status: str
    payment_method: str
    items: list[OrderItemDTO]
    subtotal: str
    tax: str
    shipping: str
    discount: str
    total: str
    coupon_code: str | None
    notes: str | None
    created_at: str


@dataclass(frozen=True)
class OrderStatusDTO:

    order_id: str
    order_number: str
    status: str
    payment_status: str
    total_amount: str
    items: list[OrderItemDTO]
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class PaymentResultDTO:

    order_id: str
    order_number: str
    success: bool
    status: str
    payment_status: str
    transaction_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class ProductDTO:

    id: str
    name: str
    price: str
    available: int | None
    is_active: bool


@dataclass(frozen=True)
class CouponDTO:

    code: str
    type: str
    value: str
    usage_limit: int | None
    usage_count: int
