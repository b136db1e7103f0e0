"""Order aggregate: owns its line items and the price breakdown.

Status changes go through the OrderStateMachine; the aggregate itself
only enforces the creation-time invariants.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from checkout.domain.exceptions import ValidationError
from checkout.domain.model.value_objects import Money, Quantity, ShippingAddress


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(Enum):
    CARD_PROCESSOR_A = "card_processor_a"
    CARD_PROCESSOR_B = "card_processor_b"
    CASH_ON_DELIVERY = "cash_on_delivery"

    @staticmethod
    def parse(raw: str) -> PaymentMethod:
        try:
            return PaymentMethod(raw)
        except ValueError:
            allowed = ", ".join(m.value for m in PaymentMethod)
            raise ValidationError(
                f"Unknown payment method '{raw}' (expected one of: {allowed})"
            ) from None


@dataclass(frozen=True)
class OrderItem:
    """Price snapshot of a product at order time. Immutable."""

    product_id: str
    quantity: Quantity
    unit_price: Money
    variant_id: str | None = None

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class PriceBreakdown:
    """Output of the pricing engine."""

    subtotal: Money
    tax: Money
    shipping: Money
    discount: Money
    total: Money


def generate_order_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.place()`` for new orders; ``__init__`` stays simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str
    order_number: str
    customer_id: str
    items: list[OrderItem]
    subtotal: Money
    tax: Money
    shipping: Money
    discount: Money
    total: Money
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    coupon_code: str | None = None
    payment_reference: str | None = None
    idempotency_key: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def place(
        customer_id: str,
        items: list[OrderItem],
        prices: PriceBreakdown,
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
        coupon_code: str | None = None,
        idempotency_key: str | None = None,
    ) -> Order:
        """Create a pending order, enforcing the money invariants."""
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        if not items:
            raise ValidationError("Order must contain at least one item")

        line_sum = Money.zero(prices.subtotal.currency)
        for item in items:
            line_sum = line_sum + item.subtotal
        if line_sum != prices.subtotal:
            raise ValidationError(
                f"Subtotal {prices.subtotal} does not match line items {line_sum}"
            )

        expected = (prices.subtotal + prices.tax + prices.shipping).subtract_clamped(
            prices.discount
        )
        if expected != prices.total:
            raise ValidationError(
                f"Total {prices.total} does not equal "
                f"subtotal + tax + shipping - discount ({expected})"
            )

        now = datetime.now(timezone.utc)
        return Order(
            id=str(uuid4()),
            order_number=generate_order_number(now),
            customer_id=customer_id.strip(),
            items=list(items),
            subtotal=prices.subtotal,
            tax=prices.tax,
            shipping=prices.shipping,
            discount=prices.discount,
            total=prices.total,
            shipping_address=shipping_address,
            payment_method=payment_method,
            coupon_code=coupon_code,
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )

    # --- Mutations allowed after shipping -------------------------------------

    def add_note(self, note: str) -> None:
        note = note.strip()
        if not note:
            return
        self.notes = f"{self.notes}\n{note}" if self.notes else note
        self.touch()

    def touch(self, at: datetime | None = None) -> None:
        self.updated_at = at or datetime.now(timezone.utc)

    # --- Computed properties --------------------------------------------------

    @property
    def reserved_quantities(self) -> dict[str, int]:
        """Total quantity per product across all lines."""
        totals: dict[str, int] = {}
        for item in self.items:
            totals[item.product_id] = totals.get(item.product_id, 0) + item.quantity.value
        return totals

    @property
    def is_terminal(self) -> bool:
        return self.status in (
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
            OrderStatus.FAILED,
        )
