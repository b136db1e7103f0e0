"""Domain service: Order State Machine.

The only way an order's ``status`` and ``payment_status`` change.

    pending -> confirmed -> processing -> shipped -> delivered
    pending | confirmed | processing -> cancelled
    pending -> failed

``delivered``, ``cancelled`` and ``failed`` are terminal.  Payment status
moves independently (pending -> paid | failed, failed -> paid | failed)
but an order can only be confirmed once it is paid.  A declined payment
leaves the order pending so the customer can pay again or cancel.
"""

from __future__ import annotations

from datetime import datetime, timezone

from checkout.domain.exceptions import OrderStateConflictError
from checkout.domain.model.order import Order, OrderStatus, PaymentStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.CONFIRMED, OrderStatus.CANCELLED, OrderStatus.FAILED}
    ),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.FAILED: frozenset(),
}

CANCELLABLE = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
)


class OrderStateMachine:

    def can_transition(self, current: OrderStatus, target: OrderStatus) -> bool:
        return target in TRANSITIONS[current]

    def transition(self, order: Order, target: OrderStatus, at: datetime | None = None) -> None:
        """Move the order to ``target`` or raise without touching it."""
        if not self.can_transition(order.status, target):
            raise OrderStateConflictError(order.status.value, target.value)
        if target == OrderStatus.CONFIRMED and order.payment_status != PaymentStatus.PAID:
            raise OrderStateConflictError(
                order.status.value,
                target.value,
                f"payment is {order.payment_status.value}, must be paid",
            )

        at = at or datetime.now(timezone.utc)
        order.status = target
        if target == OrderStatus.SHIPPED:
            order.shipped_at = at
        elif target == OrderStatus.DELIVERED:
            order.delivered_at = at
        elif target == OrderStatus.CANCELLED:
            order.cancelled_at = at
        order.touch(at)

    def record_payment_success(self, order: Order, reference: str | None = None) -> None:
        """pending/(pending|failed) -> confirmed/paid."""
        self._assert_payment_open(order, PaymentStatus.PAID)
        if not self.can_transition(order.status, OrderStatus.CONFIRMED):
            raise OrderStateConflictError(order.status.value, OrderStatus.CONFIRMED.value)
        order.payment_status = PaymentStatus.PAID
        order.payment_reference = reference
        self.transition(order, OrderStatus.CONFIRMED)

    def record_payment_failure(self, order: Order) -> None:
        """pending/(pending|failed) -> pending/failed. The order stays payable."""
        self._assert_payment_open(order, PaymentStatus.FAILED)
        if order.status != OrderStatus.PENDING:
            raise OrderStateConflictError(order.status.value, "payment failed")
        order.payment_status = PaymentStatus.FAILED
        order.touch()

    def cancel(self, order: Order, reason: str | None = None) -> None:
        if order.status not in CANCELLABLE:
            raise OrderStateConflictError(order.status.value, OrderStatus.CANCELLED.value)
        self.transition(order, OrderStatus.CANCELLED)
        if reason:
            order.add_note(f"Cancelled: {reason}")

    def assert_payable(self, order: Order) -> None:
        """Guard against charging an order twice."""
        self._assert_payment_open(order, PaymentStatus.PAID)
        if order.status != OrderStatus.PENDING:
            raise OrderStateConflictError(order.status.value, OrderStatus.CONFIRMED.value)

    @staticmethod
    def _assert_payment_open(order: Order, target: PaymentStatus) -> None:
        if order.payment_status == PaymentStatus.PAID:
            raise OrderStateConflictError(
                f"payment {order.payment_status.value}",
                f"payment {target.value}",
                "payment has already been processed",
            )
