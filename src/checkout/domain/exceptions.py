"""Checkout errors.

Everything a caller may be expected to handle derives from
DomainException; the CLI turns any of them into a one-line error.
"""

from __future__ import annotations

from enum import Enum


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed input, or a business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class EmptyCartError(DomainException):
    """Checkout was attempted with no items in the cart."""

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Cart for customer '{customer_id}' is empty")
        self.customer_id = customer_id


class DuplicateOrderError(DomainException):
    """Another checkout already placed an order under this idempotency key."""

    def __init__(self, customer_id: str, idempotency_key: str) -> None:
        super().__init__(
            f"Order for customer '{customer_id}' with key '{idempotency_key}' already exists"
        )
        self.customer_id = customer_id
        self.idempotency_key = idempotency_key


class InsufficientStockError(DomainException):
    """Not enough available stock to satisfy a requested quantity."""

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for product '{product_id}' "
            f"(requested {requested}, available {available})"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class CouponRejection(Enum):
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    BELOW_MINIMUM = "below-minimum"
    NOT_FOUND = "not-found"


class CouponInvalidError(DomainException):
    """A coupon failed one of its validity rules."""

    def __init__(self, code: str, reason: CouponRejection, detail: str = "") -> None:
        message = f"Coupon '{code}' rejected: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.code = code
        self.reason = reason


class OrderStateConflictError(DomainException):
    """The requested transition is not legal from the current state."""

    def __init__(self, current: str, requested: str, detail: str = "") -> None:
        message = f"Illegal transition {current} -> {requested}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.current = current
        self.requested = requested


class PaymentDeclinedError(DomainException):
    """The payment provider refused the charge; the order stays payable."""

    def __init__(self, order_id: str, message: str) -> None:
        super().__init__(f"Payment for order {order_id} declined: {message}")
        self.order_id = order_id
        self.reason = message


class PaymentGatewayTimeoutError(DomainException):
    """The provider did not answer in time or answered 5xx. Retryable.

    The charge may still have gone through upstream, so the order is left
    untouched for reconciliation.
    """

    def __init__(self, order_id: str, detail: str = "") -> None:
        message = f"Payment gateway unavailable for order {order_id}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.order_id = order_id


class OutboxPublishError(DomainException):
    """The message broker did not accept an outbox event."""
