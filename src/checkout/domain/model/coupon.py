"""Coupon definition used by the pricing engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from checkout.domain.exceptions import ValidationError
from checkout.domain.model.value_objects import Money


class CouponType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class Coupon:
    """A discount code.

    ``value`` is a percentage (0-100] for PERCENTAGE coupons and an
    absolute amount for FIXED ones.  ``usage_limit`` of None means
    unlimited.
    """

    code: str
    type: CouponType
    value: Decimal
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    minimum_purchase: Money | None = None
    maximum_discount: Money | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    is_active: bool = True

    def __post_init__(self) -> None:
        if not self.code or not self.code.strip():
            raise ValidationError("Coupon code is required")
        if self.value <= Decimal("0"):
            raise ValidationError("Coupon value must be positive")
        if self.type == CouponType.PERCENTAGE and self.value > Decimal("100"):
            raise ValidationError("Percentage coupon cannot exceed 100")
        if self.starts_at and self.ends_at and self.ends_at < self.starts_at:
            raise ValidationError("Coupon ends before it starts")
        if self.usage_limit is not None and self.usage_limit < 0:
            raise ValidationError("Coupon usage limit cannot be negative")

    def is_within_window(self, at: datetime) -> bool:
        if self.starts_at is not None and at < self.starts_at:
            return False
        if self.ends_at is not None and at > self.ends_at:
            return False
        return True

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit

    def redeem(self) -> None:
        """Count one use of the coupon."""
        if self.is_exhausted:
            raise ValidationError(f"Coupon '{self.code}' has no uses left")
        self.usage_count += 1
