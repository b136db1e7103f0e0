"""Domain service: Pricing Engine.

Pure computation of subtotal, tax, shipping, coupon discount and total
for a set of line items.  No repository access and no side effects; the
caller looks the coupon up and hands it in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from checkout.domain.exceptions import CouponInvalidError, CouponRejection, ValidationError
from checkout.domain.model.coupon import Coupon, CouponType
from checkout.domain.model.order import PriceBreakdown
from checkout.domain.model.value_objects import DEFAULT_CURRENCY, Money


@dataclass(frozen=True)
class PricingPolicy:
    """Shop-wide pricing constants."""

    vat_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("500")
    flat_shipping: Decimal = Decimal("25")
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if self.vat_rate < 0 or self.free_shipping_threshold < 0 or self.flat_shipping < 0:
            raise ValidationError("Pricing constants cannot be negative")


@dataclass(frozen=True)
class PricedLine:
    """What the engine needs from a line item."""

    product_id: str
    quantity: int
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


class PricingEngine:

    def __init__(self, policy: PricingPolicy | None = None) -> None:
        self._policy = policy or PricingPolicy()

    @property
    def policy(self) -> PricingPolicy:
        return self._policy

    def price(
        self,
        lines: list[PricedLine],
        coupon: Coupon | None = None,
        coupon_code: str | None = None,
        now: datetime | None = None,
    ) -> PriceBreakdown:
        """Compute the full breakdown.

        If ``coupon_code`` is given but ``coupon`` is None the code did not
        resolve to a coupon and CouponInvalidError(NOT_FOUND) is raised.
        """
        now = now or datetime.now(timezone.utc)
        subtotal = self.subtotal(lines)
        tax = subtotal.scaled(self._policy.vat_rate)
        shipping = self.shipping_for(subtotal)

        discount = Money.zero(self._policy.currency)
        if coupon is not None:
            self.validate_coupon(coupon, subtotal, now)
            discount = self.discount_for(coupon, subtotal)
        elif coupon_code:
            raise CouponInvalidError(coupon_code, CouponRejection.NOT_FOUND)

        total = (subtotal + tax + shipping).subtract_clamped(discount)
        return PriceBreakdown(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            discount=discount,
            total=total,
        )

    def subtotal(self, lines: list[PricedLine]) -> Money:
        result = Money.zero(self._policy.currency)
        for line in lines:
            result = result + line.line_total
        return result

    def shipping_for(self, subtotal: Money) -> Money:
        if subtotal.amount > self._policy.free_shipping_threshold:
            return Money.zero(self._policy.currency)
        return Money(self._policy.flat_shipping, self._policy.currency)

    def validate_coupon(self, coupon: Coupon, subtotal: Money, now: datetime) -> None:
        """Raise CouponInvalidError if the coupon cannot be used right now."""
        if not coupon.is_active:
            raise CouponInvalidError(coupon.code, CouponRejection.NOT_FOUND, "inactive")
        if not coupon.is_within_window(now):
            raise CouponInvalidError(coupon.code, CouponRejection.EXPIRED)
        if coupon.is_exhausted:
            raise CouponInvalidError(
                coupon.code,
                CouponRejection.EXHAUSTED,
                f"used {coupon.usage_count} of {coupon.usage_limit}",
            )
        if coupon.minimum_purchase is not None and subtotal < coupon.minimum_purchase:
            raise CouponInvalidError(
                coupon.code,
                CouponRejection.BELOW_MINIMUM,
                f"minimum purchase is {coupon.minimum_purchase}",
            )

    def discount_for(self, coupon: Coupon, subtotal: Money) -> Money:
        if coupon.type == CouponType.PERCENTAGE:
            discount = subtotal.scaled(coupon.value / Decimal("100"))
            if coupon.maximum_discount is not None and discount > coupon.maximum_discount:
                discount = coupon.maximum_discount
        else:
            discount = Money(coupon.value, subtotal.currency)

        # Never discount more than the goods are worth
        if discount > subtotal:
            discount = subtotal
        return discount
