"""Application service: define a coupon."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import structlog

from checkout.application.dto import CouponDTO
from checkout.application.manage_catalog import parse_amount
from checkout.domain.exceptions import ValidationError
from checkout.domain.model.coupon import Coupon, CouponType
from checkout.domain.model.value_objects import DEFAULT_CURRENCY, Money
from checkout.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class AddCouponHandler:

    def __init__(self, uow: UnitOfWork, currency: str = DEFAULT_CURRENCY) -> None:
        self._uow = uow
        self._currency = currency

    def handle(
        self,
        code: str,
        coupon_type: CouponType | str,
        value: Decimal | str,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
        minimum_purchase: Decimal | str | None = None,
        maximum_discount: Decimal | str | None = None,
        usage_limit: int | None = None,
    ) -> CouponDTO:
        if not isinstance(coupon_type, CouponType):
            try:
                coupon_type = CouponType(coupon_type)
            except ValueError:
                raise ValidationError(f"Unknown coupon type '{coupon_type}'") from None

        coupon = Coupon(
            code=code.strip() if code else "",
            type=coupon_type,
            value=parse_amount(value, "Coupon value"),
            starts_at=_utc(starts_at),
            ends_at=_utc(ends_at),
            minimum_purchase=self._money(minimum_purchase, "Minimum purchase"),
            maximum_discount=self._money(maximum_discount, "Maximum discount"),
            usage_limit=usage_limit,
        )

        with self._uow as uow:
            if uow.coupons.get_by_code(coupon.code) is not None:
                raise ValidationError(f"Coupon '{coupon.code}' already exists")
            uow.coupons.save(coupon)
            uow.commit()

        logger.info("Coupon added", code=coupon.code, type=coupon.type.value)
        return CouponDTO(
            code=coupon.code,
            type=coupon.type.value,
            value=str(coupon.value),
            usage_limit=coupon.usage_limit,
            usage_count=coupon.usage_count,
        )

    def _money(self, raw: Decimal | str | None, label: str) -> Money | None:
        if raw is None:
            return None
        return Money(parse_amount(raw, label), self._currency)


def _utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
