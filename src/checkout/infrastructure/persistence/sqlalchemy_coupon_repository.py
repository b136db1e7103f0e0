"""SQLAlchemy-backed implementation of CouponRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from checkout.domain.model.coupon import Coupon, CouponType
from checkout.domain.model.value_objects import Money
from checkout.domain.repository.coupon_repository import CouponRepository
from checkout.infrastructure.persistence.database import as_utc
from checkout.infrastructure.persistence.orm import CouponRow


class SqlAlchemyCouponRepository(CouponRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_code(self, code: str) -> Coupon | None:
        row = self._session.get(CouponRow, code)
        return self._to_domain(row) if row is not None else None

    def save(self, coupon: Coupon) -> None:
        row = self._session.get(CouponRow, coupon.code)
        if row is None:
            row = CouponRow(code=coupon.code)
            self._session.add(row)
        row.type = coupon.type.value
        row.value = coupon.value
        row.starts_at = coupon.starts_at
        row.ends_at = coupon.ends_at
        row.minimum_purchase = _amount(coupon.minimum_purchase)
        row.maximum_discount = _amount(coupon.maximum_discount)
        row.usage_limit = coupon.usage_limit
        row.usage_count = coupon.usage_count
        row.is_active = coupon.is_active
        self._session.flush()

    @staticmethod
    def _to_domain(row: CouponRow) -> Coupon:
        return Coupon(
            code=row.code,
            type=CouponType(row.type),
            value=Decimal(row.value),
            starts_at=as_utc(row.starts_at),
            ends_at=as_utc(row.ends_at),
            minimum_purchase=Money(row.minimum_purchase) if row.minimum_purchase is not None else None,
            maximum_discount=Money(row.maximum_discount) if row.maximum_discount is not None else None,
            usage_limit=row.usage_limit,
            usage_count=row.usage_count,
            is_active=row.is_active,
        )


def _amount(money: Money | None) -> Decimal | None:
    return money.amount if money is not None else None
