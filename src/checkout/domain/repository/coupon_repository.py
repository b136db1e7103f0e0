"""Abstract repository for coupons."""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.model.coupon import Coupon


class CouponRepository(ABC):

    @abstractmethod
    def get_by_code(self, code: str) -> Coupon | None:
        """Return a coupon by its code, or None."""

    @abstractmethod
    def save(self, coupon: Coupon) -> None:
        """Persist a new or updated coupon."""
