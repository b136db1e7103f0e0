"""Unit of Work: the transaction boundary every use case runs inside.

Repositories handed out by a unit of work share its transaction.  Leaving
the ``with`` block without calling ``commit()`` rolls everything back, so
a use case that raises half-way never leaves partial state behind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from checkout.domain.repository.cart_repository import CartRepository
from checkout.domain.repository.catalog_repository import CatalogRepository
from checkout.domain.repository.coupon_repository import CouponRepository
from checkout.domain.repository.order_repository import OrderRepository
from checkout.domain.repository.outbox_repository import OutboxRepository
from checkout.domain.repository.stock_ledger_repository import StockLedgerRepository


class UnitOfWork(ABC):

    carts: CartRepository
    orders: OrderRepository
    coupons: CouponRepository
    catalog: CatalogRepository
    stock_entries: StockLedgerRepository
    outbox: OutboxRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, *args) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change in this unit of work durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard uncommitted changes. A no-op after ``commit()``."""
