"""SQLAlchemy implementation of the UnitOfWork: one Session per block."""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.infrastructure.persistence.sqlalchemy_cart_repository import SqlAlchemyCartRepository
from checkout.infrastructure.persistence.sqlalchemy_catalog import SqlAlchemyCatalog
from checkout.infrastructure.persistence.sqlalchemy_coupon_repository import (
    SqlAlchemyCouponRepository,
)
from checkout.infrastructure.persistence.sqlalchemy_order_repository import (
    SqlAlchemyOrderRepository,
)
from checkout.infrastructure.persistence.sqlalchemy_outbox_repository import (
    SqlAlchemyOutboxRepository,
)
from checkout.infrastructure.persistence.sqlalchemy_stock_ledger_repository import (
    SqlAlchemyStockLedgerRepository,
)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self._session_factory()
        self.carts = SqlAlchemyCartRepository(self._session)
        self.orders = SqlAlchemyOrderRepository(self._session)
        self.coupons = SqlAlchemyCouponRepository(self._session)
        self.catalog = SqlAlchemyCatalog(self._session)
        self.stock_entries = SqlAlchemyStockLedgerRepository(self._session)
        self.outbox = SqlAlchemyOutboxRepository(self._session)
        return self

    def __exit__(self, *args) -> None:
        super().__exit__(*args)
        self._session.close()
        self._session = None

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
