"""SQLAlchemy-backed implementation of StockLedgerRepository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from checkout.domain.model.stock import StockLedgerEntry, StockMovementReason
from checkout.domain.repository.stock_ledger_repository import StockLedgerRepository
from checkout.infrastructure.persistence.database import as_utc
from checkout.infrastructure.persistence.orm import StockLedgerEntryRow


class SqlAlchemyStockLedgerRepository(StockLedgerRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, entry: StockLedgerEntry) -> None:
        self._session.add(
            StockLedgerEntryRow(
                product_id=entry.product_id,
                delta=entry.delta,
                reason=entry.reason.value,
                order_id=entry.order_id,
                created_at=entry.created_at,
            )
        )
        self._session.flush()

    def entries_for_order(self, order_id: str) -> list[StockLedgerEntry]:
        rows = self._session.scalars(
            select(StockLedgerEntryRow)
            .where(StockLedgerEntryRow.order_id == order_id)
            .order_by(StockLedgerEntryRow.id)
        ).all()
        return [
            StockLedgerEntry(
                product_id=row.product_id,
                delta=row.delta,
                reason=StockMovementReason(row.reason),
                order_id=row.order_id,
                created_at=as_utc(row.created_at),
            )
            for row in rows
        ]

    def net_delta(self, product_id: str) -> int:
        total = self._session.scalar(
            select(func.coalesce(func.sum(StockLedgerEntryRow.delta), 0)).where(
                StockLedgerEntryRow.product_id == product_id
            )
        )
        return int(total)
