"""Domain service: Stock Ledger.

Inventory is accounted as an append-only list of signed movements per
product.  Available stock is the catalog's on-hand baseline plus the sum
of all movements, and a reservation may never drive it below zero.

Reservations are all-or-nothing: every line is validated (with the
product row locked) before any entry is written.
"""

from __future__ import annotations

import structlog

from checkout.domain.exceptions import EntityNotFoundError, InsufficientStockError, ValidationError
from checkout.domain.model.product import CatalogProduct
from checkout.domain.model.stock import StockLedgerEntry, StockMovementReason
from checkout.domain.port.catalog_reader import CatalogReader
from checkout.domain.repository.stock_ledger_repository import StockLedgerRepository

logger = structlog.get_logger(__name__)


class StockLedger:

    def __init__(self, entries: StockLedgerRepository, catalog: CatalogReader) -> None:
        self._entries = entries
        self._catalog = catalog

    def available(self, product_id: str) -> int:
        product = self._get_product(product_id)
        return self._available_for(product)

    def reserve(self, order_id: str, quantities: dict[str, int]) -> list[StockLedgerEntry]:
        """Reserve stock for every product in ``quantities``.

        Phase 1 locks and validates each tracked product; phase 2 writes
        one negative entry per product.  Products are locked in id order
        so two checkouts touching the same products cannot deadlock.
        """
        if not quantities:
            raise ValidationError("Nothing to reserve")

        # Phase 1: lock and validate
        to_write: list[tuple[str, int]] = []
        for product_id in sorted(quantities):
            qty = quantities[product_id]
            if qty <= 0:
                raise ValidationError("Reservation quantity must be positive")
            product = self._get_product(product_id, lock=True)
            if not product.track_inventory:
                continue
            available = self._available_for(product)
            if available < qty:
                raise InsufficientStockError(product_id, requested=qty, available=available)
            to_write.append((product_id, qty))

        # Phase 2: append
        written = []
        for product_id, qty in to_write:
            entry = StockLedgerEntry(
                product_id=product_id,
                delta=-qty,
                reason=StockMovementReason.RESERVE,
                order_id=order_id,
            )
            self._entries.add(entry)
            written.append(entry)

        logger.info("Stock reserved", order_id=order_id, products=len(written))
        return written

    def release(self, order_id: str) -> list[StockLedgerEntry]:
        """Reverse every reservation tied to the order.

        Idempotent: if the order already has release entries nothing is
        written a second time.
        """
        entries = self._entries.entries_for_order(order_id)
        if any(e.reason == StockMovementReason.RELEASE for e in entries):
            logger.info("Stock already released", order_id=order_id)
            return []

        written = []
        for entry in entries:
            if entry.reason != StockMovementReason.RESERVE:
                continue
            release = StockLedgerEntry(
                product_id=entry.product_id,
                delta=-entry.delta,
                reason=StockMovementReason.RELEASE,
                order_id=order_id,
            )
            self._entries.add(release)
            written.append(release)

        logger.info("Stock released", order_id=order_id, products=len(written))
        return written

    def restock(self, product_id: str, quantity: int) -> StockLedgerEntry:
        """Record goods received into stock."""
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        self._get_product(product_id, lock=True)
        entry = StockLedgerEntry(
            product_id=product_id,
            delta=quantity,
            reason=StockMovementReason.RESTOCK,
        )
        self._entries.add(entry)
        logger.info("Stock received", product_id=product_id, quantity=quantity)
        return entry

    # --- Internal helpers -----------------------------------------------------

    def _get_product(self, product_id: str, lock: bool = False) -> CatalogProduct:
        product = self._catalog.get_product(product_id, lock=lock)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return product

    def _available_for(self, product: CatalogProduct) -> int:
        return product.stock_quantity + self._entries.net_delta(product.id)
