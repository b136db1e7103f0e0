"""Unit tests for the StockLedger domain service."""

import pytest

from checkout.domain.exceptions import EntityNotFoundError, InsufficientStockError, ValidationError
from checkout.domain.model.product import CatalogProduct
from checkout.domain.model.stock import StockLedgerEntry, StockMovementReason
from checkout.domain.model.value_objects import Money
from checkout.domain.service.stock_ledger import StockLedger
from tests.fakes import FakeCatalog, FakeStockLedgerRepository


def _setup(a_stock: int = 10, b_stock: int = 5):
    catalog = FakeCatalog([
        CatalogProduct(id="A", name="Kettle", price=Money.of("100"), stock_quantity=a_stock),
        CatalogProduct(id="B", name="Mug", price=Money.of("50"), stock_quantity=b_stock),
        CatalogProduct(
            id="GIFT", name="Gift card", price=Money.of("10"),
            stock_quantity=0, track_inventory=False,
        ),
    ])
    entries = FakeStockLedgerRepository()
    return StockLedger(entries, catalog), entries


class TestReserve:

    def test_reserve_appends_negative_entries(self):
        ledger, entries = _setup()

        written = ledger.reserve("order-1", {"A": 2, "B": 1})

        assert [(e.product_id, e.delta) for e in written] == [("A", -2), ("B", -1)]
        assert all(e.reason == StockMovementReason.RESERVE for e in written)
        assert ledger.available("A") == 8
        assert ledger.available("B") == 4

    def test_insufficient_stock_writes_nothing(self):
        ledger, entries = _setup(a_stock=1)

        with pytest.raises(InsufficientStockError) as excinfo:
            ledger.reserve("order-1", {"A": 2})

        assert excinfo.value.product_id == "A"
        assert excinfo.value.requested == 2
        assert excinfo.value.available == 1
        assert entries.entries_for_order("order-1") == []

    def test_all_or_nothing_across_products(self):
        # A is fine, B is short: A must not be reserved either
        ledger, entries = _setup(b_stock=0)

        with pytest.raises(InsufficientStockError, match="'B'"):
            ledger.reserve("order-1", {"A": 1, "B": 1})

        assert ledger.available("A") == 10

    def test_reservations_accumulate(self):
        ledger, _ = _setup(a_stock=3)
        ledger.reserve("order-1", {"A": 2})

        with pytest.raises(InsufficientStockError):
            ledger.reserve("order-2", {"A": 2})

        ledger.reserve("order-3", {"A": 1})
        assert ledger.available("A") == 0

    def test_untracked_product_skipped(self):
        ledger, entries = _setup()

        written = ledger.reserve("order-1", {"GIFT": 50, "A": 1})

        assert [e.product_id for e in written] == ["A"]

    def test_unknown_product_rejected(self):
        ledger, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="'ZZZ' not found"):
            ledger.reserve("order-1", {"ZZZ": 1})

    def test_empty_reservation_rejected(self):
        ledger, _ = _setup()
        with pytest.raises(ValidationError, match="Nothing to reserve"):
            ledger.reserve("order-1", {})


class TestRelease:

    def test_release_restores_exactly_what_was_reserved(self):
        ledger, entries = _setup()
        ledger.reserve("order-1", {"A": 3, "B": 2})

        released = ledger.release("order-1")

        assert sorted((e.product_id, e.delta) for e in released) == [("A", 3), ("B", 2)]
        assert ledger.available("A") == 10
        assert ledger.available("B") == 5

    def test_release_is_idempotent(self):
        ledger, entries = _setup()
        ledger.reserve("order-1", {"A": 3})
        ledger.release("order-1")

        assert ledger.release("order-1") == []
        assert ledger.available("A") == 10
        assert len(entries.entries_for_order("order-1")) == 2

    def test_release_without_reservation_is_noop(self):
        ledger, _ = _setup()
        assert ledger.release("order-unknown") == []


class TestRestock:

    def test_restock_raises_available(self):
        ledger, _ = _setup(a_stock=0)
        entry = ledger.restock("A", 7)

        assert entry.reason == StockMovementReason.RESTOCK
        assert entry.order_id is None
        assert ledger.available("A") == 7

    def test_restock_must_be_positive(self):
        ledger, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            ledger.restock("A", 0)


class TestLedgerEntry:

    def test_zero_delta_rejected(self):
        with pytest.raises(ValidationError, match="cannot be zero"):
            StockLedgerEntry("A", 0, StockMovementReason.RESTOCK)

    def test_positive_reservation_rejected(self):
        with pytest.raises(ValidationError, match="negative delta"):
            StockLedgerEntry("A", 2, StockMovementReason.RESERVE, order_id="o")

    def test_release_needs_order(self):
        with pytest.raises(ValidationError, match="must reference an order"):
            StockLedgerEntry("A", 2, StockMovementReason.RELEASE)
