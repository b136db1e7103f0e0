"""Integration tests for the AdvanceOrder and GetOrderStatus use cases."""

import pytest

from checkout.application.advance_order import AdvanceOrderHandler
from checkout.application.create_order import CreateOrderHandler
from checkout.application.process_payment import ProcessPaymentHandler
from checkout.application.show_order import GetOrderStatusHandler
from checkout.domain.exceptions import EntityNotFoundError, OrderStateConflictError, ValidationError
from checkout.domain.model.order import OrderStatus, PaymentMethod
from checkout.domain.model.product import CatalogProduct
from checkout.domain.model.value_objects import Money
from checkout.domain.service.pricing_engine import PricingEngine
from tests.fakes import FakeDatabase, FakeNotifier, FakePaymentGateway, FakeUnitOfWork, seed_cart

ADDRESS = {
    "first_name": "Ayse",
    "last_name": "Yilmaz",
    "address1": "Istiklal Cd. 1",
    "city": "Istanbul",
    "zip_code": "34430",
    "country": "TR",
}


def _setup(paid: bool = True):
    db = FakeDatabase([
        CatalogProduct(id="A", name="Kettle", price=Money.of("100"), stock_quantity=10),
    ])
    seed_cart(db, "cust-1", [("A", 1)])
    order = CreateOrderHandler(FakeUnitOfWork(db), PricingEngine()).handle(
        "cust-1", ADDRESS, PaymentMethod.CASH_ON_DELIVERY
    )
    if paid:
        ProcessPaymentHandler(
            FakeUnitOfWork(db),
            gateways={PaymentMethod.CASH_ON_DELIVERY: FakePaymentGateway()},
            notifier=FakeNotifier(),
        ).handle(order.id)
    return db, order.id, AdvanceOrderHandler(FakeUnitOfWork(db))


class TestAdvanceOrder:

    def test_full_fulfillment_path(self):
        db, order_id, handler = _setup()

        handler.handle(order_id, "processing")
        handler.handle(order_id, OrderStatus.SHIPPED, note="Tracking 1Z999")
        dto = handler.handle(order_id, "delivered")

        assert dto.status == "delivered"
        assert "Tracking 1Z999" in dto.notes
        order = db.orders[order_id]
        assert order.shipped_at is not None
        assert order.delivered_at is not None
        assert [e.event_type for e in db.events()][-3:] == [
            "order.processing",
            "order.shipped",
            "order.delivered",
        ]

    def test_pending_order_cannot_be_processed(self):
        db, order_id, handler = _setup(paid=False)

        with pytest.raises(OrderStateConflictError, match="pending -> processing"):
            handler.handle(order_id, "processing")
        assert db.orders[order_id].status == OrderStatus.PENDING

    def test_skipping_a_step_rejected(self):
        db, order_id, handler = _setup()

        with pytest.raises(OrderStateConflictError, match="confirmed -> shipped"):
            handler.handle(order_id, "shipped")

    def test_delivered_is_terminal(self):
        db, order_id, handler = _setup()
        for status in ("processing", "shipped", "delivered"):
            handler.handle(order_id, status)

        with pytest.raises(OrderStateConflictError, match="delivered -> processing"):
            handler.handle(order_id, "processing")
        assert db.orders[order_id].status == OrderStatus.DELIVERED

    @pytest.mark.parametrize("target", ["confirmed", "cancelled", "failed"])
    def test_non_fulfillment_targets_rejected(self, target):
        _, order_id, handler = _setup()
        with pytest.raises(ValidationError, match="can only be advanced to"):
            handler.handle(order_id, target)

    def test_unknown_status_rejected(self):
        _, order_id, handler = _setup()
        with pytest.raises(ValidationError, match="Unknown order status 'teleported'"):
            handler.handle(order_id, "teleported")


class TestGetOrderStatus:

    def test_status_view(self):
        db, order_id, _ = _setup()

        dto = GetOrderStatusHandler(FakeUnitOfWork(db)).handle(order_id)

        assert dto.order_id == order_id
        assert dto.status == "confirmed"
        assert dto.payment_status == "paid"
        assert dto.total_amount == "143.00 TRY"
        assert [(i.product_id, i.quantity) for i in dto.items] == [("A", 1)]

    def test_unknown_order(self):
        with pytest.raises(EntityNotFoundError):
            GetOrderStatusHandler(FakeUnitOfWork()).handle("missing")
