"""Integration tests for the ProcessPayment use case."""

import threading
import time

import pytest

from checkout.application.create_order import CreateOrderHandler
from checkout.application.cancel_order import CancelOrderHandler
from checkout.application.process_payment import ProcessPaymentHandler
from checkout.domain.exceptions import (
    EntityNotFoundError,
    OrderStateConflictError,
    PaymentDeclinedError,
    PaymentGatewayTimeoutError,
    ValidationError,
)
from checkout.domain.model.order import OrderStatus, PaymentMethod, PaymentStatus
from checkout.domain.model.product import CatalogProduct
from checkout.domain.model.value_objects import Money
from checkout.domain.port.payment_gateway import PaymentResult
from checkout.domain.service.pricing_engine import PricingEngine
from checkout.infrastructure.payments.card_processor import InMemoryCardProcessor
from tests.fakes import (
    FakeDatabase,
    FakeNotifier,
    FakePaymentGateway,
    FakeUnitOfWork,
    seed_cart,
)

ADDRESS = {
    "first_name": "Ayse",
    "last_name": "Yilmaz",
    "address1": "Istiklal Cd. 1",
    "city": "Istanbul",
    "zip_code": "34430",
    "country": "TR",
}


def _setup(gateway=None, notifier=None, timeout: float = 5.0):
    db = FakeDatabase([
        CatalogProduct(id="A", name="Kettle", price=Money.of("100"), stock_quantity=10),
    ])
    seed_cart(db, "cust-1", [("A", 2)])
    order = CreateOrderHandler(FakeUnitOfWork(db), PricingEngine()).handle(
        "cust-1", ADDRESS, PaymentMethod.CARD_PROCESSOR_A
    )
    gateway = gateway or FakePaymentGateway()
    notifier = notifier or FakeNotifier()
    handler = ProcessPaymentHandler(
        FakeUnitOfWork(db),
        gateways={PaymentMethod.CARD_PROCESSOR_A: gateway},
        notifier=notifier,
        timeout=timeout,
    )
    return db, order.id, handler, gateway, notifier


class TestPaymentApproved:

    def test_confirms_order(self):
        db, order_id, handler, gateway, notifier = _setup()

        result = handler.handle(order_id, {"card_number": "4111111111111111"})

        assert result.success
        assert result.status == "confirmed"
        assert result.payment_status == "paid"
        assert result.transaction_id == "txn_1"
        order = db.orders[order_id]
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_reference == "txn_1"

    def test_gateway_receives_order_total(self):
        db, order_id, handler, gateway, _ = _setup()

        handler.handle(order_id, {"card_number": "4111111111111111"})

        [(called_id, amount, currency, method, credentials)] = gateway.calls
        assert called_id == order_id
        assert str(amount) == "261.00"
        assert currency == "TRY"
        assert method == PaymentMethod.CARD_PROCESSOR_A

    def test_writes_confirmed_event_and_notifies(self):
        db, order_id, handler, _, notifier = _setup()

        handler.handle(order_id)

        [event] = db.events("order.confirmed")
        assert event.payload["payment_reference"] == "txn_1"
        assert notifier.sent == [("cust-1", order_id)]

    def test_notification_failure_does_not_fail_payment(self):
        db, order_id, handler, _, _ = _setup(notifier=FakeNotifier(fail=True))

        result = handler.handle(order_id)

        assert result.success
        assert db.orders[order_id].payment_status == PaymentStatus.PAID

    def test_cannot_pay_twice(self):
        db, order_id, handler, gateway, _ = _setup()
        handler.handle(order_id)

        with pytest.raises(OrderStateConflictError, match="already been processed"):
            handler.handle(order_id)
        assert len(gateway.calls) == 1


class TestPaymentDeclined:

    def test_decline_keeps_order_pending_with_stock_held(self):
        gateway = FakePaymentGateway(result=PaymentResult.declined("Insufficient funds"))
        db, order_id, handler, _, notifier = _setup(gateway=gateway)
        assert db.available("A") == 8

        with pytest.raises(PaymentDeclinedError, match="Insufficient funds") as excinfo:
            handler.handle(order_id)

        assert excinfo.value.reason == "Insufficient funds"
        order = db.orders[order_id]
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.FAILED
        assert db.available("A") == 8
        [event] = db.events("order.payment_failed")
        assert event.payload["error"] == "Insufficient funds"
        assert notifier.sent == []

    def test_payment_can_be_retried_after_decline(self):
        gateway = FakePaymentGateway(result=PaymentResult.declined("Card declined"))
        db, order_id, handler, _, notifier = _setup(gateway=gateway)
        with pytest.raises(PaymentDeclinedError):
            handler.handle(order_id)

        gateway.result = PaymentResult.approved("txn_retry")
        result = handler.handle(order_id)

        assert result.status == "confirmed"
        assert result.payment_status == "paid"
        assert db.orders[order_id].payment_reference == "txn_retry"
        assert len(gateway.calls) == 2
        assert notifier.sent == [("cust-1", order_id)]

    def test_cancelling_declined_order_releases_stock(self):
        gateway = FakePaymentGateway(result=PaymentResult.declined("Card declined"))
        db, order_id, handler, _, _ = _setup(gateway=gateway)
        with pytest.raises(PaymentDeclinedError):
            handler.handle(order_id)

        CancelOrderHandler(FakeUnitOfWork(db)).handle(order_id, "payment declined")

        assert db.orders[order_id].status == OrderStatus.CANCELLED
        assert db.available("A") == 10
        assert db.events("refund.requested") == []


class TestGatewayUnavailable:

    def _assert_untouched(self, db, order_id):
        order = db.orders[order_id]
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert db.available("A") == 8
        assert [e.event_type for e in db.events()] == ["order.created"]

    def test_timeout_leaves_order_untouched(self):
        gateway = FakePaymentGateway(delay=1.0)
        db, order_id, handler, _, _ = _setup(gateway=gateway, timeout=0.05)

        with pytest.raises(PaymentGatewayTimeoutError, match="no answer within"):
            handler.handle(order_id)

        self._assert_untouched(db, order_id)

    def test_timeout_returns_without_waiting_for_the_provider(self):
        gateway = FakePaymentGateway(delay=3.0)
        db, order_id, handler, _, _ = _setup(gateway=gateway, timeout=0.1)

        started = time.monotonic()
        with pytest.raises(PaymentGatewayTimeoutError):
            handler.handle(order_id)

        assert time.monotonic() - started < 1.5
        callers = [t for t in threading.enumerate() if t.name.startswith("payment-authorize")]
        assert callers
        assert all(t.daemon for t in callers)

    def test_provider_outage_leaves_order_untouched(self):
        gateway = FakePaymentGateway(error=PaymentGatewayTimeoutError("x", "503"))
        db, order_id, handler, _, _ = _setup(gateway=gateway)

        with pytest.raises(PaymentGatewayTimeoutError):
            handler.handle(order_id)

        self._assert_untouched(db, order_id)

    def test_retry_after_outage_succeeds(self):
        gateway = FakePaymentGateway(error=PaymentGatewayTimeoutError("x", "503"))
        db, order_id, handler, _, _ = _setup(gateway=gateway)
        with pytest.raises(PaymentGatewayTimeoutError):
            handler.handle(order_id)

        gateway.error = None
        result = handler.handle(order_id)

        assert result.status == "confirmed"


class TestPaymentLookup:

    def test_unknown_order(self):
        _, _, handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            handler.handle("missing")

    def test_method_without_gateway(self):
        db, order_id, _, _, notifier = _setup()
        handler = ProcessPaymentHandler(FakeUnitOfWork(db), gateways={}, notifier=notifier)

        with pytest.raises(ValidationError, match="No payment gateway configured"):
            handler.handle(order_id)


class TestInMemoryCardProcessor:

    def test_known_declined_card(self):
        db, order_id, handler, _, _ = _setup(gateway=InMemoryCardProcessor("card_processor_a"))

        with pytest.raises(PaymentDeclinedError, match="Card declined"):
            handler.handle(order_id, {"card_number": "4000 0000 0000 0002"})

    def test_approved_charge_recorded_once(self):
        processor = InMemoryCardProcessor("card_processor_a")
        db, order_id, handler, _, _ = _setup(gateway=processor)

        result = handler.handle(order_id, {"card_number": "4111111111111111"})

        assert result.transaction_id.startswith("card_processor_a_")
        assert [c.order_id for c in processor.charges] == [order_id]

    def test_simulated_outage(self):
        db, order_id, handler, _, _ = _setup(gateway=InMemoryCardProcessor("card_processor_a"))

        with pytest.raises(PaymentGatewayTimeoutError, match="503"):
            handler.handle(order_id, {"card_number": "4111111111111111", "simulate": "unavailable"})

    def test_card_number_required(self):
        db, order_id, handler, _, _ = _setup(gateway=InMemoryCardProcessor("card_processor_a"))

        with pytest.raises(ValidationError, match="Card number is required"):
            handler.handle(order_id, {})
