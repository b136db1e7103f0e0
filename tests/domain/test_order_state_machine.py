"""Unit tests for the OrderStateMachine domain service."""

import copy

import pytest

from checkout.domain.exceptions import OrderStateConflictError
from checkout.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PriceBreakdown,
)
from checkout.domain.model.value_objects import Money, Quantity, ShippingAddress
from checkout.domain.service.order_state_machine import OrderStateMachine


def _make_order() -> Order:
    items = [OrderItem(product_id="A", quantity=Quantity(2), unit_price=Money.of("100"))]
    prices = PriceBreakdown(
        subtotal=Money.of("200"),
        tax=Money.of("36"),
        shipping=Money.of("25"),
        discount=Money.zero(),
        total=Money.of("261"),
    )
    address = ShippingAddress("Ayse", "Yilmaz", "Istiklal Cd. 1", "Istanbul", "34430", "TR")
    return Order.place("cust-1", items, prices, address, PaymentMethod.CARD_PROCESSOR_A)


def _paid_order(machine: OrderStateMachine) -> Order:
    order = _make_order()
    machine.record_payment_success(order, "txn_1")
    return order


class TestPayment:

    def test_success_confirms_and_marks_paid(self):
        machine = OrderStateMachine()
        order = _paid_order(machine)

        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment_reference == "txn_1"

    def test_failure_keeps_order_pending(self):
        machine = OrderStateMachine()
        order = _make_order()

        machine.record_payment_failure(order)

        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.FAILED
        assert not order.is_terminal

    def test_failed_payment_can_succeed_on_retry(self):
        machine = OrderStateMachine()
        order = _make_order()
        machine.record_payment_failure(order)

        machine.assert_payable(order)
        machine.record_payment_success(order, "txn_2")

        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID

    def test_failure_on_cancelled_order_rejected(self):
        machine = OrderStateMachine()
        order = _make_order()
        machine.cancel(order)

        with pytest.raises(OrderStateConflictError, match="cancelled -> payment failed"):
            machine.record_payment_failure(order)
        assert order.payment_status == PaymentStatus.PENDING

    def test_cannot_pay_twice(self):
        machine = OrderStateMachine()
        order = _paid_order(machine)

        with pytest.raises(OrderStateConflictError, match="already been processed"):
            machine.assert_payable(order)
        with pytest.raises(OrderStateConflictError):
            machine.record_payment_success(order, "txn_2")
        assert order.payment_reference == "txn_1"

    def test_confirm_requires_payment(self):
        machine = OrderStateMachine()
        order = _make_order()

        with pytest.raises(OrderStateConflictError, match="must be paid"):
            machine.transition(order, OrderStatus.CONFIRMED)
        assert order.status == OrderStatus.PENDING


class TestFulfillment:

    def test_happy_path_stamps_timestamps(self):
        machine = OrderStateMachine()
        order = _paid_order(machine)

        machine.transition(order, OrderStatus.PROCESSING)
        machine.transition(order, OrderStatus.SHIPPED)
        assert order.shipped_at is not None
        machine.transition(order, OrderStatus.DELIVERED)

        assert order.status == OrderStatus.DELIVERED
        assert order.delivered_at is not None

    @pytest.mark.parametrize(
        "path, target",
        [
            ([], OrderStatus.SHIPPED),
            ([OrderStatus.PROCESSING], OrderStatus.DELIVERED),
            ([OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
             OrderStatus.PROCESSING),
            ([OrderStatus.PROCESSING, OrderStatus.SHIPPED], OrderStatus.CANCELLED),
        ],
    )
    def test_illegal_transition_raises_and_leaves_order_untouched(self, path, target):
        machine = OrderStateMachine()
        order = _paid_order(machine)
        for status in path:
            machine.transition(order, status)
        before = copy.deepcopy(order)

        with pytest.raises(OrderStateConflictError, match=f"-> {target.value}"):
            machine.transition(order, target)

        assert order == before


class TestCancel:

    @pytest.mark.parametrize(
        "path", [[], [OrderStatus.CONFIRMED], [OrderStatus.CONFIRMED, OrderStatus.PROCESSING]]
    )
    def test_cancel_allowed_until_shipped(self, path):
        machine = OrderStateMachine()
        order = _make_order()
        if path:
            machine.record_payment_success(order, "txn_1")
        for status in path[1:]:
            machine.transition(order, status)

        machine.cancel(order, "changed mind")

        assert order.status == OrderStatus.CANCELLED
        assert order.cancelled_at is not None
        assert order.notes == "Cancelled: changed mind"

    def test_cancel_failed_order_rejected(self):
        machine = OrderStateMachine()
        order = _make_order()
        machine.transition(order, OrderStatus.FAILED)

        with pytest.raises(OrderStateConflictError, match="failed -> cancelled"):
            machine.cancel(order)

    def test_can_transition_table(self):
        machine = OrderStateMachine()
        assert machine.can_transition(OrderStatus.PENDING, OrderStatus.FAILED)
        assert not machine.can_transition(OrderStatus.CONFIRMED, OrderStatus.FAILED)
        assert not machine.can_transition(OrderStatus.DELIVERED, OrderStatus.CANCELLED)
