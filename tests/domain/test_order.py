"""Unit tests for the Order aggregate and outbox events."""

import re
from datetime import datetime, timezone

import pytest

from checkout.domain.exceptions import ValidationError
from checkout.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PriceBreakdown,
    generate_order_number,
)
from checkout.domain.model.outbox import OutboxEvent
from checkout.domain.model.value_objects import Money, Quantity, ShippingAddress

ADDRESS = ShippingAddress("Ayse", "Yilmaz", "Istiklal Cd. 1", "Istanbul", "34430", "TR")


def _items() -> list[OrderItem]:
    return [
        OrderItem(product_id="A", quantity=Quantity(2), unit_price=Money.of("100")),
        OrderItem(product_id="B", quantity=Quantity(1), unit_price=Money.of("50")),
        OrderItem(product_id="A", quantity=Quantity(1), unit_price=Money.of("100"), variant_id="xl"),
    ]


def _prices(**overrides) -> PriceBreakdown:
    fields = dict(
        subtotal=Money.of("350"),
        tax=Money.of("63"),
        shipping=Money.of("25"),
        discount=Money.of("20"),
        total=Money.of("418"),
    )
    fields.update(overrides)
    return PriceBreakdown(**fields)


class TestPlaceOrder:

    def test_place_creates_pending_order(self):
        order = Order.place("cust-1", _items(), _prices(), ADDRESS, PaymentMethod.CASH_ON_DELIVERY)

        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.total == Money.of("418")
        assert order.id

    def test_reserved_quantities_sum_lines_per_product(self):
        order = Order.place("cust-1", _items(), _prices(), ADDRESS, PaymentMethod.CASH_ON_DELIVERY)
        assert order.reserved_quantities == {"A": 3, "B": 1}

    def test_subtotal_must_match_lines(self):
        with pytest.raises(ValidationError, match="does not match line items"):
            Order.place(
                "cust-1", _items(), _prices(subtotal=Money.of("349")),
                ADDRESS, PaymentMethod.CASH_ON_DELIVERY,
            )

    def test_total_must_match_breakdown(self):
        with pytest.raises(ValidationError, match="does not equal"):
            Order.place(
                "cust-1", _items(), _prices(total=Money.of("438")),
                ADDRESS, PaymentMethod.CASH_ON_DELIVERY,
            )

    def test_empty_order_rejected(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.place("cust-1", [], _prices(), ADDRESS, PaymentMethod.CASH_ON_DELIVERY)

    def test_notes_accumulate(self):
        order = Order.place("cust-1", _items(), _prices(), ADDRESS, PaymentMethod.CASH_ON_DELIVERY)
        order.add_note("leave at door")
        order.add_note("  ")
        order.add_note("ring twice")

        assert order.notes == "leave at door\nring twice"


class TestOrderNumber:

    def test_format(self):
        number = generate_order_number(datetime(2024, 3, 9, tzinfo=timezone.utc))
        assert re.fullmatch(r"ORD-20240309-[0-9A-F]{8}", number)


class TestPaymentMethod:

    def test_parse(self):
        assert PaymentMethod.parse("card_processor_b") == PaymentMethod.CARD_PROCESSOR_B

    def test_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unknown payment method 'bitcoin'"):
            PaymentMethod.parse("bitcoin")


class TestOutboxEvent:

    def test_topic(self):
        event = OutboxEvent.record("order", "o-1", "order.created", {"order_id": "o-1"})
        assert event.topic == "order-order.created"
        assert not event.is_published

    def test_published_at_set_once(self):
        event = OutboxEvent.record("order", "o-1", "order.created", {})
        event.mark_published()

        with pytest.raises(ValidationError, match="already published"):
            event.mark_published()
