"""CLI tests: every command run through click's CliRunner on in-memory SQLite."""

import re

import pytest
from click.testing import CliRunner

from checkout.infrastructure import bootstrap
from checkout.infrastructure.cli import main as cli_main
from checkout.infrastructure.cli import outbox_commands
from checkout.infrastructure.cli.main import cli
from tests.fakes import FakeMessageBroker

ADDRESS_ARGS = [
    "--first-name", "Ayse",
    "--last-name", "Yilmaz",
    "--address1", "Istiklal Cd. 1",
    "--city", "Istanbul",
    "--zip", "34430",
    "--country", "TR",
]


def _clear_caches() -> None:
    for cached in (
        bootstrap.settings,
        bootstrap.engine,
        bootstrap.session_factory,
        bootstrap.payment_gateways,
    ):
        cached.cache_clear()


@pytest.fixture
def run(monkeypatch):
    monkeypatch.setenv("CHECKOUT_DATABASE_URL", "sqlite://")
    monkeypatch.setattr(cli_main, "configure_logging", lambda *args, **kwargs: None)
    _clear_caches()
    runner = CliRunner()

    def invoke(*args: str, ok: bool = True):
        result = runner.invoke(cli, list(args))
        if ok:
            assert result.exit_code == 0, result.output
        return result

    invoke("db", "init")
    invoke("catalog", "add-product", "--id", "A", "--name", "Kettle", "--price", "100", "--stock", "3")
    invoke("catalog", "add-product", "--id", "B", "--name", "Mug", "--price", "50", "--stock", "5")
    yield invoke
    _clear_caches()


def _order_id(output: str) -> str:
    return re.search(r"ID:\s+(\S+)", output).group(1)


def _checkout(run, *extra: str) -> str:
    run("cart", "add", "--customer", "cust-1", "--product", "A", "--quantity", "2")
    run("cart", "add", "--customer", "cust-1", "--product", "B")
    result = run(
        "order", "create", "--customer", "cust-1",
        "--payment-method", "cash_on_delivery", *ADDRESS_ARGS, *extra,
    )
    return _order_id(result.output)


class TestCatalogCommands:

    def test_restock(self, run):
        result = run("catalog", "restock", "--id", "A", "--quantity", "4")
        assert "available now 7" in result.output

    def test_restock_unknown_product(self, run):
        result = run("catalog", "restock", "--id", "Z", "--quantity", "4", ok=False)
        assert result.exit_code == 1
        assert "Product 'Z' not found" in result.output


class TestCartCommands:

    def test_add_and_show(self, run):
        run("cart", "add", "--customer", "cust-1", "--product", "A", "--quantity", "2")
        run("cart", "add", "--customer", "cust-1", "--product", "B")

        result = run("cart", "show", "--customer", "cust-1")

        assert "250.00 TRY" in result.output
        assert "320.00 TRY" in result.output

    def test_coupon(self, run):
        run("coupon", "add", "--code", "TEN", "--type", "percentage", "--value", "10",
            "--max-discount", "20")
        run("cart", "add", "--customer", "cust-1", "--product", "A", "--quantity", "2")
        run("cart", "add", "--customer", "cust-1", "--product", "B")

        result = run("cart", "coupon", "--customer", "cust-1", "--code", "TEN")

        assert "Discount (TEN)" in result.output
        assert "300.00 TRY" in result.output

    def test_unknown_coupon_reported(self, run):
        run("cart", "add", "--customer", "cust-1", "--product", "A")
        result = run("cart", "coupon", "--customer", "cust-1", "--code", "NOPE", ok=False)
        assert "rejected: not-found" in result.output

    def test_add_beyond_stock_reported(self, run):
        result = run("cart", "add", "--customer", "cust-1", "--product", "A", "--quantity", "9",
                     ok=False)
        assert "Insufficient stock for product 'A'" in result.output


class TestOrderCommands:

    def test_create_shows_totals(self, run):
        run("cart", "add", "--customer", "cust-1", "--product", "A", "--quantity", "2")
        run("cart", "add", "--customer", "cust-1", "--product", "B")

        result = run(
            "order", "create", "--customer", "cust-1",
            "--payment-method", "card_processor_a", *ADDRESS_ARGS,
        )

        assert "status=pending" in result.output
        assert "320.00 TRY" in result.output
        assert re.search(r"ORD-\d{8}-[0-9A-F]{8}", result.output)

    def test_empty_cart_reported(self, run):
        result = run(
            "order", "create", "--customer", "nobody",
            "--payment-method", "cash_on_delivery", *ADDRESS_ARGS, ok=False,
        )
        assert "is empty" in result.output

    def test_pay_advance_and_status(self, run):
        order_id = _checkout(run)

        assert "paid" in run("order", "pay", "--id", order_id).output
        run("order", "advance", "--id", order_id, "--to", "processing")
        run("order", "advance", "--id", order_id, "--to", "shipped")

        result = run("order", "status", "--id", order_id)
        assert "Status:   shipped" in result.output
        assert "Payment:  paid" in result.output

    def test_card_decline_reported(self, run):
        run("cart", "add", "--customer", "cust-1", "--product", "A")
        result = run(
            "order", "create", "--customer", "cust-1",
            "--payment-method", "card_processor_b", *ADDRESS_ARGS,
        )
        order_id = _order_id(result.output)

        result = run("order", "pay", "--id", order_id, "--card-number", "4000000000000002",
                     ok=False)

        assert "declined: Card declined" in result.output
        status = run("order", "status", "--id", order_id).output
        assert "Status:   pending" in status
        assert "Payment:  failed" in status

    def test_cancel(self, run):
        order_id = _checkout(run)
        assert "cancelled" in run("order", "cancel", "--id", order_id, "--reason", "changed mind").output

        result = run("order", "cancel", "--id", order_id, ok=False)
        assert "Illegal transition cancelled -> cancelled" in result.output

    def test_unknown_order(self, run):
        result = run("order", "status", "--id", "missing", ok=False)
        assert "Order missing not found" in result.output


class TestOutboxCommands:

    def test_relay_once(self, run, monkeypatch):
        broker = FakeMessageBroker()
        monkeypatch.setattr(outbox_commands, "PikaMessageBroker", lambda url, exchange: broker)
        order_id = _checkout(run)
        run("order", "cancel", "--id", order_id)

        result = run("outbox", "relay", "--once")

        assert "Published 2 event(s)." in result.output
        assert [topic for topic, _, _ in broker.published] == [
            "order-order.created",
            "order-order.cancelled",
        ]
        assert "Published 0 event(s)." in run("outbox", "relay", "--once").output
