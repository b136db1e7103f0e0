import click

from checkout.infrastructure.bootstrap import settings
from checkout.infrastructure.cli.cart_commands import (
    cart_add,
    cart_coupon,
    cart_remove_coupon,
    cart_show,
    cart_update,
)
from checkout.infrastructure.cli.catalog_commands import catalog_add_product, catalog_restock
from checkout.infrastructure.cli.coupon_commands import coupon_add
from checkout.infrastructure.cli.db_commands import db_init
from checkout.infrastructure.cli.order_commands import (
    order_advance,
    order_cancel,
    order_create,
    order_pay,
    order_status,
)
from checkout.infrastructure.cli.outbox_commands import outbox_relay
from checkout.infrastructure.config import ConfigurationError
from checkout.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Checkout: carts, orders, payments and the event outbox."""
    try:
        config = settings()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    configure_logging(config.log_level, json=config.log_json)


@cli.group()
def db() -> None:
    """Manage the database schema."""


@cli.group()
def catalog() -> None:
    """Seed and restock products."""


@cli.group()
def coupon() -> None:
    """Manage coupons."""


@cli.group()
def cart() -> None:
    """Manage a customer's cart."""


@cli.group()
def order() -> None:
    """Check out and manage orders."""


@cli.group()
def outbox() -> None:
    """Relay outbox events to the broker."""


# Register subcommands
db.add_command(db_init)
catalog.add_command(catalog_add_product)
catalog.add_command(catalog_restock)
coupon.add_command(coupon_add)
cart.add_command(cart_add)
cart.add_command(cart_update)
cart.add_command(cart_coupon)
cart.add_command(cart_remove_coupon)
cart.add_command(cart_show)
order.add_command(order_create)
order.add_command(order_pay)
order.add_command(order_cancel)
order.add_command(order_advance)
order.add_command(order_status)
outbox.add_command(outbox_relay)
