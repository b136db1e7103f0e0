"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from checkout.application.advance_order import FULFILLMENT_STATUSES, AdvanceOrderHandler
from checkout.application.cancel_order import CancelOrderHandler
from checkout.application.create_order import CreateOrderHandler
from checkout.application.process_payment import ProcessPaymentHandler
from checkout.application.show_order import GetOrderStatusHandler
from checkout.domain.exceptions import DomainException
from checkout.domain.model.order import PaymentMethod
from checkout.infrastructure.bootstrap import (
    notifier,
    payment_gateways,
    pricing_engine,
    settings,
    unit_of_work,
)


def _display_order(dto) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"ID:       {dto.id}")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*56}")
    for item in dto.items:
        click.echo(
            f"  {item.product_id:<20} {item.quantity:>5} {item.unit_price:>14} {item.subtotal:>14}"
        )
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Subtotal':<26} {dto.subtotal:>29}")
    click.echo(f"  {'VAT':<26} {dto.tax:>29}")
    click.echo(f"  {'Shipping':<26} {dto.shipping:>29}")
    if dto.coupon_code:
        click.echo(f"  {'Discount (' + dto.coupon_code + ')':<26} {dto.discount:>29}")
    click.echo(f"  {'Order Total':<26} {dto.total:>29}")
    if dto.notes:
        click.echo()
        click.echo(dto.notes)


@click.command("create")
@click.option("--customer", required=True, help="Customer ID.")
@click.option(
    "--payment-method",
    required=True,
    type=click.Choice([m.value for m in PaymentMethod]),
    help="How the customer pays.",
)
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--address1", required=True)
@click.option("--address2", default=None)
@click.option("--city", required=True)
@click.option("--state", default=None)
@click.option("--zip", "zip_code", required=True)
@click.option("--country", required=True)
@click.option("--phone", default=None)
@click.option("--coupon", default=None, help="Coupon code (overrides the cart's).")
@click.option("--idempotency-key", default=None, help="Repeat-safe checkout key.")
def order_create(
    customer: str,
    payment_method: str,
    first_name: str,
    last_name: str,
    address1: str,
    address2: str | None,
    city: str,
    state: str | None,
    zip_code: str,
    country: str,
    phone: str | None,
    coupon: str | None,
    idempotency_key: str | None,
) -> None:
    """Check out the customer's cart into a pending order."""
    handler = CreateOrderHandler(
        uow=unit_of_work(),
        pricing=pricing_engine(),
        redeem_coupons=settings().redeem_coupons,
    )
    address = {
        "first_name": first_name,
        "last_name": last_name,
        "address1": address1,
        "address2": address2,
        "city": city,
        "state": state,
        "zip_code": zip_code,
        "country": country,
        "phone": phone,
    }

    try:
        dto = handler.handle(
            customer_id=customer,
            shipping_address=address,
            payment_method=payment_method,
            coupon_code=coupon,
            idempotency_key=idempotency_key,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("pay")
@click.option("--id", "order_id", required=True, help="Order ID to pay.")
@click.option("--card-number", default=None, help="Card number for card processors.")
@click.option(
    "--simulate",
    type=click.Choice(["timeout", "unavailable", "slow"]),
    default=None,
    help="Force a processor outage (development only).",
)
def order_pay(order_id: str, card_number: str | None, simulate: str | None) -> None:
    """Authorize payment for a pending order."""
    handler = ProcessPaymentHandler(
        uow=unit_of_work(),
        gateways=payment_gateways(),
        notifier=notifier(),
        timeout=settings().payment_timeout_sec,
    )
    payment_data = {}
    if card_number:
        payment_data["card_number"] = card_number
    if simulate:
        payment_data["simulate"] = simulate

    try:
        result = handler.handle(order_id, payment_data)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {result.order_number} paid  (status={result.status})")
    if result.transaction_id:
        click.echo(f"Transaction: {result.transaction_id}")


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--reason", default=None, help="Why the order is cancelled.")
def order_cancel(order_id: str, reason: str | None) -> None:
    """Cancel an order (releases its reserved stock)."""
    handler = CancelOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id, reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} cancelled.")


@click.command("advance")
@click.option("--id", "order_id", required=True, help="Order ID to advance.")
@click.option(
    "--to",
    "target",
    required=True,
    type=click.Choice([s.value for s in FULFILLMENT_STATUSES]),
    help="Fulfillment status to move to.",
)
@click.option("--note", default=None, help="Note to append to the order.")
def order_advance(order_id: str, target: str, note: str | None) -> None:
    """Move a confirmed order through fulfillment."""
    handler = AdvanceOrderHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id, target, note)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number} is now {dto.status}.")


@click.command("status")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_status(order_id: str) -> None:
    """Show the status of an order."""
    handler = GetOrderStatusHandler(uow=unit_of_work())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {dto.order_number}  ({dto.order_id})")
    click.echo(f"Status:   {dto.status}")
    click.echo(f"Payment:  {dto.payment_status}")
    click.echo(f"Total:    {dto.total_amount}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Updated:  {dto.updated_at}")
    for item in dto.items:
        click.echo(f"  {item.product_id:<20} x{item.quantity:<4} {item.subtotal:>14}")
