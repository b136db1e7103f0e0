"""CLI commands for the customer's cart."""

from __future__ import annotations

import click

from checkout.application.add_cart_item import AddCartItemHandler
from checkout.application.apply_coupon import ApplyCouponHandler, RemoveCouponHandler
from checkout.application.dto import CartDTO
from checkout.application.show_cart import ShowCartHandler
from checkout.application.update_cart_item import UpdateCartItemHandler
from checkout.domain.exceptions import DomainException
from checkout.infrastructure.bootstrap import pricing_engine, unit_of_work


def _display_cart(dto: CartDTO) -> None:
    """Shared formatting for displaying a cart."""
    click.echo(f"Cart of {dto.customer_id}  ({dto.item_count} items)")
    if not dto.items:
        click.echo("  (empty)")
        return

    click.echo()
    click.echo(f"  {'Item':<36} {'Product':<16} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*89}")
    for item in dto.items:
        click.echo(
            f"  {item.id:<36} {item.product_id:<16} {item.quantity:>5} "
            f"{item.unit_price:>14} {item.line_total:>14}"
        )
    click.echo(f"  {'-'*89}")
    click.echo(f"  {'Subtotal':<58} {dto.subtotal:>30}")
    click.echo(f"  {'VAT':<58} {dto.tax:>30}")
    click.echo(f"  {'Shipping':<58} {dto.shipping:>30}")
    if dto.coupon_code:
        click.echo(f"  {'Discount (' + dto.coupon_code + ')':<58} {dto.discount:>30}")
    click.echo(f"  {'Total':<58} {dto.total:>30}")


@click.command("add")
@click.option("--customer", required=True, help="Customer ID.")
@click.option("--product", required=True, help="Product ID.")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
@click.option("--variant", default=None, help="Variant ID.")
def cart_add(customer: str, product: str, quantity: int, variant: str | None) -> None:
    """Add a product to the cart."""
    handler = AddCartItemHandler(uow=unit_of_work(), pricing=pricing_engine())

    try:
        dto = handler.handle(
            customer_id=customer,
            product_id=product,
            quantity=quantity,
            variant_id=variant,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("update")
@click.option("--customer", required=True, help="Customer ID.")
@click.option("--item", "item_id", required=True, help="Cart item ID.")
@click.option("--quantity", required=True, type=int, help="New quantity (0 removes).")
def cart_update(customer: str, item_id: str, quantity: int) -> None:
    """Change the quantity of a cart line."""
    handler = UpdateCartItemHandler(uow=unit_of_work(), pricing=pricing_engine())

    try:
        dto = handler.handle(customer_id=customer, item_id=item_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("coupon")
@click.option("--customer", required=True, help="Customer ID.")
@click.option("--code", required=True, help="Coupon code.")
def cart_coupon(customer: str, code: str) -> None:
    """Apply a coupon to the cart."""
    handler = ApplyCouponHandler(uow=unit_of_work(), pricing=pricing_engine())

    try:
        dto = handler.handle(customer_id=customer, code=code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("remove-coupon")
@click.option("--customer", required=True, help="Customer ID.")
def cart_remove_coupon(customer: str) -> None:
    """Remove the coupon from the cart."""
    handler = RemoveCouponHandler(uow=unit_of_work(), pricing=pricing_engine())

    try:
        dto = handler.handle(customer_id=customer)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(dto)


@click.command("show")
@click.option("--customer", required=True, help="Customer ID.")
def cart_show(customer: str) -> None:
    """Show the cart with its totals."""
    handler = ShowCartHandler(uow=unit_of_work(), pricing=pricing_engine())
    _display_cart(handler.handle(customer_id=customer))
