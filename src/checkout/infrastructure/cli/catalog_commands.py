"""CLI commands for catalog seeding."""

from __future__ import annotations

import click

from checkout.application.dto import ProductDTO
from checkout.application.manage_catalog import AddProductHandler, RestockProductHandler
from checkout.domain.exceptions import DomainException
from checkout.infrastructure.bootstrap import settings, unit_of_work


def _display_product(dto: ProductDTO) -> None:
    available = "untracked" if dto.available is None else dto.available
    click.echo(f"{dto.id:<20} {dto.name:<24} {dto.price:>14} {available:>10}")


@click.command("add-product")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price, e.g. 100.00.")
@click.option("--stock", default=0, show_default=True, type=int, help="On-hand stock.")
@click.option("--untracked", is_flag=True, help="Do not track inventory for this product.")
def catalog_add_product(product_id: str, name: str, price: str, stock: int, untracked: bool) -> None:
    """Add a product to the catalog (or overwrite it)."""
    handler = AddProductHandler(uow=unit_of_work(), currency=settings().currency)

    try:
        dto = handler.handle(
            product_id=product_id,
            name=name,
            price=price,
            stock_quantity=stock,
            track_inventory=not untracked,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_product(dto)


@click.command("restock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Units received.")
def catalog_restock(product_id: str, quantity: int) -> None:
    """Record goods received into stock."""
    handler = RestockProductHandler(uow=unit_of_work())

    try:
        dto = handler.handle(product_id=product_id, quantity=quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Restocked '{dto.id}' by {quantity}; available now {dto.available}")
