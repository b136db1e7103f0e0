"""CLI commands for coupons."""

from __future__ import annotations

import click

from checkout.application.add_coupon import AddCouponHandler
from checkout.domain.exceptions import DomainException
from checkout.domain.model.coupon import CouponType
from checkout.infrastructure.bootstrap import settings, unit_of_work


@click.command("add")
@click.option("--code", required=True, help="Coupon code.")
@click.option(
    "--type",
    "coupon_type",
    required=True,
    type=click.Choice([t.value for t in CouponType]),
    help="Discount type.",
)
@click.option("--value", required=True, help="Percentage (0-100] or fixed amount.")
@click.option("--starts", type=click.DateTime(), default=None, help="Valid from (UTC).")
@click.option("--ends", type=click.DateTime(), default=None, help="Valid until (UTC).")
@click.option("--minimum", default=None, help="Minimum cart subtotal.")
@click.option("--max-discount", default=None, help="Cap for percentage discounts.")
@click.option("--usage-limit", type=int, default=None, help="Total redemptions allowed.")
def coupon_add(
    code: str,
    coupon_type: str,
    value: str,
    starts,
    ends,
    minimum: str | None,
    max_discount: str | None,
    usage_limit: int | None,
) -> None:
    """Define a new coupon."""
    handler = AddCouponHandler(uow=unit_of_work(), currency=settings().currency)

    try:
        dto = handler.handle(
            code=code,
            coupon_type=coupon_type,
            value=value,
            starts_at=starts,
            ends_at=ends,
            minimum_purchase=minimum,
            maximum_discount=max_discount,
            usage_limit=usage_limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    limit = "unlimited" if dto.usage_limit is None else dto.usage_limit
    click.echo(f"Coupon {dto.code} added  ({dto.type} {dto.value}, uses: {limit})")
