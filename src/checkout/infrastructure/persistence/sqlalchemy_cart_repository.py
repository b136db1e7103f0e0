"""SQLAlchemy-backed implementation of CartRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from checkout.domain.model.cart import Cart, CartItem
from checkout.domain.model.value_objects import Money, Quantity
from checkout.domain.repository.cart_repository import CartRepository
from checkout.infrastructure.persistence.database import as_utc
from checkout.infrastructure.persistence.orm import CartItemRow, CartRow


class SqlAlchemyCartRepository(CartRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_customer(self, customer_id: str) -> Cart | None:
        row = self._session.scalars(
            select(CartRow).where(CartRow.customer_id == customer_id)
        ).first()
        return self._to_domain(row) if row is not None else None

    def save(self, cart: Cart) -> None:
        row = self._session.get(CartRow, cart.id)
        if row is None:
            row = CartRow(id=cart.id, customer_id=cart.customer_id, created_at=cart.created_at)
            self._session.add(row)
        row.coupon_code = cart.coupon_code
        row.updated_at = cart.updated_at

        # Sync items by id: update kept lines, add new ones, drop the rest
        existing = {item_row.id: item_row for item_row in row.items}
        wanted = []
        for position, item in enumerate(cart.items):
            item_row = existing.get(item.id)
            if item_row is None:
                item_row = CartItemRow(id=item.id)
            item_row.position = position
            item_row.product_id = item.product_id
            item_row.variant_id = item.variant_id
            item_row.quantity = item.quantity.value
            item_row.unit_price = item.unit_price.amount
            item_row.currency = item.unit_price.currency
            wanted.append(item_row)
        row.items = wanted
        self._session.flush()

    @staticmethod
    def _to_domain(row: CartRow) -> Cart:
        return Cart(
            id=row.id,
            customer_id=row.customer_id,
            items=[
                CartItem(
                    id=item.id,
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=Quantity(item.quantity),
                    unit_price=Money(item.unit_price, item.currency),
                )
                for item in row.items
            ],
            coupon_code=row.coupon_code,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
