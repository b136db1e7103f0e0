"""Cart aggregate: the customer's working set of line items until checkout.

Totals are never stored on the cart; they are derived by the pricing
engine whenever they are needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from checkout.domain.exceptions import EntityNotFoundError, ValidationError
from checkout.domain.model.value_objects import Money, Quantity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CartItem:
    """A product in the cart with the price captured when it was added.

    The snapshot is re-validated against the catalog at checkout.
    """

    id: str
    product_id: str
    quantity: Quantity
    unit_price: Money
    variant_id: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass
class Cart:

    id: str
    customer_id: str
    items: list[CartItem] = field(default_factory=list)
    coupon_code: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @staticmethod
    def open(customer_id: str) -> Cart:
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        return Cart(id=str(uuid4()), customer_id=customer_id.strip())

    # --- Item management ------------------------------------------------------

    def add_item(
        self,
        product_id: str,
        quantity: int,
        unit_price: Money,
        variant_id: str | None = None,
    ) -> CartItem:
        """Add a product, merging with an existing line for the same variant.

        A merged line keeps its original price snapshot.
        """
        qty = Quantity(quantity)
        existing = self._find_line(product_id, variant_id)
        if existing is not None:
            existing.quantity = Quantity(existing.quantity.value + qty.value)
            self._touch()
            return existing

        item = CartItem(
            id=str(uuid4()),
            product_id=product_id,
            quantity=qty,
            unit_price=unit_price,
            variant_id=variant_id,
        )
        self.items.append(item)
        self._touch()
        return item

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set a line's quantity; zero removes the line."""
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")
        item = self._find_item(item_id)
        if quantity == 0:
            self.items.remove(item)
        else:
            item.quantity = Quantity(quantity)
        self._touch()

    def remove_item(self, item_id: str) -> None:
        self.items.remove(self._find_item(item_id))
        self._touch()

    def apply_coupon(self, code: str) -> None:
        if not code or not code.strip():
            raise ValidationError("Coupon code is required")
        self.coupon_code = code.strip()
        self._touch()

    def remove_coupon(self) -> None:
        self.coupon_code = None
        self._touch()

    def clear(self) -> None:
        """Empty the cart after a successful checkout. The cart itself stays."""
        self.items = []
        self.coupon_code = None
        self._touch()

    # --- Computed properties --------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity.value for item in self.items)

    # --- Internal helpers -----------------------------------------------------

    def _find_item(self, item_id: str) -> CartItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise EntityNotFoundError(f"Cart item '{item_id}' not found")

    def _find_line(self, product_id: str, variant_id: str | None) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id and item.variant_id == variant_id:
                return item
        return None

    def _touch(self) -> None:
        self.updated_at = _utcnow()
