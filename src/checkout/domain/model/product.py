"""Catalog product as seen by the checkout core.

The catalog itself is owned elsewhere; checkout only reads the price,
the on-hand stock baseline and whether inventory is tracked at all.
"""

from __future__ import annotations

from dataclasses import dataclass

from checkout.domain.model.value_objects import Money


@dataclass(frozen=True)
class CatalogProduct:

    id: str
    name: str
    price: Money
    stock_quantity: int
    track_inventory: bool = True
    is_active: bool = True
