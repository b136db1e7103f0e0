"""Stock ledger entries: append-only signed inventory movements."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from checkout.domain.exceptions import ValidationError


class StockMovementReason(Enum):
    RESERVE = "reserve"
    RELEASE = "release"
    RESTOCK = "restock"


@dataclass(frozen=True)
class StockLedgerEntry:
    """One signed movement for a product.

    Reservations are negative, releases and restocks positive.
    """

    product_id: str
    delta: int
    reason: StockMovementReason
    order_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.delta == 0:
            raise ValidationError("Stock movement cannot be zero")
        if self.reason == StockMovementReason.RESERVE and self.delta > 0:
            raise ValidationError("Reservations must have a negative delta")
        if self.reason != StockMovementReason.RESERVE and self.delta < 0:
            raise ValidationError(f"{self.reason.value} entries must have a positive delta")
        if self.reason != StockMovementReason.RESTOCK and not self.order_id:
            raise ValidationError(f"{self.reason.value} entries must reference an order")
