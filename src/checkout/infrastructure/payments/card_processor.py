"""In-memory card processor used for development and tests.

Behaves like a hosted card API without the network: known test card
numbers are declined, and ``credentials["simulate"]`` can force an
outage (``"timeout"`` or ``"unavailable"``) or a slow answer
(``"slow"``, which sleeps ``slow_seconds``).  Every authorization is
remembered in ``charges`` so tests can check nothing was charged twice.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from uuid import uuid4

import structlog

from checkout.domain.exceptions import PaymentGatewayTimeoutError, ValidationError
from checkout.domain.model.order import PaymentMethod
from checkout.domain.port.payment_gateway import PaymentGatewayAdapter, PaymentResult

logger = structlog.get_logger(__name__)

DECLINED_CARDS = {
    "4000000000000002": "Card declined",
    "4000000000009995": "Insufficient funds",
    "4000000000000069": "Card expired",
}


@dataclass(frozen=True)
class Charge:

    order_id: str
    amount: Decimal
    currency: str
    transaction_id: str


class InMemoryCardProcessor(PaymentGatewayAdapter):

    def __init__(self, name: str, slow_seconds: float = 30.0) -> None:
        self.name = name
        self.slow_seconds = slow_seconds
        self.charges: list[Charge] = []
        self._lock = threading.Lock()

    def authorize(
        self,
        order_id: str,
        amount: Decimal,
        currency: str,
        method: PaymentMethod,
        credentials: dict,
    ) -> PaymentResult:
        card_number = str(credentials.get("card_number", "")).replace(" ", "")
        if not card_number:
            raise ValidationError("Card number is required")

        simulate = credentials.get("simulate")
        if simulate == "timeout":
            raise PaymentGatewayTimeoutError(order_id, f"{self.name} did not respond")
        if simulate == "unavailable":
            raise PaymentGatewayTimeoutError(order_id, f"{self.name} returned 503")
        if simulate == "slow":
            time.sleep(self.slow_seconds)

        declined = DECLINED_CARDS.get(card_number)
        if declined:
            logger.info("Card declined", processor=self.name, order_id=order_id)
            return PaymentResult.declined(declined)

        transaction_id = f"{self.name}_{uuid4().hex[:16]}"
        with self._lock:
            self.charges.append(Charge(order_id, amount, currency, transaction_id))
        return PaymentResult.approved(transaction_id)
