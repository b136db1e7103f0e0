"""Uniform interface over payment providers.

Adapters return a PaymentResult for answers the provider actually gave
(approved or declined).  When the provider could not answer (timeout,
connection failure, 5xx) they raise PaymentGatewayTimeoutError instead,
because the charge may or may not have happened.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from checkout.domain.model.order import PaymentMethod


@dataclass(frozen=True)
class PaymentResult:

    success: bool
    transaction_id: str | None = None
    error: str | None = None

    @staticmethod
    def approved(transaction_id: str | None = None) -> PaymentResult:
        return PaymentResult(success=True, transaction_id=transaction_id)

    @staticmethod
    def declined(error: str) -> PaymentResult:
        return PaymentResult(success=False, error=error)


class PaymentGatewayAdapter(ABC):

    @abstractmethod
    def authorize(
        self,
        order_id: str,
        amount: Decimal,
        currency: str,
        method: PaymentMethod,
        credentials: dict,
    ) -> PaymentResult:
        """Charge ``amount`` for the order."""
