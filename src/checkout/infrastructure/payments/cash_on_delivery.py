"""Cash on delivery: nothing to authorize, always accepted."""

from __future__ import annotations

from decimal import Decimal

from checkout.domain.model.order import PaymentMethod
from checkout.domain.port.payment_gateway import PaymentGatewayAdapter, PaymentResult


class CashOnDeliveryAdapter(PaymentGatewayAdapter):

    def authorize(
        self,
        order_id: str,
        amount: Decimal,
        currency: str,
        method: PaymentMethod,
        credentials: dict,
    ) -> PaymentResult:
        return PaymentResult.approved(transaction_id=None)
