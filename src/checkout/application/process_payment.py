"""Application service: Process Payment use case.

Runs in three steps so no database transaction is open while the
provider is being called:

1. Read the order and check it is still awaiting payment.
2. Call the provider's adapter with a hard timeout.
3. Re-lock the order and record the outcome with its outbox event.

An approval confirms the order.  A decline marks the payment failed but
leaves the order pending with its stock held, so the customer can pay
again or cancel.  A timeout or provider outage leaves the order
untouched (the charge may have happened upstream) and is re-raised for
the caller to retry.

The provider is called on a daemon thread: a call still running after
the timeout is abandoned and never keeps the process alive.
"""

from __future__ import annotations

import threading
from concurrent import futures
from decimal import Decimal

import structlog

from checkout.application import events
from checkout.application.dto import PaymentResultDTO
from checkout.domain.exceptions import (
    EntityNotFoundError,
    PaymentDeclinedError,
    PaymentGatewayTimeoutError,
    ValidationError,
)
from checkout.domain.model.order import Order, PaymentMethod
from checkout.domain.port.notification import NotificationPort
from checkout.domain.port.payment_gateway import PaymentGatewayAdapter, PaymentResult
from checkout.domain.repository.unit_of_work import UnitOfWork
from checkout.domain.service.order_state_machine import OrderStateMachine

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 15.0


class ProcessPaymentHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        gateways: dict[PaymentMethod, PaymentGatewayAdapter],
        notifier: NotificationPort,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self._uow = uow
        self._gateways = gateways
        self._notifier = notifier
        self._timeout = timeout
        self._machine = OrderStateMachine()

    def handle(self, order_id: str, payment_data: dict | None = None) -> PaymentResultDTO:
        # Step 1: read, no lock held past this block
        with self._uow as uow:
            order = self._get_order(uow, order_id)
            self._machine.assert_payable(order)
            amount = order.total.amount
            currency = order.total.currency
            method = order.payment_method
            customer_id = order.customer_id

        gateway = self._gateways.get(method)
        if gateway is None:
            raise ValidationError(f"No payment gateway configured for {method.value}")

        # Step 2: external call
        result = self._authorize(gateway, order_id, amount, currency, method, payment_data or {})

        # Step 3: record the outcome
        with self._uow as uow:
            order = self._get_order(uow, order_id, lock=True)
            self._machine.assert_payable(order)
            if result.success:
                self._machine.record_payment_success(order, result.transaction_id)
                uow.outbox.add(events.order_confirmed(order))
            else:
                error = result.error or "Payment declined"
                self._machine.record_payment_failure(order)
                uow.outbox.add(events.order_payment_failed(order, error))
            uow.orders.save(order)
            uow.commit()

        if not result.success:
            logger.warning("Payment declined", order_id=order_id, method=method.value)
            raise PaymentDeclinedError(order_id, result.error or "Payment declined")

        logger.info(
            "Payment captured",
            order_id=order_id,
            method=method.value,
            transaction_id=result.transaction_id,
        )
        self._notify(customer_id, order_id)
        return PaymentResultDTO(
            order_id=order.id,
            order_number=order.order_number,
            success=True,
            status=order.status.value,
            payment_status=order.payment_status.value,
            transaction_id=result.transaction_id,
        )

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _get_order(uow: UnitOfWork, order_id: str, lock: bool = False) -> Order:
        order = uow.orders.get_by_id(order_id, lock=lock)
        if order is None:
            raise EntityNotFoundError(f"Order {order_id} not found")
        return order

    def _authorize(
        self,
        gateway: PaymentGatewayAdapter,
        order_id: str,
        amount: Decimal,
        currency: str,
        method: PaymentMethod,
        credentials: dict,
    ) -> PaymentResult:
        future: futures.Future = futures.Future()

        def call() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(
                    gateway.authorize(order_id, amount, currency, method, credentials)
                )
            except Exception as exc:
                future.set_exception(exc)

        threading.Thread(
            target=call, name=f"payment-authorize-{order_id}", daemon=True
        ).start()
        try:
            return future.result(timeout=self._timeout)
        except futures.TimeoutError:
            logger.warning(
                "Payment authorization timed out",
                order_id=order_id,
                timeout=self._timeout,
            )
            raise PaymentGatewayTimeoutError(
                order_id, f"no answer within {self._timeout}s"
            ) from None
        except PaymentGatewayTimeoutError:
            logger.warning("Payment gateway unavailable", order_id=order_id)
            raise

    def _notify(self, customer_id: str, order_id: str) -> None:
        try:
            self._notifier.send_order_confirmation(customer_id, order_id)
        except Exception:
            logger.exception("Order confirmation not sent", order_id=order_id)
