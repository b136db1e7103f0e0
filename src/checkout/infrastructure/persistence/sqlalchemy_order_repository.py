"""SQLAlchemy-backed implementation of OrderRepository.

Line items are written once, with the order.  Later saves only touch
the fields that may change after creation (status, payment, notes and
lifecycle timestamps).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from checkout.domain.exceptions import DuplicateOrderError
from checkout.domain.model.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from checkout.domain.model.value_objects import Money, Quantity, ShippingAddress
from checkout.domain.repository.order_repository import OrderRepository
from checkout.infrastructure.persistence.database import as_utc
from checkout.infrastructure.persistence.orm import OrderItemRow, OrderRow


class SqlAlchemyOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str, lock: bool = False) -> Order | None:
        row = self._session.get(OrderRow, order_id, with_for_update=lock)
        return self._to_domain(row) if row is not None else None

    def get_by_idempotency_key(self, customer_id: str, key: str) -> Order | None:
        row = self._session.scalars(
            select(OrderRow).where(
                OrderRow.customer_id == customer_id,
                OrderRow.idempotency_key == key,
            )
        ).first()
        return self._to_domain(row) if row is not None else None

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        is_new = row is None
        if is_new:
            row = self._new_row(order)
            self._session.add(row)
        row.status = order.status.value
        row.payment_status = order.payment_status.value
        row.payment_reference = order.payment_reference
        row.notes = order.notes
        row.updated_at = order.updated_at
        row.shipped_at = order.shipped_at
        row.delivered_at = order.delivered_at
        row.cancelled_at = order.cancelled_at
        try:
            self._session.flush()
        except IntegrityError as exc:
            # uq_orders_idempotency: a concurrent checkout won the race
            if is_new and order.idempotency_key:
                raise DuplicateOrderError(order.customer_id, order.idempotency_key) from exc
            raise

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _new_row(order: Order) -> OrderRow:
        return OrderRow(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            payment_method=order.payment_method.value,
            subtotal=order.subtotal.amount,
            tax=order.tax.amount,
            shipping=order.shipping.amount,
            discount=order.discount.amount,
            total_amount=order.total.amount,
            currency=order.total.currency,
            coupon_code=order.coupon_code,
            idempotency_key=order.idempotency_key,
            shipping_address=order.shipping_address.to_dict(),
            created_at=order.created_at,
            items=[
                OrderItemRow(
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                    subtotal=item.subtotal.amount,
                )
                for item in order.items
            ],
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        currency = row.currency
        return Order(
            id=row.id,
            order_number=row.order_number,
            customer_id=row.customer_id,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    variant_id=item.variant_id,
                    quantity=Quantity(item.quantity),
                    unit_price=Money(item.unit_price, currency),
                )
                for item in row.items
            ],
            subtotal=Money(row.subtotal, currency),
            tax=Money(row.tax, currency),
            shipping=Money(row.shipping, currency),
            discount=Money(row.discount, currency),
            total=Money(row.total_amount, currency),
            shipping_address=ShippingAddress.from_dict(row.shipping_address),
            payment_method=PaymentMethod(row.payment_method),
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            coupon_code=row.coupon_code,
            payment_reference=row.payment_reference,
            idempotency_key=row.idempotency_key,
            notes=row.notes,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
            shipped_at=as_utc(row.shipped_at),
            delivered_at=as_utc(row.delivered_at),
            cancelled_at=as_utc(row.cancelled_at),
        )
