"""SQLAlchemy table mappings.

Rows are plain persistence records; repositories translate them to and
from domain objects so nothing outside this package sees a Session.
"""

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class ProductRow(Base):
    __tablename__ = "products"
    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="TRY")
    stock_quantity = Column(Integer, nullable=False, default=0)
    track_inventory = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)


class CouponRow(Base):
    __tablename__ = "coupons"
    code = Column(String(50), primary_key=True)
    type = Column(String(20), nullable=False)
    value = Column(Numeric(12, 2), nullable=False)
    starts_at = Column(TIMESTAMP(timezone=True), nullable=True)
    ends_at = Column(TIMESTAMP(timezone=True), nullable=True)
    minimum_purchase = Column(Numeric(12, 2), nullable=True)
    maximum_discount = Column(Numeric(12, 2), nullable=True)
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class CartRow(Base):
    __tablename__ = "carts"
    id = Column(String(36), primary_key=True)
    customer_id = Column(String(64), nullable=False, unique=True)
    coupon_code = Column(String(50), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False)
    items = relationship(
        "CartItemRow",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemRow.position",
    )


class CartItemRow(Base):
    __tablename__ = "cart_items"
    id = Column(String(36), primary_key=True)
    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(String(64), nullable=False)
    variant_id = Column(String(64), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    cart = relationship("CartRow", back_populates="items")


class OrderRow(Base):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("customer_id", "idempotency_key", name="uq_orders_idempotency"),
    )
    id = Column(String(36), primary_key=True)
    order_number = Column(String(50), nullable=False, unique=True)
    customer_id = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False, index=True)
    payment_status = Column(String(20), nullable=False)
    payment_method = Column(String(32), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False)
    shipping = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    coupon_code = Column(String(50), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    idempotency_key = Column(String(128), nullable=True)
    shipping_address = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False)
    shipped_at = Column(TIMESTAMP(timezone=True), nullable=True)
    delivered_at = Column(TIMESTAMP(timezone=True), nullable=True)
    cancelled_at = Column(TIMESTAMP(timezone=True), nullable=True)
    items = relationship(
        "OrderItemRow",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemRow.id",
    )


class OrderItemRow(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(64), nullable=False)
    variant_id = Column(String(64), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)
    order = relationship("OrderRow", back_populates="items")


class StockLedgerEntryRow(Base):
    __tablename__ = "stock_ledger_entries"
    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(64), nullable=False, index=True)
    delta = Column(Integer, nullable=False)
    reason = Column(String(20), nullable=False)
    order_id = Column(String(36), nullable=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)


class OutboxEventRow(Base):
    __tablename__ = "outbox_events"
    __table_args__ = (
        Index("ix_outbox_events_unpublished", "published_at", "created_at"),
    )
    id = Column(String(36), primary_key=True)
    aggregate_type = Column(String(64), nullable=False)
    aggregate_id = Column(String(64), nullable=False)
    event_type = Column(String(64), nullable=False)
    payload = Column(JSON, nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False)
    published_at = Column(TIMESTAMP(timezone=True), nullable=True)
