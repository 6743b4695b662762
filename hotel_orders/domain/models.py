from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Float, JSON, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from hotel_orders.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), nullable=False)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    phone = Column(String(40), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    orders = relationship("Order", back_populates="customer")

    # Emails are compared case-insensitively, so uniqueness is on lower(email)
    __table_args__ = (
        Index("uq_customers_email_lower", func.lower(email), unique=True),
    )


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    order_code = Column(String(32), nullable=False)
    type = Column(String(10), nullable=False)  # room, food

    # Line items are a snapshot of what was ordered, kept as JSON.
    items = Column(JSON, nullable=False, default=list)

    # Supplied by the caller at creation and never recomputed from items.
    total_amount = Column(Float, nullable=False)

    status = Column(String(20), nullable=False, default="pending")  # pending, paid, confirmed, cancelled
    payment_reference = Column(String(120), nullable=True)
    payment_status = Column(String(20), nullable=False, default="pending")  # pending, success, failed

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    customer = relationship("Customer", back_populates="orders", lazy="joined")

    __table_args__ = (
        Index("uq_orders_order_code", "order_code", unique=True),
        Index("uq_orders_payment_reference", "payment_reference", unique=True),
    )
