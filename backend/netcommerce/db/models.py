"""
SQLAlchemy ORM Models for the NetCommerce Gateway

Defines database models matching the schema in init_db.py.
These tables back the order store the callback service transitions.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class OrderModel(Base):
    """
    ORM model for orders table.

    Status changes go through conditional updates in the order store.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    status = Column(String, nullable=False, default="pending", index=True)
    total = Column(String, nullable=False)  # decimal string, major units
    currency = Column(String, nullable=False, default="USD")
    customer_id = Column(Integer)
    cart_session_id = Column(String, index=True)
    payment_reference = Column(String)
    billing_first_name = Column(String)
    billing_last_name = Column(String)
    billing_email = Column(String)
    billing_phone = Column(String)
    billing_address_1 = Column(String)
    billing_address_2 = Column(String)
    billing_city = Column(String)
    billing_state = Column(String)
    billing_postcode = Column(String)
    billing_country = Column(String)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'on_hold', 'paid', 'failed', 'cancelled')",
            name="order_status_check"
        ),
    )


class OrderNoteModel(Base):
    """
    ORM model for order_notes table.

    Append-only audit trail of payment events.
    """
    __tablename__ = "order_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    note = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class CartItemModel(Base):
    """
    ORM model for cart_items table.

    Pending cart lines per buyer session, emptied once payment is approved.
    """
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, nullable=False, index=True)
    product_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
