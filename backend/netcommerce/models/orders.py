"""
Pydantic Order Model

Read model of an order as handed out by the order store.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    ON_HOLD = "on_hold"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


# Statuses a payment may still complete from
PAYABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.ON_HOLD, OrderStatus.FAILED)


class BillingAddress(BaseModel):
    """Buyer details. Informational only, never signed."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address_1: Optional[str] = None
    address_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None


class OrderNote(BaseModel):
    note: str
    created_at: datetime


class Order(BaseModel):
    """
    Order as owned by the order store.

    Notes:
    - total is a Decimal in major units of currency
    - cart_session_id links the order to the buyer's pending cart
    - payment_reference holds the NetCommerce authorization number once paid
    """
    id: int = Field(ge=0)
    status: OrderStatus = OrderStatus.PENDING
    total: Decimal
    currency: str = "USD"
    customer_id: Optional[int] = None
    cart_session_id: Optional[str] = None
    payment_reference: Optional[str] = None
    billing: BillingAddress = Field(default_factory=BillingAddress)
    notes: List[OrderNote] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 42,
                "status": "pending",
                "total": "19.99",
                "currency": "USD",
                "customer_id": 7,
                "cart_session_id": "sess_5f2a",
                "payment_reference": None,
                "billing": {
                    "first_name": "Rami",
                    "last_name": "Haddad",
                    "email": "rami@example.com",
                    "phone": "+961 3 123 456",
                    "city": "Beirut",
                    "country": "LB"
                },
                "notes": []
            }
        }
    }

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_STATUSES
