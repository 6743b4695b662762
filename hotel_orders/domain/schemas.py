"""
Request bodies and response shapes for the storefront API.

Requests arrive in camelCase (``customerData``, ``totalAmount``...) and are
validated with Pydantic. Responses are plain dicts in the same camelCase
style, with the owning customer embedded in every order.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hotel_orders.domain.lifecycle import OrderType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomerProfile(CamelModel):
    email: str = Field(..., min_length=3, max_length=320, description="Email address")
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=1, max_length=40)

    @field_validator("email")
    @classmethod
    def email_has_at_sign(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("email must contain '@'")
        return value


class LineItem(CamelModel):
    id: str = Field(..., description="Room or menu item id")
    name: str = Field(..., description="Item name snapshot")
    price: float = Field(..., ge=0, description="Unit price snapshot")
    quantity: int = Field(1, ge=1)
    # Room bookings
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    # Food orders
    category: Optional[str] = None


class CreateOrderRequest(CamelModel):
    customer_data: CustomerProfile
    type: OrderType
    items: List[LineItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0, description="Total as supplied by the storefront")


class InitializePaymentRequest(CamelModel):
    order_id: int
    email: Optional[str] = None


class VerifyPaymentRequest(CamelModel):
    reference: str = Field(..., min_length=1)


class VerifyOrderRequest(CamelModel):
    email: Optional[str] = None
    order_code: Optional[str] = None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def customer_to_dict(customer) -> dict:
    return {
        "id": customer.id,
        "email": customer.email,
        "firstName": customer.first_name,
        "lastName": customer.last_name,
        "phone": customer.phone,
        "createdAt": _iso(customer.created_at),
    }


def order_to_dict(order) -> dict:
    return {
        "id": order.id,
        "customer": customer_to_dict(order.customer) if order.customer is not None else None,
        "orderCode": order.order_code,
        "type": order.type,
        "items": list(order.items or []),
        "totalAmount": order.total_amount,
        "status": order.status,
        "paymentReference": order.payment_reference,
        "paymentStatus": order.payment_status,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }
