from fastapi import APIRouter, Depends

from hotel_orders.application.order_service import OrderService
from hotel_orders.core.errors import ValidationError
from hotel_orders.domain.schemas import (
    CreateOrderRequest,
    CustomerProfile,
    VerifyOrderRequest,
    customer_to_dict,
    order_to_dict,
)
from hotel_orders.interfaces.dependencies import get_order_service

router = APIRouter(prefix="/api")


@router.post("/customers", status_code=201)
def create_customer(payload: CustomerProfile, service: OrderService = Depends(get_order_service)):
    customer = service.resolve_or_create_customer(payload)
    return {"success": True, "customer": customer_to_dict(customer)}


@router.post("/orders", status_code=201)
def create_order(payload: CreateOrderRequest, service: OrderService = Depends(get_order_service)):
    order, order_code = service.create_order(
        payload.customer_data,
        payload.type,
        payload.items,
        payload.total_amount,
    )
    return {"success": True, "order": order_to_dict(order), "orderCode": order_code}


@router.get("/orders/customer/{email}")
def orders_by_email(email: str, service: OrderService = Depends(get_order_service)):
    customer, orders = service.orders_for_email(email)
    return {
        "success": True,
        "orders": [order_to_dict(o) for o in orders],
        "customer": customer_to_dict(customer),
    }


@router.get("/orders/track/{order_code}")
def track_order(order_code: str, service: OrderService = Depends(get_order_service)):
    """Full order details by code, for internal use."""
    order = service.track_by_code(order_code)
    return {"success": True, "order": order_to_dict(order)}


@router.post("/orders/verify")
def verify_order(payload: VerifyOrderRequest, service: OrderService = Depends(get_order_service)):
    """
    Customer-facing lookup. With an order code, checks that the order belongs
    to the email; without one, lists every order of that email.
    """
    email = (payload.email or "").strip()
    if not email:
        raise ValidationError("Email address is required")

    if payload.order_code:
        order = service.verify_ownership(email, payload.order_code)
        return {"success": True, "message": "Order verified successfully", "order": order_to_dict(order)}

    customer, orders = service.orders_for_email(email)
    return {
        "success": True,
        "orders": [order_to_dict(o) for o in orders],
        "customer": customer_to_dict(customer),
    }


# --- ADMIN ---

@router.post("/admin/orders/{order_code}/confirm")
def confirm_order(order_code: str, service: OrderService = Depends(get_order_service)):
    return {"success": True, "order": order_to_dict(service.confirm_order(order_code))}


@router.post("/admin/orders/{order_code}/cancel")
def cancel_order(order_code: str, service: OrderService = Depends(get_order_service)):
    return {"success": True, "order": order_to_dict(service.cancel_order(order_code))}
