from fastapi import Request

from hotel_orders.application.order_service import OrderService
from hotel_orders.application.payment_reconciler import PaymentReconciler


# Services are built once in the composition root and kept on app.state
def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_reconciler(request: Request) -> PaymentReconciler:
    return request.app.state.reconciler
