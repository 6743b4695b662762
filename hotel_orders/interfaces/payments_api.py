from fastapi import APIRouter, Depends

from hotel_orders.application.order_service import OrderService
from hotel_orders.application.payment_reconciler import PaymentReconciler
from hotel_orders.domain.schemas import InitializePaymentRequest, VerifyPaymentRequest
from hotel_orders.interfaces.dependencies import get_order_service, get_reconciler

router = APIRouter(prefix="/api/payments")


@router.post("/initialize")
def initialize_payment(payload: InitializePaymentRequest, service: OrderService = Depends(get_order_service)):
    payment = service.initialize_payment(payload.order_id, payload.email)
    return {
        "success": True,
        "authorization_url": payment.authorization_url,
        "access_code": payment.access_code,
        "reference": payment.reference,
    }


@router.post("/verify")
def verify_payment(payload: VerifyPaymentRequest, reconciler: PaymentReconciler = Depends(get_reconciler)):
    result = reconciler.verify(payload.reference)
    return {
        "success": True,
        "status": result.status,
        "amount": result.amount,
        "reference": result.reference,
    }
