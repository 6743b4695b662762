import logging
import time
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from hotel_orders.core.config import settings
from hotel_orders.core.errors import OrderServiceError

# 1. Infrastructure & Domain Imports
from hotel_orders.domain import models  # noqa: F401  (registers tables on Base)
from hotel_orders.domain.order_code import OrderCodeGenerator
from hotel_orders.infrastructure.database import Base, make_engine, make_session_factory
from hotel_orders.infrastructure.delivery_ledger import DeliveryLedger
from hotel_orders.infrastructure.notification_service import NotificationService
from hotel_orders.infrastructure.paystack_gateway import PaystackGateway
from hotel_orders.infrastructure.repositories.customer_repository import PostgresCustomerRepository
from hotel_orders.infrastructure.repositories.order_repository import PostgresOrderRepository
from hotel_orders.application.order_service import OrderService
from hotel_orders.application.payment_reconciler import PaymentReconciler
from hotel_orders.interfaces import orders_api, payments_api, paystack_webhook

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# DATABASE CONNECTION (With Retry Logic)
# ---------------------------------------------------------
def connect_database(engine: Engine) -> None:
    max_retries = settings.DB_CONNECT_MAX_RETRIES
    for attempt in range(max_retries):
        try:
            logger.info(f"🔄 Attempting DB connection ({attempt + 1}/{max_retries})...")
            Base.metadata.create_all(bind=engine)
            logger.info("✅ DB Connected and Tables Created.")
            return
        except OperationalError:
            logger.warning(f"⚠️ DB not ready yet. Waiting {settings.DB_CONNECT_WAIT_SECONDS}s...")
            time.sleep(settings.DB_CONNECT_WAIT_SECONDS)
    logger.error("❌ Could not connect to DB after retries.")
    raise RuntimeError("Database unavailable")


# ---------------------------------------------------------
# COMPOSITION ROOT
# ---------------------------------------------------------
def build_services(engine: Engine):
    session_factory = make_session_factory(engine)
    order_repo = PostgresOrderRepository(session_factory)
    customer_repo = PostgresCustomerRepository(session_factory)
    gateway = PaystackGateway(
        settings.PAYSTACK_SECRET_KEY,
        api_base_url=settings.PAYSTACK_BASE_URL,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    )
    order_service = OrderService(
        order_repo=order_repo,
        customer_repo=customer_repo,
        gateway=gateway,
        code_generator=OrderCodeGenerator(),
        frontend_url=settings.FRONTEND_URL,
        max_code_attempts=settings.ORDER_CODE_MAX_ATTEMPTS,
    )
    reconciler = PaymentReconciler(
        order_repo=order_repo,
        gateway=gateway,
        secret_key=settings.PAYSTACK_SECRET_KEY,
        ledger=DeliveryLedger(settings.REDIS_URL, ttl=settings.WEBHOOK_LEDGER_TTL_SECONDS),
        notifier=NotificationService.from_settings(settings),
    )
    return order_service, reconciler


# ---------------------------------------------------------
# ERROR RENDERING
# ---------------------------------------------------------
async def order_service_error_handler(request: Request, exc: OrderServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request body", "details": details},
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


def create_app(
    order_service: Optional[OrderService] = None,
    reconciler: Optional[PaymentReconciler] = None,
) -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME)

    if order_service is None or reconciler is None:
        engine = make_engine(settings.DATABASE_URL)
        connect_database(engine)
        default_service, default_reconciler = build_services(engine)
        order_service = order_service or default_service
        reconciler = reconciler or default_reconciler

    app.state.order_service = order_service
    app.state.reconciler = reconciler

    app.add_exception_handler(OrderServiceError, order_service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Include Routers
    app.include_router(orders_api.router)
    app.include_router(payments_api.router)
    app.include_router(paystack_webhook.router)

    @app.get("/api/health")
    def health_check():
        return {"success": True, "message": "Server is running"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
