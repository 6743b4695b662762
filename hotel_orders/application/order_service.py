import logging
import time
from typing import Callable, List, Optional, Tuple

from hotel_orders.core.errors import (
    CodeAllocationExhausted,
    DuplicateEmailError,
    DuplicateOrderCodeError,
    InvalidTransitionError,
    NotFoundError,
    OwnershipMismatchError,
    PersistenceError,
    ValidationError,
)
from hotel_orders.domain.lifecycle import (
    CANCELLABLE_STATUSES,
    CONFIRMABLE_STATUSES,
    LifecycleState,
    OrderStatus,
    OrderType,
    PaymentStatus,
    is_valid_transition,
    order_state,
    require_transition,
)
from hotel_orders.domain.models import Customer, Order, utcnow
from hotel_orders.domain.money import to_minor_units
from hotel_orders.domain.order_code import OrderCodeGenerator
from hotel_orders.domain.schemas import CustomerProfile, LineItem
from hotel_orders.interfaces.ICustomerRepository import ICustomerRepository
from hotel_orders.interfaces.IOrderRepository import IOrderRepository, UpdateResult
from hotel_orders.interfaces.IPaymentGateway import IPaymentGateway, InitializedPayment

logger = logging.getLogger(__name__)

DEFAULT_MAX_CODE_ATTEMPTS = 5


class OrderService:
    """
    Orchestrates customers, orders and payment initialization.

    Stores and the gateway are injected; nothing here keeps state between
    requests, so any number of service instances can run side by side.
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        customer_repo: ICustomerRepository,
        gateway: IPaymentGateway,
        code_generator: Optional[OrderCodeGenerator] = None,
        frontend_url: str = "http://localhost:3000",
        max_code_attempts: int = DEFAULT_MAX_CODE_ATTEMPTS,
        clock: Callable[[], float] = time.time,
    ):
        self.order_repo = order_repo
        self.customer_repo = customer_repo
        self.gateway = gateway
        self.code_generator = code_generator or OrderCodeGenerator()
        self.frontend_url = frontend_url.rstrip("/")
        self.max_code_attempts = max_code_attempts
        self.clock = clock

    # --- CUSTOMERS ---

    def resolve_or_create_customer(self, profile: CustomerProfile) -> Customer:
        """Get-or-create keyed by case-insensitive email. Existing customers are never modified."""
        existing = self.customer_repo.get_by_email(profile.email)
        if existing is not None:
            return existing

        customer = Customer(
            email=profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
            phone=profile.phone,
            created_at=utcnow(),
        )
        try:
            created = self.customer_repo.add(customer)
        except DuplicateEmailError:
            # A concurrent request registered the same email first
            winner = self.customer_repo.get_by_email(profile.email)
            if winner is None:
                raise PersistenceError("Customer vanished after email conflict")
            return winner

        logger.info(f"✅ Customer registered: id={created.id}")
        return created

    # --- ORDERS ---

    def create_order(
        self,
        profile: CustomerProfile,
        order_type: OrderType,
        items: List[LineItem],
        total_amount: float,
    ) -> Tuple[Order, str]:
        """
        Create an order in the Created state with a freshly allocated code.

        Each attempt inserts with a new candidate code; the store's unique
        constraint rejects collisions and only those are retried. The
        customer is committed first and is kept even if the order insert
        fails.
        """
        customer = self.resolve_or_create_customer(profile)
        line_items = [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items]

        for attempt in range(1, self.max_code_attempts + 1):
            now = utcnow()
            order = Order(
                customer_id=customer.id,
                order_code=self.code_generator.generate(),
                type=OrderType(order_type).value,
                items=line_items,
                total_amount=total_amount,
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                payment_reference=None,
                created_at=now,
                updated_at=now,
            )
            try:
                saved = self.order_repo.add(order)
            except DuplicateOrderCodeError as e:
                logger.warning(
                    f"⚠️ Order code collision on {e.order_code} "
                    f"(attempt {attempt}/{self.max_code_attempts}), regenerating"
                )
                continue

            logger.info(f"✅ Order created: {saved.order_code} ({saved.type}) for customer {customer.id}")
            return saved, saved.order_code

        logger.error(f"❌ Could not allocate an order code after {self.max_code_attempts} attempts")
        raise CodeAllocationExhausted(
            "Could not allocate a unique order code",
            details={"attempts": self.max_code_attempts},
        )

    def track_by_code(self, order_code: str) -> Order:
        order = self.order_repo.get_by_code(order_code)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def verify_ownership(self, email: str, order_code: str) -> Order:
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email address is required")

        order = self.track_by_code(order_code)
        owner_email = order.customer.email if order.customer is not None else ""
        if owner_email.lower() != email.lower():
            raise OwnershipMismatchError("This order does not belong to the provided email address")
        return order

    def orders_for_email(self, email: str) -> Tuple[Customer, List[Order]]:
        customer = self.customer_repo.get_by_email(email)
        if customer is None:
            raise NotFoundError("No orders found for this email address")
        return customer, self.order_repo.list_for_customer(customer.id)

    # --- PAYMENTS ---

    def initialize_payment(self, order_id: int, email: Optional[str] = None) -> InitializedPayment:
        """
        Start a gateway transaction for an order and record its reference.

        The reference is written only if the order has none yet, so it never
        changes once set. A gateway failure leaves the order untouched.
        """
        order = self.order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order not found")

        if order.payment_reference:
            raise ValidationError(
                "Payment already initialized for this order",
                details={"reference": order.payment_reference},
            )
        if not is_valid_transition(order_state(order), LifecycleState.AWAITING_PAYMENT):
            raise ValidationError(f"Order cannot be paid while {order.status}")

        reference = f"order_{order.id}_{int(self.clock() * 1000)}"
        customer = order.customer
        payment = self.gateway.initialize(
            amount=to_minor_units(order.total_amount),
            reference=reference,
            callback_url=f"{self.frontend_url}/payment/callback",
            email=email or customer.email,
            metadata={
                "orderId": order.id,
                "customerName": f"{customer.first_name} {customer.last_name}",
                "orderType": order.type,
            },
        )

        if not self.order_repo.attach_payment_reference(order.id, reference):
            logger.warning(f"⚠️ Order {order.order_code} got a payment reference concurrently")
            raise ValidationError("Payment already initialized for this order")

        logger.info(f"✅ Payment initialized for {order.order_code}: {reference}")
        return InitializedPayment(
            authorization_url=payment.authorization_url,
            access_code=payment.access_code,
            reference=reference,
        )

    # --- ADMINISTRATIVE ---

    def confirm_order(self, order_code: str) -> Order:
        return self._administer(order_code, LifecycleState.CONFIRMED, OrderStatus.CONFIRMED, CONFIRMABLE_STATUSES)

    def cancel_order(self, order_code: str) -> Order:
        return self._administer(order_code, LifecycleState.CANCELLED, OrderStatus.CANCELLED, CANCELLABLE_STATUSES)

    def _administer(self, order_code, to_state, new_status, allowed_from) -> Order:
        order = self.track_by_code(order_code)
        require_transition(order, to_state)

        result = self.order_repo.update_status(order.id, new_status.value, allowed_from)
        if result is not UpdateResult.APPLIED:
            # The order moved between our read and the conditional update
            raise InvalidTransitionError(
                f"Order {order_code} changed concurrently; cannot move to {to_state.value}"
            )

        logger.info(f"✅ Order {order_code} is now {new_status.value}")
        return self.track_by_code(order_code)
