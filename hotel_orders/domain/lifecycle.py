"""
Order lifecycle state machine.

An order's lifecycle state is derived from its ``status``,
``payment_status`` and ``payment_reference`` fields. This module is pure:
it decides which transitions are legal and what field values a transition
writes. Stores apply those values with conditional updates.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from hotel_orders.core.errors import InvalidTransitionError


class OrderType(str, Enum):
    ROOM = "room"
    FOOD = "food"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class LifecycleState(str, Enum):
    CREATED = "created"
    AWAITING_PAYMENT = "awaiting_payment"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_FAILED = "payment_failed"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: FrozenSet[Tuple[LifecycleState, LifecycleState]] = frozenset([
    (LifecycleState.CREATED, LifecycleState.AWAITING_PAYMENT),
    (LifecycleState.AWAITING_PAYMENT, LifecycleState.PAYMENT_SUCCEEDED),
    (LifecycleState.AWAITING_PAYMENT, LifecycleState.PAYMENT_FAILED),
    (LifecycleState.PAYMENT_FAILED, LifecycleState.PAYMENT_SUCCEEDED),
    (LifecycleState.PAYMENT_SUCCEEDED, LifecycleState.CONFIRMED),
    # Cancellation edges
    (LifecycleState.CREATED, LifecycleState.CANCELLED),
    (LifecycleState.AWAITING_PAYMENT, LifecycleState.CANCELLED),
    (LifecycleState.PAYMENT_SUCCEEDED, LifecycleState.CANCELLED),
    (LifecycleState.PAYMENT_FAILED, LifecycleState.CANCELLED),
    (LifecycleState.CONFIRMED, LifecycleState.CANCELLED),
])

# Administrative transitions are guarded on ``status`` alone.
CONFIRMABLE_STATUSES: FrozenSet[str] = frozenset([OrderStatus.PAID.value])
CANCELLABLE_STATUSES: FrozenSet[str] = frozenset([
    OrderStatus.PENDING.value,
    OrderStatus.PAID.value,
    OrderStatus.CONFIRMED.value,
])


def state_of(status: str, payment_status: str, payment_reference: Optional[str]) -> LifecycleState:
    """Derive the lifecycle state from stored order fields."""
    if status == OrderStatus.CANCELLED.value:
        return LifecycleState.CANCELLED
    if status == OrderStatus.CONFIRMED.value:
        return LifecycleState.CONFIRMED
    if payment_status == PaymentStatus.SUCCESS.value:
        return LifecycleState.PAYMENT_SUCCEEDED
    if payment_status == PaymentStatus.FAILED.value:
        return LifecycleState.PAYMENT_FAILED
    if payment_reference:
        return LifecycleState.AWAITING_PAYMENT
    return LifecycleState.CREATED


def order_state(order) -> LifecycleState:
    return state_of(order.status, order.payment_status, order.payment_reference)


def is_valid_transition(from_state: LifecycleState, to_state: LifecycleState) -> bool:
    return (from_state, to_state) in ALLOWED_TRANSITIONS


def require_transition(order, to_state: LifecycleState) -> None:
    """Raise InvalidTransitionError unless ``order`` may move to ``to_state``."""
    current = order_state(order)
    if not is_valid_transition(current, to_state):
        raise InvalidTransitionError(
            f"Order {order.order_code} cannot move from {current.value} to {to_state.value}",
            details={"from": current.value, "to": to_state.value},
        )


def payment_success_values(current_status: str) -> Dict[str, str]:
    """
    Field values written by the PaymentSucceeded transition.

    ``status`` only moves to paid from pending: confirmed and cancelled are
    administrative states the reconciler never sets or clears.
    """
    values = {"payment_status": PaymentStatus.SUCCESS.value}
    if current_status == OrderStatus.PENDING.value:
        values["status"] = OrderStatus.PAID.value
    return values


def payment_failed_values() -> Dict[str, str]:
    # status is left untouched on failure
    return {"payment_status": PaymentStatus.FAILED.value}
