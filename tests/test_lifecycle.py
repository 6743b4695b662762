import pytest

from hotel_orders.core.errors import InvalidTransitionError
from hotel_orders.domain.lifecycle import (
    ALLOWED_TRANSITIONS,
    LifecycleState,
    is_valid_transition,
    payment_failed_values,
    payment_success_values,
    require_transition,
    state_of,
)
from hotel_orders.domain.models import Order


@pytest.mark.parametrize("status, payment_status, reference, expected", [
    ("pending", "pending", None, LifecycleState.CREATED),
    ("pending", "pending", "order_1_1", LifecycleState.AWAITING_PAYMENT),
    ("paid", "success", "order_1_1", LifecycleState.PAYMENT_SUCCEEDED),
    ("pending", "failed", "order_1_1", LifecycleState.PAYMENT_FAILED),
    ("confirmed", "success", "order_1_1", LifecycleState.CONFIRMED),
    ("cancelled", "success", "order_1_1", LifecycleState.CANCELLED),
    ("cancelled", "pending", None, LifecycleState.CANCELLED),
])
def test_state_is_derived_from_stored_fields(status, payment_status, reference, expected):
    assert state_of(status, payment_status, reference) is expected


def test_cancelled_is_terminal():
    assert not any(src is LifecycleState.CANCELLED for src, _ in ALLOWED_TRANSITIONS)


def test_every_non_terminal_state_can_be_cancelled():
    for state in LifecycleState:
        if state is not LifecycleState.CANCELLED:
            assert is_valid_transition(state, LifecycleState.CANCELLED)


def test_success_never_goes_back_to_awaiting_or_failed():
    assert not is_valid_transition(LifecycleState.PAYMENT_SUCCEEDED, LifecycleState.AWAITING_PAYMENT)
    assert not is_valid_transition(LifecycleState.PAYMENT_SUCCEEDED, LifecycleState.PAYMENT_FAILED)
    assert not is_valid_transition(LifecycleState.PAYMENT_SUCCEEDED, LifecycleState.CREATED)


def test_late_success_after_failure_is_allowed():
    assert is_valid_transition(LifecycleState.PAYMENT_FAILED, LifecycleState.PAYMENT_SUCCEEDED)


def test_success_values_only_promote_pending_status():
    assert payment_success_values("pending") == {"payment_status": "success", "status": "paid"}
    assert payment_success_values("cancelled") == {"payment_status": "success"}
    assert payment_success_values("confirmed") == {"payment_status": "success"}


def test_failure_leaves_status_alone():
    assert payment_failed_values() == {"payment_status": "failed"}


def test_require_transition_names_both_states():
    order = Order(order_code="PH000001ABCD", status="pending", payment_status="pending", payment_reference=None)

    with pytest.raises(InvalidTransitionError) as excinfo:
        require_transition(order, LifecycleState.CONFIRMED)

    assert excinfo.value.details == {"from": "created", "to": "confirmed"}
    assert excinfo.value.status_code == 409
