"""
Error taxonomy for the ordering core.

Every error carries the HTTP status it maps to, so the API layer can render
it as ``{"success": false, "error": ..., "details": ...}`` without knowing
which component raised it.
"""
from typing import Any, Optional


class OrderServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"success": False, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(OrderServiceError):
    status_code = 400


class NotFoundError(OrderServiceError):
    status_code = 404


class OwnershipMismatchError(OrderServiceError):
    status_code = 403


class InvalidTransitionError(OrderServiceError):
    status_code = 409


class UpstreamGatewayError(OrderServiceError):
    status_code = 500


class CodeAllocationExhausted(OrderServiceError):
    status_code = 500


class PersistenceError(OrderServiceError):
    status_code = 500


class DuplicateOrderCodeError(PersistenceError):
    """Raised by a store when an insert loses the order-code unique constraint."""

    def __init__(self, order_code: str):
        super().__init__(f"Order code already taken: {order_code}")
        self.order_code = order_code


class DuplicateEmailError(PersistenceError):
    """Raised by a store when an insert loses the customer email unique constraint."""

    def __init__(self, email: str):
        super().__init__(f"Customer email already registered: {email}")
        self.email = email
