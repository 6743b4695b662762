from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, List, Optional

from hotel_orders.domain.models import Order


class UpdateResult(str, Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    SKIPPED = "skipped"
    NOT_FOUND = "not_found"


class IOrderRepository(ABC):
    @abstractmethod
    def add(self, order: Order) -> Order:
        """Insert a new order. Raises DuplicateOrderCodeError on a code collision."""
        pass

    @abstractmethod
    def get_by_id(self, order_id: int) -> Optional[Order]:
        pass

    @abstractmethod
    def get_by_code(self, order_code: str) -> Optional[Order]:
        pass

    @abstractmethod
    def get_by_payment_reference(self, reference: str) -> Optional[Order]:
        pass

    @abstractmethod
    def list_for_customer(self, customer_id: int) -> List[Order]:
        """Orders of one customer, newest first."""
        pass

    @abstractmethod
    def attach_payment_reference(self, order_id: int, reference: str) -> bool:
        """Set the reference only if none is set yet. False if another caller won."""
        pass

    @abstractmethod
    def mark_payment_succeeded(self, reference: str) -> UpdateResult:
        """
        Atomically apply the PaymentSucceeded transition.

        APPLIED when the order moved to success, ALREADY_APPLIED when it was
        already successful (only updated_at is refreshed), NOT_FOUND when no
        order carries the reference.
        """
        pass

    @abstractmethod
    def mark_payment_failed(self, reference: str) -> UpdateResult:
        """Apply PaymentFailed while payment is still pending; SKIPPED otherwise."""
        pass

    @abstractmethod
    def update_status(self, order_id: int, new_status: str, allowed_from: Iterable[str]) -> UpdateResult:
        """Set status only if the current status is one of ``allowed_from``."""
        pass
