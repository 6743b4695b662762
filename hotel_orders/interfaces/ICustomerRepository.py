from abc import ABC, abstractmethod
from typing import Optional

from hotel_orders.domain.models import Customer


class ICustomerRepository(ABC):
    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Case-insensitive lookup."""
        pass

    @abstractmethod
    def add(self, customer: Customer) -> Customer:
        """Insert a new customer. Raises DuplicateEmailError if the email is taken."""
        pass
