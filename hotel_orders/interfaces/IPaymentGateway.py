from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class InitializedPayment:
    authorization_url: str
    access_code: str
    reference: str


@dataclass(frozen=True)
class GatewayTransaction:
    status: str
    amount: int  # minor units
    reference: str
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)


class IPaymentGateway(ABC):
    @abstractmethod
    def initialize(
        self,
        amount: int,
        reference: str,
        callback_url: str,
        email: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> InitializedPayment:
        """Start a transaction. ``amount`` is in minor units. Raises UpstreamGatewayError."""
        pass

    @abstractmethod
    def verify(self, reference: str) -> GatewayTransaction:
        """Current state of a transaction. Raises UpstreamGatewayError."""
        pass
