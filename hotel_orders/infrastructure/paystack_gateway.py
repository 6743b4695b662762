import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from hotel_orders.core.errors import UpstreamGatewayError
from hotel_orders.interfaces.IPaymentGateway import GatewayTransaction, IPaymentGateway, InitializedPayment

logger = logging.getLogger(__name__)

_PAYSTACK_API_BASE = "https://api.paystack.co"
_INITIALIZE_ENDPOINT = "/transaction/initialize"
_VERIFY_ENDPOINT = "/transaction/verify/{reference}"


class PaystackGateway(IPaymentGateway):
    """
    Paystack REST client. Every call is a single bounded request: failures
    are raised as UpstreamGatewayError with Paystack's message as details,
    never retried here.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        api_base_url: str = _PAYSTACK_API_BASE,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not secret_key:
            logger.warning("⚠️ PaystackGateway: no secret key configured")
        self.client = httpx.Client(
            base_url=api_base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def initialize(
        self,
        amount: int,
        reference: str,
        callback_url: str,
        email: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> InitializedPayment:
        payload = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "callback_url": callback_url,
            "metadata": metadata or {},
        }
        data = self._request("POST", _INITIALIZE_ENDPOINT, "Payment initialization failed", json=payload)
        return InitializedPayment(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code", ""),
            reference=data.get("reference") or reference,
        )

    def verify(self, reference: str) -> GatewayTransaction:
        # The reference comes from the client; it must stay one path segment
        path = _VERIFY_ENDPOINT.format(reference=quote(reference, safe=""))
        data = self._request("GET", path, "Payment verification failed")
        return GatewayTransaction(
            status=data.get("status", ""),
            amount=int(data.get("amount") or 0),
            reference=data.get("reference") or reference,
            raw=data,
        )

    def _request(self, method: str, path: str, failure_message: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ Paystack {method} {path} failed: {e}")
            raise UpstreamGatewayError(failure_message, details=str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_error or not body.get("status"):
            detail = body.get("message") or response.text or f"HTTP {response.status_code}"
            logger.error(f"❌ Paystack {method} {path} returned {response.status_code}: {detail}")
            raise UpstreamGatewayError(failure_message, details=detail)

        data = body.get("data") or {}
        if not isinstance(data, dict):
            logger.error(f"❌ Paystack {method} {path} returned unexpected data: {data!r}")
            raise UpstreamGatewayError(failure_message, details="Unexpected response from payment gateway")
        return data
