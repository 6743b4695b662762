"""
Payment reconciliation.

Paystack reports a payment outcome two ways: the client polls
``/transaction/verify`` after checkout, and Paystack pushes a
``charge.success`` webhook (at least once, in any order relative to the
poll). Both paths funnel into ``apply_success``, which is a single
conditional update in the order store, so whichever arrives first wins and
every later arrival only refreshes ``updated_at``.
"""

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hotel_orders.domain.lifecycle import PaymentStatus
from hotel_orders.domain.money import to_major_units
from hotel_orders.infrastructure.delivery_ledger import DeliveryLedger
from hotel_orders.infrastructure.notification_service import NotificationService
from hotel_orders.interfaces.IOrderRepository import IOrderRepository, UpdateResult
from hotel_orders.interfaces.IPaymentGateway import IPaymentGateway

logger = logging.getLogger(__name__)

CHARGE_SUCCESS_EVENT = "charge.success"


class WebhookOutcome(str, Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    DUPLICATE_DELIVERY = "duplicate_delivery"
    UNKNOWN_ORDER = "unknown_order"
    IGNORED = "ignored"
    BAD_SIGNATURE = "bad_signature"


@dataclass(frozen=True)
class VerificationResult:
    status: str
    amount: float  # major units
    reference: str


class PaymentReconciler:
    def __init__(
        self,
        order_repo: IOrderRepository,
        gateway: IPaymentGateway,
        secret_key: str,
        ledger: Optional[DeliveryLedger] = None,
        notifier: Optional[NotificationService] = None,
    ):
        self.order_repo = order_repo
        self.gateway = gateway
        self.secret_key = secret_key
        self.ledger = ledger or DeliveryLedger()
        self.notifier = notifier

    # --- VERIFY PATH ---

    def verify(self, reference: str) -> VerificationResult:
        """
        Ask the gateway for the transaction status and apply it to the
        matching order, if any. The gateway's answer is returned whether or
        not an order carries this reference.
        """
        transaction = self.gateway.verify(reference)

        if transaction.status == PaymentStatus.SUCCESS.value:
            self.apply_success(reference)
        elif transaction.status == PaymentStatus.FAILED.value:
            result = self.order_repo.mark_payment_failed(reference)
            if result is UpdateResult.APPLIED:
                logger.info(f"Payment failed for reference {reference}")

        return VerificationResult(
            status=transaction.status,
            amount=to_major_units(transaction.amount),
            reference=transaction.reference,
        )

    # --- WEBHOOK PATH ---

    def signature_matches(self, raw_body: bytes, signature: Optional[str]) -> bool:
        if not signature:
            return False
        expected = hmac.new(self.secret_key.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))

    def handle_webhook(self, raw_body: bytes, signature: Optional[str]) -> WebhookOutcome:
        """
        Process one webhook delivery. Only a correctly signed
        ``charge.success`` event can change an order; everything else is
        reported back as an outcome for the caller to acknowledge.
        """
        if not self.signature_matches(raw_body, signature):
            logger.warning("⚠️ Paystack webhook signature mismatch. Event discarded.")
            return WebhookOutcome.BAD_SIGNATURE

        try:
            event = json.loads(raw_body)
        except ValueError:
            logger.warning("⚠️ Paystack webhook body is not valid JSON. Ignored.")
            return WebhookOutcome.IGNORED

        if not isinstance(event, dict) or event.get("event") != CHARGE_SUCCESS_EVENT:
            event_type = event.get("event") if isinstance(event, dict) else None
            logger.info(f"Paystack webhook {event_type!r} ignored")
            return WebhookOutcome.IGNORED

        data = event.get("data")
        reference = data.get("reference") if isinstance(data, dict) else None
        if not reference:
            logger.warning("⚠️ charge.success webhook without a reference. Ignored.")
            return WebhookOutcome.IGNORED

        key = DeliveryLedger.key_for(CHARGE_SUCCESS_EVENT, reference)
        if self.ledger.seen(key):
            logger.info(f"Duplicate charge.success delivery for {reference}")
            return WebhookOutcome.DUPLICATE_DELIVERY

        result = self.apply_success(reference)
        if result is UpdateResult.NOT_FOUND:
            logger.info(f"charge.success for unknown reference {reference}")
            return WebhookOutcome.UNKNOWN_ORDER

        self.ledger.record(key)
        if result is UpdateResult.APPLIED:
            return WebhookOutcome.APPLIED
        return WebhookOutcome.ALREADY_APPLIED

    # --- SHARED TRANSITION ---

    def apply_success(self, reference: str) -> UpdateResult:
        result = self.order_repo.mark_payment_succeeded(reference)
        if result is UpdateResult.APPLIED:
            logger.info(f"✅ Payment succeeded for reference {reference}")
            self._notify(reference)
        return result

    def _notify(self, reference: str) -> None:
        if self.notifier is None or not self.notifier.enabled:
            return
        order = self.order_repo.get_by_payment_reference(reference)
        if order is not None:
            self.notifier.notify_front_desk_payment(order)
