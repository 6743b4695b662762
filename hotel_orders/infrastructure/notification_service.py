from twilio.base.exceptions import TwilioException
from twilio.rest import Client
import logging

logger = logging.getLogger(__name__)

class NotificationService:
    def __init__(self, account_sid=None, auth_token=None, from_number=None, front_desk_number=None, client=None):
        self.client = client
        self.enabled = client is not None
        self.from_number = from_number
        self.front_desk_number = front_desk_number

        # Only initialize if credentials exist in .env
        if self.client is None and account_sid and auth_token:
            try:
                self.client = Client(account_sid, auth_token)
                self.enabled = True
                logger.info("✅ NotificationService: Twilio Client Initialized")
            except TwilioException as e:
                logger.error(f"❌ Failed to initialize Twilio Client: {e}")
        elif self.client is None:
            logger.info("⚠️ NotificationService: Credentials missing in .env. Notifications disabled.")

    @classmethod
    def from_settings(cls, settings):
        return cls(
            account_sid=settings.TWILIO_ACCOUNT_SID,
            auth_token=settings.TWILIO_AUTH_TOKEN,
            from_number=settings.TWILIO_FROM_NUMBER,
            front_desk_number=settings.FRONT_DESK_PHONE_NUMBER,
        )

    def notify_front_desk_payment(self, order) -> bool:
        """Sends a WhatsApp message to the front desk when an order is paid."""
        if not self.enabled or not self.front_desk_number or not self.from_number:
            logger.debug("NotificationService disabled or front desk number missing.")
            return False

        items = order.items or []
        order_summary = "\n".join(
            f"- {item.get('quantity', 1)}x {item.get('name', 'Unknown')}" for item in items
        )
        customer = order.customer
        customer_name = f"{customer.first_name} {customer.last_name}" if customer is not None else "Unknown"
        message_body = (
            f"🔔 *PAYMENT RECEIVED*\n\n"
            f"🧾 Order: {order.order_code} ({order.type})\n"
            f"👤 Guest: {customer_name}\n"
            f"💳 Amount: {order.total_amount:.2f}\n"
            f"🛒 Items:\n{order_summary}\n\n"
            f"💡 *Action:* Confirm the order in the admin panel."
        )

        try:
            # Twilio requires the "whatsapp:" prefix
            from_number = self._whatsapp(self.from_number)
            to_number = self._whatsapp(self.front_desk_number)

            self.client.messages.create(
                from_=from_number,
                body=message_body,
                to=to_number
            )
            logger.info(f"✅ Front desk notified of payment for {order.order_code}")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to send front desk notification: {e}")
            return False

    @staticmethod
    def _whatsapp(number: str) -> str:
        return number if "whatsapp:" in number else f"whatsapp:{number}"
