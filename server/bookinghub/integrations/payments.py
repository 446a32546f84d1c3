"""Stripe checkout sessions and webhook signature verification."""

import asyncio
import json
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import stripe

from ..core.config import Settings
from ..core.exceptions import SignatureError, UpstreamError
from ..core.observability import get_logger

logger = get_logger(__name__)

PRODUCT_NAME = "Property Booking"

# Stripe's default tolerance for signed webhook timestamps
SIGNATURE_TOLERANCE_SECONDS = 300


@dataclass(frozen=True)
class CheckoutSession:
    """The parts of a hosted checkout session this service keeps."""
    id: str
    url: Optional[str]


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to integer minor units, rounding half up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway:
    """
    Thin wrapper over the Stripe API.

    One instance is created per process by the application lifespan. Stripe's
    own retry logic is disabled; a failed call is reported once as an
    UpstreamError and never re-attempted.
    """

    def __init__(
        self,
        secret_key: str,
        webhook_secret: str,
        success_url: str,
        cancel_url: str,
        currency: str = "usd",
        timeout: float = 10.0,
    ):
        self.webhook_secret = webhook_secret
        self.success_url = success_url
        self.cancel_url = cancel_url
        self.currency = currency
        self.timeout = timeout
        self._client = stripe.StripeClient(secret_key, max_network_retries=0) if secret_key else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentGateway":
        return cls(
            secret_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            success_url=settings.payment_success_url,
            cancel_url=settings.payment_cancel_url,
            currency=settings.stripe_currency,
            timeout=settings.outbound_timeout_seconds,
        )

    def build_session_params(self, booking_id: str, amount: Decimal) -> dict[str, Any]:
        """Checkout session parameters for a single booking charge."""
        return {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {"name": PRODUCT_NAME},
                        "unit_amount": to_minor_units(amount),
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "metadata": {"booking_id": booking_id},
        }

    async def create_checkout_session(self, booking_id: str, amount: Decimal) -> CheckoutSession:
        """
        Open a hosted checkout session charging ``amount`` for a booking.

        Raises:
            UpstreamError: Stripe rejected the call or did not answer in time
        """
        params = self.build_session_params(booking_id, amount)

        try:
            session = await asyncio.wait_for(self._create_session(params), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error("Stripe session creation timed out", booking_id=booking_id, timeout=self.timeout)
            raise UpstreamError(
                error="Payment processor did not respond",
                details="timeout",
                status_code=502,
            ) from e
        except stripe.StripeError as e:
            logger.error(
                "Stripe session creation failed",
                booking_id=booking_id,
                error=str(e),
                http_status=getattr(e, "http_status", None),
            )
            raise UpstreamError(
                error="Failed to create payment session",
                details=getattr(e, "user_message", None) or str(e),
                status_code=502,
            ) from e

        logger.info("Stripe checkout session created", booking_id=booking_id, session_id=session.id)
        return session

    async def _create_session(self, params: dict[str, Any]) -> CheckoutSession:
        if self._client is None:
            raise UpstreamError(
                error="Payment processor is not configured",
                details="STRIPE_SECRET_KEY is not set",
                status_code=502,
            )

        session = await asyncio.to_thread(self._client.checkout.sessions.create, params=params)
        return CheckoutSession(id=session.id, url=session.url)

    def verify_webhook(self, payload: bytes, signature: Optional[str]) -> dict[str, Any]:
        """
        Verify a webhook body against its ``Stripe-Signature`` header.

        Args:
            payload: The raw request body, exactly as received
            signature: The ``Stripe-Signature`` header value

        Returns:
            dict: The decoded event

        Raises:
            SignatureError: The header is missing or does not match
        """
        if not signature:
            raise SignatureError("Missing Stripe-Signature header")
        if not self.webhook_secret:
            logger.error("Webhook received but STRIPE_WEBHOOK_SECRET is not configured")
            raise SignatureError()

        try:
            body = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(
                body, signature, self.webhook_secret, SIGNATURE_TOLERANCE_SECONDS
            )
            event = json.loads(body)
        except stripe.SignatureVerificationError as e:
            logger.warning("Webhook signature verification failed", error=str(e))
            raise SignatureError() from e
        except ValueError as e:
            # Covers undecodable bytes and malformed JSON
            logger.warning("Webhook payload could not be decoded", error=str(e))
            raise SignatureError("Invalid webhook payload") from e

        if not isinstance(event, dict) or "type" not in event:
            raise SignatureError("Invalid webhook payload")

        return event
