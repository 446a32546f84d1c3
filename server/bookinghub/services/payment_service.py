"""Payment orchestration: checkout sessions and webhook reconciliation."""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, UpstreamError, ValidationError
from ..core.observability import metrics_collector
from ..integrations.notifications import CrmNotifier
from ..integrations.payments import CheckoutSession, PaymentGateway
from ..models.booking import Booking, BookingStatus, Invoice, InvoiceStatus
from ..models.property import Property
from .date_ranges import billable_days, calculate_amount

logger = logging.getLogger(__name__)

SESSION_COMPLETED = "checkout.session.completed"
SESSION_EXPIRED = "checkout.session.expired"


class MissingBookingMetadataError(ValidationError):
    """Completed session that does not say which booking it paid for."""

    def __init__(self, session_id: Optional[str]):
        super().__init__(
            error="Missing booking_id in session metadata",
            details={"session_id": session_id},
            code="MISSING_METADATA"
        )


class BookingNotPayableError(ConflictError):
    """Checkout requested for a booking that is already paid or cancelled."""

    def __init__(self, booking_id: str, status: str):
        super().__init__(
            error=f"Booking is {status} and cannot be paid for",
            code="BOOKING_NOT_PAYABLE",
            extensions={"booking_id": booking_id, "booking_status": status}
        )


UNPAYABLE_STATUSES = (BookingStatus.PAID.value, BookingStatus.CANCELLED.value)


class PaymentService:
    """Service for payment-related operations."""

    def __init__(
        self,
        db: AsyncSession,
        gateway: PaymentGateway,
        notifier: Optional[CrmNotifier] = None
    ):
        self.db = db
        self.gateway = gateway
        self.notifier = notifier

    async def create_session(self, booking_id: UUID) -> tuple[CheckoutSession, Invoice]:
        """
        Open a checkout session for a booking and record an unpaid invoice.

        The charge is the property's daily price times the number of days
        between the booking's start and end dates.

        Args:
            booking_id: Booking to charge for

        Returns:
            The checkout session and the invoice that references it

        Raises:
            NotFoundError: If the booking or its property does not exist
            BookingNotPayableError: If the booking is already paid or cancelled
            UpstreamError: If Stripe or the database fails
        """
        booking = await self.db.get(Booking, booking_id)
        if booking is None:
            logger.warning("Payment session requested for unknown booking", extra={"booking_id": str(booking_id)})
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))

        if booking.status in UNPAYABLE_STATUSES:
            logger.warning(
                "Payment session refused for settled booking",
                extra={"booking_id": str(booking_id), "status": booking.status}
            )
            raise BookingNotPayableError(str(booking_id), booking.status)

        property_ = await self.db.get(Property, booking.property_id)
        if property_ is None:
            raise NotFoundError(resource_type="property", resource_id=str(booking.property_id))

        amount = calculate_amount(property_.price, booking.start_date, booking.end_date)

        session = await self.gateway.create_checkout_session(str(booking.id), amount)

        invoice = Invoice(
            booking_id=booking.id,
            stripe_session_id=session.id,
            stripe_payment_url=session.url,
            amount=amount,
            status=InvoiceStatus.UNPAID.value
        )
        self.db.add(invoice)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to record invoice for checkout session",
                extra={"booking_id": str(booking.id), "session_id": session.id, "error": str(e)},
                exc_info=True
            )
            raise UpstreamError(error="Failed to create invoice", details=str(e)) from e

        await self.db.refresh(invoice)

        metrics_collector.record_payment_session_created()

        logger.info(
            "Payment session created",
            extra={
                "booking_id": str(booking.id),
                "session_id": session.id,
                "invoice_id": str(invoice.id),
                "days": billable_days(booking.start_date, booking.end_date),
                "unit_price": str(property_.price),
                "amount": str(amount)
            }
        )

        return session, invoice

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> str:
        """
        Verify and apply one payment webhook.

        Nothing is read or written before the signature verifies.

        Returns:
            str: The event type

        Raises:
            SignatureError: If the signature header is missing or invalid
            MissingBookingMetadataError: If a completed session has no booking_id
        """
        event = self.gateway.verify_webhook(payload, signature)
        event_type = event["type"]
        session = (event.get("data") or {}).get("object") or {}

        metrics_collector.record_payment_event(event_type)

        if event_type == SESSION_COMPLETED:
            await self._handle_session_completed(session)
        elif event_type == SESSION_EXPIRED:
            await self._handle_session_expired(session)
        else:
            logger.info("Ignoring unhandled webhook event", extra={"event_type": event_type, "event_id": event.get("id")})

        return event_type

    async def _handle_session_completed(self, session: dict[str, Any]) -> None:
        session_id = session.get("id")
        booking_id = (session.get("metadata") or {}).get("booking_id")
        if not booking_id:
            logger.warning("Completed session has no booking_id metadata", extra={"session_id": session_id})
            raise MissingBookingMetadataError(session_id)

        try:
            booking_uuid = UUID(booking_id)
        except ValueError as e:
            raise ValidationError(
                error="Invalid booking_id in session metadata",
                details={"session_id": session_id, "booking_id": booking_id}
            ) from e

        # Blind sets so a replayed event leaves the same state behind
        try:
            await self.db.execute(
                update(Invoice)
                .where(Invoice.stripe_session_id == session_id)
                .values(status=InvoiceStatus.PAID.value)
            )
            await self.db.execute(
                update(Booking)
                .where(Booking.id == booking_uuid)
                .values(status=BookingStatus.PAID.value)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to record payment",
                extra={"session_id": session_id, "booking_id": booking_id, "error": str(e)},
                exc_info=True
            )
            raise UpstreamError(error="Failed to record payment", details=str(e)) from e

        logger.info("Payment recorded", extra={"session_id": session_id, "booking_id": booking_id})

        if self.notifier is not None:
            await self.notifier.notify("payment_succeeded", {
                "booking_id": booking_id,
                "stripe_session_id": session_id,
                "amount_paid": (session.get("amount_total") or 0) / 100,
                "payment_status": session.get("payment_status")
            })

    async def _handle_session_expired(self, session: dict[str, Any]) -> None:
        session_id = session.get("id")
        booking_id = (session.get("metadata") or {}).get("booking_id")

        logger.info("Payment session expired", extra={"session_id": session_id, "booking_id": booking_id})

        if booking_id and self.notifier is not None:
            await self.notifier.notify("payment_expired", {
                "booking_id": booking_id,
                "stripe_session_id": session_id
            })
