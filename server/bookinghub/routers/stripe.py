"""Stripe checkout and webhook router."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import NotifierDependency, PaymentGatewayDependency
from ..core.exceptions import ApiError
from ..integrations.notifications import CrmNotifier
from ..integrations.payments import PaymentGateway
from ..schemas.payment import CreateSessionRequest, CreateSessionResponse, InvoiceOut, WebhookAck
from ..services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["payments"])

DB_DEPENDENCY = Depends(get_db)
SIGNATURE_HEADER = Header(None, alias="Stripe-Signature")


def _convert_invoice_to_schema(invoice_model) -> InvoiceOut:
    """Convert invoice model to schema."""
    return InvoiceOut(
        id=str(invoice_model.id),
        booking_id=str(invoice_model.booking_id),
        stripe_session_id=invoice_model.stripe_session_id,
        stripe_payment_url=invoice_model.stripe_payment_url,
        amount=float(invoice_model.amount),
        status=invoice_model.status,
        created_at=invoice_model.created_at
    )


@router.post("/create-session", response_model=CreateSessionResponse)
async def create_session(
    request: CreateSessionRequest,
    db: AsyncSession = DB_DEPENDENCY,
    gateway: PaymentGateway = PaymentGatewayDependency,
    notifier: CrmNotifier = NotifierDependency
) -> JSONResponse:
    """Open a Stripe checkout session for a booking."""
    payment_service = PaymentService(db, gateway, notifier)

    try:
        session, invoice = await payment_service.create_session(UUID(request.booking_id))

        response_data = CreateSessionResponse(
            session_id=session.id,
            payment_url=session.url,
            invoice=_convert_invoice_to_schema(invoice)
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in payment session creation",
            extra={"booking_id": request.booking_id, "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = DB_DEPENDENCY,
    gateway: PaymentGateway = PaymentGatewayDependency,
    notifier: CrmNotifier = NotifierDependency,
    stripe_signature: Optional[str] = SIGNATURE_HEADER
) -> JSONResponse:
    """
    Receive Stripe webhook events.

    The raw body is verified against the ``Stripe-Signature`` header before
    anything in it is trusted.
    """
    payment_service = PaymentService(db, gateway, notifier)
    payload = await request.body()

    try:
        event_type = await payment_service.handle_webhook(payload, stripe_signature)

        logger.info("Stripe webhook processed", extra={"event_type": event_type})

        return JSONResponse(
            status_code=200,
            content=WebhookAck().model_dump()
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in Stripe webhook",
            extra={"payload_bytes": len(payload), "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e
