"""Payment session and webhook schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateSessionRequest(BaseModel):
    """Request schema for opening a checkout session."""

    booking_id: str = Field(..., description="Booking to charge for")

    @field_validator("booking_id")
    @classmethod
    def validate_booking_id(cls, v: str) -> str:
        try:
            return str(UUID(v))
        except ValueError as e:
            raise ValueError("booking_id must be a valid UUID") from e


class InvoiceOut(BaseModel):
    """Invoice response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_id: str
    stripe_session_id: str
    stripe_payment_url: Optional[str] = None
    amount: float
    status: str
    created_at: datetime


class CreateSessionResponse(BaseModel):
    session_id: str
    payment_url: Optional[str] = None
    invoice: InvoiceOut


class WebhookAck(BaseModel):
    received: bool = True
