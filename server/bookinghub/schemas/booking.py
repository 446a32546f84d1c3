"""Booking-related Pydantic schemas."""

import re
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .common import Pagination

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class AdminBookingStatus(str, Enum):
    """Statuses only an admin may set."""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CreateBookingRequest(BaseModel):
    """Request schema for creating a direct booking."""

    property_id: str = Field(..., description="Property to book")
    start_date: str = Field(..., description="Check-in date (YYYY-MM-DD)")
    end_date: str = Field(..., description="Check-out date (YYYY-MM-DD)")

    @field_validator("property_id")
    @classmethod
    def validate_property_id(cls, v: str) -> str:
        try:
            return str(UUID(v))
        except ValueError as e:
            raise ValueError("property_id must be a valid UUID") from e

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        if not DATE_PATTERN.match(v):
            raise ValueError("Dates must use the YYYY-MM-DD format")
        date.fromisoformat(v)
        return v

    @model_validator(mode="after")
    def check_order(self) -> "CreateBookingRequest":
        if date.fromisoformat(self.end_date) <= date.fromisoformat(self.start_date):
            raise ValueError("End date must be after start date")
        return self


class UpdateBookingStatusRequest(BaseModel):
    """Request schema for the admin confirm/cancel action."""

    status: AdminBookingStatus


class BookingOut(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    source: str
    property_id: str
    contractor_id: Optional[str] = None
    assignment_id: Optional[str] = None
    start_date: date
    end_date: date
    status: str
    created_at: datetime
    updated_at: datetime


class BookingResponse(BaseModel):
    booking: BookingOut


class BookingListResponse(BaseModel):
    bookings: list[BookingOut]
    pagination: Pagination
