"""Booking request intake schemas."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class RequestedDateRange(BaseModel):
    """One desired stay, as submitted by the requester."""

    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")

    @model_validator(mode="after")
    def check_order(self) -> "RequestedDateRange":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class CreateBookingRequestRequest(BaseModel):
    """
    Request schema for submitting a booking request.

    Accepts the camelCase field names used by the public booking form.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    full_name: str = Field(..., min_length=1, max_length=255, alias="fullName")
    company_name: str = Field(..., min_length=1, max_length=255, alias="companyName")
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=64)
    project_postcode: Optional[str] = Field(None, max_length=16, alias="projectPostcode")
    password: str = Field(..., min_length=6, max_length=128)
    bookings: list[RequestedDateRange] = Field(..., min_length=1)
    team_size: Optional[int] = Field(None, ge=1, alias="teamSize")
    budget_per_person: Optional[str] = Field(None, max_length=64, alias="budgetPerPerson")
    city: Optional[str] = Field(None, max_length=120)


class ContractorOut(BaseModel):
    """Provisioned contractor identity (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    company_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    code: str
    role: str
    created_at: datetime


class BookingRequestOut(BaseModel):
    """Booking request response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    full_name: str
    company_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    project_postcode: Optional[str] = None
    city: Optional[str] = None
    team_size: Optional[int] = None
    budget_per_person_week: Optional[str] = None
    status: str
    created_at: datetime


class BookingDateOut(BaseModel):
    """Requested date range response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_request_id: str
    start_date: date
    end_date: date
    status: str


class CreateBookingRequestResponse(BaseModel):
    success: bool = True
    contractor: ContractorOut
    booking_request: BookingRequestOut
    booking_dates: list[BookingDateOut]
    message: str = "Account created and booking request submitted successfully"
