"""Property assignment schemas."""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .common import Pagination


class CreateAssignmentRequest(BaseModel):
    """
    Request schema for assigning a property to a requested date range.

    Identifiers and dates are accepted as raw strings; presence and format are
    checked by the assignment service so that missing fields are reported
    together under a single error code.
    """

    booking_date_id: Optional[str] = Field(None, description="Requested date range to fill")
    property_id: Optional[str] = Field(None, description="Property being assigned")
    start_date: Optional[str] = Field(None, description="First day (YYYY-MM-DD, inclusive)")
    end_date: Optional[str] = Field(None, description="Last day (YYYY-MM-DD, inclusive)")

    # Display fields copied onto the assignment
    postcode: Optional[str] = Field(None, max_length=16)
    contractor_name: Optional[str] = Field(None, max_length=255)
    contractor_email: Optional[str] = Field(None, max_length=320)
    contractor_phone: Optional[str] = Field(None, max_length=64)
    team_size: Optional[int] = Field(None, ge=0)
    property_name: Optional[str] = Field(None, max_length=255)
    property_type: Optional[str] = Field(None, max_length=100)
    property_address: Optional[str] = None
    landlord_name: Optional[str] = Field(None, max_length=255)
    landlord_contact: Optional[str] = Field(None, max_length=320)
    value: Optional[Union[str, int, float]] = None


class AssignmentOut(BaseModel):
    """Assignment response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    booking_date_id: str
    booking_request_id: Optional[str] = None
    property_id: str
    contractor_id: Optional[str] = None
    landlord_id: Optional[str] = None
    start_date: date
    end_date: date
    project_postcode: Optional[str] = None
    team_size: Optional[int] = None
    contractor_name: Optional[str] = None
    contractor_email: Optional[str] = None
    contractor_phone: Optional[str] = None
    property_name: Optional[str] = None
    property_type: Optional[str] = None
    property_address: Optional[str] = None
    landlord_name: Optional[str] = None
    landlord_contact: Optional[str] = None
    value: Optional[str] = None
    status: str
    created_at: datetime


class CreateAssignmentResponse(BaseModel):
    success: bool = True
    message: str = "Property assigned successfully"
    data: AssignmentOut
    booking_id: str = Field(..., description="Payable booking created for this assignment")


class AssignedPropertySummary(BaseModel):
    id: str
    property_name: str
    property_type: Optional[str] = None
    full_address: Optional[str] = None
    postcode: Optional[str] = None
    city: Optional[str] = None


class AssignmentRequesterSummary(BaseModel):
    """The booking request an assignment fills."""

    id: str
    full_name: str
    company_name: str
    email: str
    phone: Optional[str] = None
    city: Optional[str] = None


class BookedPropertyOut(AssignmentOut):
    """Assignment with its property and booking request expanded."""

    property: Optional[AssignedPropertySummary] = None
    booking_request: Optional[AssignmentRequesterSummary] = None


class BookedPropertyListResponse(BaseModel):
    success: bool = True
    booked_properties: list[BookedPropertyOut]
    pagination: Pagination


class BookingValueResponse(BaseModel):
    success: bool = True
    booking_date_id: str
    value: Optional[str] = Field(None, description="Agreed value, null when the date range has none")
