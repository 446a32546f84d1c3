"""Models module exporting all database models."""

from .assignment import Assignment
from .booking import Booking, BookingSource, BookingStatus, Invoice, InvoiceStatus
from .booking_request import BookingDate, BookingDateStatus, BookingRequest
from .identity import Contractor, Landlord
from .property import Property

__all__ = [
    # Identities
    "Contractor",
    "Landlord",

    # Properties
    "Property",

    # Intake
    "BookingRequest",
    "BookingDate",
    "BookingDateStatus",

    # Assignment
    "Assignment",

    # Bookings and payments
    "Booking",
    "BookingSource",
    "BookingStatus",
    "Invoice",
    "InvoiceStatus",
]
