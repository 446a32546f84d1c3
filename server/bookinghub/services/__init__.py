"""Business logic services."""

from .assignment_service import AssignmentService
from .booking_service import BookingService
from .intake_service import IntakeService
from .payment_service import PaymentService

__all__ = [
    "AssignmentService",
    "BookingService",
    "IntakeService",
    "PaymentService",
]
