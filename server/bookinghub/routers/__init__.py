"""FastAPI routers package."""

from .admin import router as admin_router
from .booking_requests import router as booking_requests_router
from .booking_values import router as booking_values_router
from .bookings import router as bookings_router
from .health import router as health_router
from .metrics import router as metrics_router
from .property_assignment import router as property_assignment_router
from .stripe import router as stripe_router

__all__ = [
    "admin_router",
    "booking_requests_router",
    "booking_values_router",
    "bookings_router",
    "health_router",
    "metrics_router",
    "property_assignment_router",
    "stripe_router",
]
