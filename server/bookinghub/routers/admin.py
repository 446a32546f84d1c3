"""Admin router for booking and assignment oversight."""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import AdminAuth, NotifierDependency
from ..core.exceptions import ApiError
from ..integrations.notifications import CrmNotifier
from ..models.booking import BookingStatus
from ..schemas.assignment import BookedPropertyListResponse
from ..schemas.booking import BookingListResponse, BookingResponse, UpdateBookingStatusRequest
from ..schemas.common import Pagination
from ..services.assignment_service import AssignmentService
from ..services.booking_service import BookingService
from .bookings import convert_booking_to_schema
from .property_assignment import convert_booked_property_to_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

DB_DEPENDENCY = Depends(get_db)
PAGE_QUERY = Query(1, ge=1)
LIMIT_QUERY = Query(20, ge=1, le=100)
STATUS_QUERY = Query(None)


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(
    page: int = PAGE_QUERY,
    limit: int = LIMIT_QUERY,
    status: Optional[BookingStatus] = STATUS_QUERY,
    db: AsyncSession = DB_DEPENDENCY,
    admin: dict = AdminAuth
) -> JSONResponse:
    """List all bookings, newest first, optionally filtered by status."""
    booking_service = BookingService(db)

    try:
        bookings, total = await booking_service.list_bookings(
            page=page,
            limit=limit,
            status=status.value if status else None
        )

        response_data = BookingListResponse(
            bookings=[convert_booking_to_schema(b) for b in bookings],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in admin booking list",
            extra={"page": page, "limit": limit, "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e


@router.put("/bookings/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: str,
    request: UpdateBookingStatusRequest,
    db: AsyncSession = DB_DEPENDENCY,
    notifier: CrmNotifier = NotifierDependency,
    admin: dict = AdminAuth
) -> JSONResponse:
    """Confirm or cancel a booking."""
    booking_service = BookingService(db, notifier)

    try:
        booking = await booking_service.set_admin_status(booking_id, request.status, admin)
        response_data = BookingResponse(booking=convert_booking_to_schema(booking))

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in admin booking confirmation",
            extra={"booking_id": booking_id, "status": request.status.value, "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e


@router.get("/booked-properties", response_model=BookedPropertyListResponse)
async def list_booked_properties(
    page: int = PAGE_QUERY,
    limit: int = LIMIT_QUERY,
    db: AsyncSession = DB_DEPENDENCY,
    admin: dict = AdminAuth
) -> JSONResponse:
    """List property assignments, newest first, with property and requester detail."""
    assignment_service = AssignmentService(db)

    try:
        assignments, total = await assignment_service.list_assignments(page=page, limit=limit)

        response_data = BookedPropertyListResponse(
            booked_properties=[convert_booked_property_to_schema(a) for a in assignments],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
        )

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booked property list",
            extra={"page": page, "limit": limit, "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e
