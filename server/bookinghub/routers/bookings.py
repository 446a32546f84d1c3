"""Booking router for direct bookings."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ContractorAuth, NotifierDependency, RequiredAuth
from ..core.exceptions import ApiError
from ..integrations.notifications import CrmNotifier
from ..schemas.booking import BookingOut, BookingResponse, CreateBookingRequest
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

DB_DEPENDENCY = Depends(get_db)


def convert_booking_to_schema(booking_model) -> BookingOut:
    """Convert booking model to schema."""
    return BookingOut(
        id=str(booking_model.id),
        source=booking_model.source,
        property_id=str(booking_model.property_id),
        contractor_id=str(booking_model.contractor_id) if booking_model.contractor_id else None,
        assignment_id=str(booking_model.assignment_id) if booking_model.assignment_id else None,
        start_date=booking_model.start_date,
        end_date=booking_model.end_date,
        status=booking_model.status,
        created_at=booking_model.created_at,
        updated_at=booking_model.updated_at
    )


@router.post("/create", response_model=BookingResponse, status_code=201)
async def create_booking(
    request: CreateBookingRequest,
    db: AsyncSession = DB_DEPENDENCY,
    notifier: CrmNotifier = NotifierDependency,
    user: dict = ContractorAuth
) -> JSONResponse:
    """Create a direct booking for a property."""
    booking_service = BookingService(db, notifier)

    try:
        booking = await booking_service.create_booking(request, user)
        response_data = BookingResponse(booking=convert_booking_to_schema(booking))

        return JSONResponse(
            status_code=201,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking creation",
            extra={"property_id": request.property_id, "user_id": user["user_id"], "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth
) -> JSONResponse:
    """
    Get booking details.

    Visible to admins, the booking's contractor and the property's landlord.
    """
    booking_service = BookingService(db)

    try:
        booking = await booking_service.get_booking_for_user(booking_id, user)
        response_data = BookingResponse(booking=convert_booking_to_schema(booking))

        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking retrieval",
            extra={"booking_id": booking_id, "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e
