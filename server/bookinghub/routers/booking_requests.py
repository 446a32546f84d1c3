"""Booking request intake router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import NotifierDependency
from ..core.exceptions import ApiError
from ..integrations.notifications import CrmNotifier
from ..schemas.booking_request import (
    BookingDateOut,
    BookingRequestOut,
    ContractorOut,
    CreateBookingRequestRequest,
    CreateBookingRequestResponse,
)
from ..services.intake_service import IntakeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/booking-requests", tags=["booking-requests"])

# Define dependencies to avoid B008 linting errors
DB_DEPENDENCY = Depends(get_db)


def _convert_contractor_to_schema(contractor_model) -> ContractorOut:
    """Convert contractor model to schema."""
    return ContractorOut(
        id=str(contractor_model.id),
        full_name=contractor_model.full_name,
        company_name=contractor_model.company_name,
        email=contractor_model.email,
        phone=contractor_model.phone,
        code=contractor_model.code,
        role=contractor_model.role,
        created_at=contractor_model.created_at
    )


def _convert_booking_request_to_schema(request_model) -> BookingRequestOut:
    """Convert booking request model to schema."""
    return BookingRequestOut(
        id=str(request_model.id),
        user_id=str(request_model.user_id),
        full_name=request_model.full_name,
        company_name=request_model.company_name,
        email=request_model.email,
        phone=request_model.phone,
        project_postcode=request_model.project_postcode,
        city=request_model.city,
        team_size=request_model.team_size,
        budget_per_person_week=request_model.budget_per_person_week,
        status=request_model.status,
        created_at=request_model.created_at
    )


def _convert_booking_date_to_schema(date_model) -> BookingDateOut:
    """Convert booking date model to schema."""
    return BookingDateOut(
        id=str(date_model.id),
        booking_request_id=str(date_model.booking_request_id),
        start_date=date_model.start_date,
        end_date=date_model.end_date,
        status=date_model.status
    )


@router.post("", response_model=CreateBookingRequestResponse, status_code=201)
async def create_booking_request(
    request: CreateBookingRequestRequest,
    db: AsyncSession = DB_DEPENDENCY,
    notifier: CrmNotifier = NotifierDependency
) -> JSONResponse:
    """
    Submit a booking request.

    Provisions a contractor account for the requester and records every
    requested date range.
    """
    intake_service = IntakeService(db, notifier)

    try:
        contractor, booking_request, dates = await intake_service.create_booking_request(request)

        response_data = CreateBookingRequestResponse(
            contractor=_convert_contractor_to_schema(contractor),
            booking_request=_convert_booking_request_to_schema(booking_request),
            booking_dates=[_convert_booking_date_to_schema(d) for d in dates]
        )

        return JSONResponse(
            status_code=201,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking request intake",
            extra={
                "email": str(request.email),
                "date_count": len(request.bookings),
                "error": str(e)
            },
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e
