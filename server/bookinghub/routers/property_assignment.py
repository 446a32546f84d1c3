"""Property assignment router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import NotifierDependency
from ..core.exceptions import ApiError
from ..integrations.notifications import CrmNotifier
from ..schemas.assignment import (
    AssignedPropertySummary,
    AssignmentOut,
    AssignmentRequesterSummary,
    BookedPropertyOut,
    CreateAssignmentRequest,
    CreateAssignmentResponse,
)
from ..services.assignment_service import AssignmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/property-assignment", tags=["property-assignment"])

DB_DEPENDENCY = Depends(get_db)


def convert_assignment_to_schema(assignment_model) -> AssignmentOut:
    """Convert assignment model to schema."""
    return AssignmentOut(
        id=str(assignment_model.id),
        booking_date_id=str(assignment_model.booking_date_id),
        booking_request_id=str(assignment_model.booking_request_id) if assignment_model.booking_request_id else None,
        property_id=str(assignment_model.property_id),
        contractor_id=str(assignment_model.contractor_id) if assignment_model.contractor_id else None,
        landlord_id=str(assignment_model.landlord_id) if assignment_model.landlord_id else None,
        start_date=assignment_model.start_date,
        end_date=assignment_model.end_date,
        project_postcode=assignment_model.project_postcode,
        team_size=assignment_model.team_size,
        contractor_name=assignment_model.contractor_name,
        contractor_email=assignment_model.contractor_email,
        contractor_phone=assignment_model.contractor_phone,
        property_name=assignment_model.property_name,
        property_type=assignment_model.property_type,
        property_address=assignment_model.property_address,
        landlord_name=assignment_model.landlord_name,
        landlord_contact=assignment_model.landlord_contact,
        value=assignment_model.value,
        status=assignment_model.status,
        created_at=assignment_model.created_at
    )


def convert_booked_property_to_schema(assignment_model) -> BookedPropertyOut:
    """Convert an assignment with loaded property and booking request to the listing schema."""
    property_ = assignment_model.property
    booking_request = assignment_model.booking_request

    return BookedPropertyOut(
        **convert_assignment_to_schema(assignment_model).model_dump(),
        property=AssignedPropertySummary(
            id=str(property_.id),
            property_name=property_.property_name,
            property_type=property_.property_type,
            full_address=property_.full_address,
            postcode=property_.postcode,
            city=property_.city
        ) if property_ is not None else None,
        booking_request=AssignmentRequesterSummary(
            id=str(booking_request.id),
            full_name=booking_request.full_name,
            company_name=booking_request.company_name,
            email=booking_request.email,
            phone=booking_request.phone,
            city=booking_request.city
        ) if booking_request is not None else None
    )


@router.post("", response_model=CreateAssignmentResponse, status_code=201)
async def assign_property(
    request: CreateAssignmentRequest,
    db: AsyncSession = DB_DEPENDENCY,
    notifier: CrmNotifier = NotifierDependency
) -> JSONResponse:
    """
    Assign a property to a requested date range.

    Rejected with 409 when the date range already has a property or the
    property is taken for any overlapping day.
    """
    assignment_service = AssignmentService(db, notifier)

    try:
        assignment, booking = await assignment_service.assign_property(request)

        response_data = CreateAssignmentResponse(
            data=convert_assignment_to_schema(assignment),
            booking_id=str(booking.id)
        )

        return JSONResponse(
            status_code=201,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in property assignment",
            extra={
                "booking_date_id": request.booking_date_id,
                "property_id": request.property_id,
                "error": str(e)
            },
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e
