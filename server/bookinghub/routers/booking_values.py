"""Agreed value lookup for an assigned date range."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import RequiredAuth
from ..core.exceptions import ApiError
from ..schemas.assignment import BookingValueResponse
from ..services.assignment_service import AssignmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/booking-values", tags=["property-assignment"])

DB_DEPENDENCY = Depends(get_db)


@router.get("/{booking_date_id}", response_model=BookingValueResponse)
async def get_booking_value(
    booking_date_id: str,
    db: AsyncSession = DB_DEPENDENCY,
    user: dict = RequiredAuth
) -> JSONResponse:
    """Value recorded on the date range's assignment; ``null`` when there is none."""
    try:
        value = await AssignmentService(db).get_value_for_booking_date(booking_date_id)

        response_data = BookingValueResponse(booking_date_id=booking_date_id, value=value)
        return JSONResponse(
            status_code=200,
            content=response_data.model_dump(mode="json")
        )

    except ApiError:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in booking value lookup",
            extra={"booking_date_id": booking_date_id, "error": str(e)},
            exc_info=True
        )
        raise ApiError(status_code=500, error="Internal server error") from e
