"""Booking service for business logic operations."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, NotFoundError, UpstreamError
from ..core.observability import metrics_collector
from ..integrations.notifications import CrmNotifier
from ..models.booking import Booking, BookingSource, BookingStatus
from ..models.identity import Contractor
from ..models.property import Property
from ..schemas.booking import AdminBookingStatus, CreateBookingRequest

logger = logging.getLogger(__name__)


def _as_uuid(value: Optional[str]) -> UUID | None:
    try:
        return UUID(value)
    except (TypeError, ValueError):
        return None


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession, notifier: Optional[CrmNotifier] = None):
        self.db = db
        self.notifier = notifier

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        """
        Get booking by ID.

        Args:
            booking_id: Booking ID to search for

        Returns:
            Booking if found, None otherwise
        """
        stmt = select(Booking).where(Booking.id == booking_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(self, booking_id: str | UUID) -> Booking:
        """
        Get booking by ID or raise NotFoundError.

        Malformed identifiers are treated as unknown bookings.
        """
        booking_uuid = booking_id if isinstance(booking_id, UUID) else _as_uuid(booking_id)
        booking = await self.get_booking_by_id(booking_uuid) if booking_uuid else None
        if not booking:
            logger.warning("Booking not found", extra={"booking_id": str(booking_id)})
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def create_booking(self, request: CreateBookingRequest, user: dict) -> Booking:
        """
        Create a direct booking for an existing property.

        Args:
            request: Booking creation request
            user: Authenticated caller

        Returns:
            Created booking entity

        Raises:
            NotFoundError: If property not found
            UpstreamError: If the database write fails
        """
        property_id = UUID(request.property_id)
        property_ = await self.db.get(Property, property_id)
        if property_ is None:
            raise NotFoundError(resource_type="property", resource_id=request.property_id)

        # Only link the caller when they are a known contractor
        contractor_id = _as_uuid(user["user_id"])
        if contractor_id is not None and await self.db.get(Contractor, contractor_id) is None:
            contractor_id = None

        booking = Booking(
            source=BookingSource.DIRECT.value,
            property_id=property_id,
            contractor_id=contractor_id,
            start_date=date.fromisoformat(request.start_date),
            end_date=date.fromisoformat(request.end_date),
            status=BookingStatus.PENDING.value
        )
        self.db.add(booking)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to create booking",
                extra={"property_id": request.property_id, "error": str(e)},
                exc_info=True
            )
            raise UpstreamError(error="Failed to create booking", details=str(e)) from e

        await self.db.refresh(booking)

        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": str(booking.id),
                "property_id": request.property_id,
                "contractor_id": str(contractor_id) if contractor_id else None
            }
        )

        if self.notifier is not None:
            await self.notifier.notify("booking_created", {
                "booking_id": str(booking.id),
                "property_id": str(property_id),
                "contractor_id": str(contractor_id) if contractor_id else None,
                "start_date": request.start_date,
                "end_date": request.end_date,
                "property_name": property_.property_name,
                "contractor_name": user.get("full_name")
            })

        return booking

    async def get_booking_for_user(self, booking_id: str, user: dict) -> Booking:
        """
        Fetch a booking the caller is allowed to see.

        Admins see every booking; otherwise the caller must be the booking's
        contractor or the landlord of its property.

        Raises:
            NotFoundError: If booking not found
            AuthorizationError: If the caller has no claim on the booking
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)

        if user["role"] == "admin":
            return booking

        user_id = _as_uuid(user["user_id"])
        if user_id is not None:
            if booking.contractor_id == user_id:
                return booking

            property_ = await self.db.get(Property, booking.property_id)
            if property_ is not None and property_.landlord_id == user_id:
                return booking

        logger.warning(
            "Booking access denied",
            extra={"booking_id": booking_id, "user_id": user["user_id"], "role": user["role"]}
        )
        raise AuthorizationError("Access denied")

    async def list_bookings(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[str] = None
    ) -> tuple[list[Booking], int]:
        """
        List bookings newest first.

        Returns:
            The requested page of bookings and the total matching count
        """
        stmt = select(Booking)
        count_stmt = select(func.count()).select_from(Booking)
        if status:
            stmt = stmt.where(Booking.status == status)
            count_stmt = count_stmt.where(Booking.status == status)

        stmt = stmt.order_by(Booking.created_at.desc(), Booking.id).offset((page - 1) * limit).limit(limit)

        result = await self.db.execute(stmt)
        bookings = list(result.scalars())
        total = (await self.db.execute(count_stmt)).scalar_one()

        logger.info(
            "Booking list retrieved",
            extra={"page": page, "limit": limit, "status": status, "total": total}
        )

        return bookings, total

    async def set_admin_status(
        self,
        booking_id: str,
        status: AdminBookingStatus,
        actor: dict
    ) -> Booking:
        """
        Confirm or cancel a booking on an admin's behalf.

        Args:
            booking_id: Booking to update
            status: ``confirmed`` or ``cancelled``
            actor: The admin making the change

        Returns:
            The updated booking

        Raises:
            NotFoundError: If booking not found
            UpstreamError: If the database write fails
        """
        booking = await self.get_booking_by_id_or_raise(booking_id)
        previous_status = booking.status

        booking.status = status.value

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to update booking status",
                extra={"booking_id": booking_id, "status": status.value, "error": str(e)},
                exc_info=True
            )
            raise UpstreamError(error="Failed to update booking", details=str(e)) from e

        await self.db.refresh(booking)

        metrics_collector.record_booking_status_change(status.value)

        logger.info(
            "Booking status set by admin",
            extra={
                "booking_id": str(booking.id),
                "previous_status": previous_status,
                "status": status.value,
                "admin_id": actor["user_id"]
            }
        )

        if self.notifier is not None:
            property_ = await self.db.get(Property, booking.property_id)
            await self.notifier.notify("booking_confirmed", {
                "booking_id": str(booking.id),
                "property_id": str(booking.property_id),
                "contractor_id": str(booking.contractor_id) if booking.contractor_id else None,
                "status": status.value,
                "property_name": property_.property_name if property_ else None,
                "admin_id": actor["user_id"],
                "admin_name": actor.get("full_name")
            })

        return booking
