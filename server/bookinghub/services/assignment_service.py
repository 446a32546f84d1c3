"""Property assignment with no-overlap and no-double-assignment guarantees."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import (
    ApiError,
    ConflictError,
    MissingFieldsError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ..core.observability import metrics_collector
from ..integrations.notifications import CrmNotifier
from ..models.assignment import Assignment
from ..models.booking import Booking, BookingSource, BookingStatus
from ..models.booking_request import BookingDate, BookingDateStatus
from ..models.identity import Contractor, Landlord
from ..models.property import Property
from ..schemas.assignment import CreateAssignmentRequest
from .date_ranges import parse_iso_date
from .locks import KeyedLocks, advisory_xact_lock, property_locks

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("booking_date_id", "property_id", "start_date", "end_date")


class BookingAlreadyExistsError(ConflictError):
    """Exception when a requested date range already has a property assigned."""

    def __init__(self, booking_date_id: str, existing_assignment_id: Optional[str] = None):
        extensions = {"booking_date_id": booking_date_id}
        if existing_assignment_id:
            extensions["existing_assignment_id"] = existing_assignment_id

        super().__init__(
            error="A property has already been assigned to this booking date",
            code="BOOKING_ALREADY_EXISTS",
            extensions=extensions
        )


class DateConflictError(ConflictError):
    """Exception when the property is already assigned for an overlapping interval."""

    def __init__(self, property_id: str, start: date, end: date):
        super().__init__(
            error=(
                "Property is unavailable for the selected dates. "
                f"Already booked from {start.isoformat()} to {end.isoformat()}"
            ),
            code="DATE_CONFLICT",
            extensions={
                "property_id": property_id,
                "conflicting_dates": {
                    "start": start.isoformat(),
                    "end": end.isoformat()
                }
            }
        )


def _parse_uuid(value: str, field: str) -> UUID:
    try:
        return UUID(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            error=f"Invalid identifier for {field}",
            details=[{"path": field, "message": "Must be a valid UUID"}]
        ) from e


class AssignmentService:
    """
    Service binding properties to requested date ranges.

    The existence check, the overlap check and the insert run inside one
    transaction while the property's lock is held, so two concurrent
    requests for the same property are checked one after the other.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: Optional[CrmNotifier] = None,
        locks: KeyedLocks = property_locks
    ):
        self.db = db
        self.notifier = notifier
        self.locks = locks

    async def get_assignment_for_booking_date(self, booking_date_id: UUID) -> Assignment | None:
        stmt = select(Assignment).where(Assignment.booking_date_id == booking_date_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_assignments(self, page: int = 1, limit: int = 20) -> tuple[list[Assignment], int]:
        """
        List assignments newest first, with their property and booking request loaded.

        Returns:
            The requested page of assignments and the total count
        """
        stmt = (
            select(Assignment)
            .options(selectinload(Assignment.property), selectinload(Assignment.booking_request))
            .order_by(Assignment.created_at.desc(), Assignment.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        assignments = list(result.scalars())
        total = (await self.db.execute(select(func.count()).select_from(Assignment))).scalar_one()

        logger.info("Assignment list retrieved", extra={"page": page, "limit": limit, "total": total})
        return assignments, total

    async def get_value_for_booking_date(self, booking_date_id: str) -> Optional[str]:
        """Agreed value recorded for a date range; None when unassigned or no value was given."""
        stmt = select(Assignment.value).where(
            Assignment.booking_date_id == _parse_uuid(booking_date_id, "booking_date_id")
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() or None

    async def find_overlapping_assignment(
        self,
        property_id: UUID,
        start: date,
        end: date
    ) -> Assignment | None:
        """
        Earliest assignment of ``property_id`` sharing at least one day with
        ``[start, end]``.
        """
        stmt = (
            select(Assignment)
            .where(
                Assignment.property_id == property_id,
                Assignment.start_date <= end,
                Assignment.end_date >= start
            )
            .order_by(Assignment.start_date)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def assign_property(self, request: CreateAssignmentRequest) -> tuple[Assignment, Booking]:
        """
        Assign a property to a requested date range.

        Args:
            request: Assignment request

        Returns:
            The new assignment and the payable booking created with it

        Raises:
            MissingFieldsError: If an identifier or date is absent
            ValidationError: If an identifier or date is malformed
            BookingAlreadyExistsError: If the date range is already assigned
            DateConflictError: If the property is taken for an overlapping interval
            NotFoundError: If the date range or property does not exist
            UpstreamError: If the database write fails
        """
        missing = [field for field in REQUIRED_FIELDS if not getattr(request, field)]
        if missing:
            raise MissingFieldsError(missing)

        booking_date_id = _parse_uuid(request.booking_date_id, "booking_date_id")
        property_id = _parse_uuid(request.property_id, "property_id")
        start = parse_iso_date(request.start_date, "start_date")
        end = parse_iso_date(request.end_date, "end_date")

        if end < start:
            raise ValidationError(
                error="End date must not be before start date",
                details=[{"path": "end_date", "message": "Must be on or after start_date"}]
            )

        async with self.locks.hold(str(property_id)):
            assignment, booking = await self._assign_locked(request, booking_date_id, property_id, start, end)

        metrics_collector.record_assignment_created()

        logger.info(
            "Property assigned successfully",
            extra={
                "assignment_id": str(assignment.id),
                "booking_id": str(booking.id),
                "booking_date_id": str(booking_date_id),
                "property_id": str(property_id),
                "start_date": start.isoformat(),
                "end_date": end.isoformat()
            }
        )

        if self.notifier is not None:
            await self.notifier.notify("property_assigned", {
                "assignment_id": str(assignment.id),
                "booking_id": str(booking.id),
                "booking_date_id": str(booking_date_id),
                "property_id": str(property_id),
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "contractor_name": assignment.contractor_name,
                "contractor_email": assignment.contractor_email,
                "property_name": assignment.property_name,
                "landlord_name": assignment.landlord_name,
                "value": assignment.value
            })

        return assignment, booking

    async def _assign_locked(
        self,
        request: CreateAssignmentRequest,
        booking_date_id: UUID,
        property_id: UUID,
        start: date,
        end: date
    ) -> tuple[Assignment, Booking]:
        try:
            await advisory_xact_lock(self.db, str(property_id))

            existing = await self.get_assignment_for_booking_date(booking_date_id)
            if existing is not None:
                metrics_collector.record_assignment_rejected("booking_already_exists")
                logger.warning(
                    "Assignment rejected - booking date already assigned",
                    extra={
                        "booking_date_id": str(booking_date_id),
                        "existing_assignment_id": str(existing.id)
                    }
                )
                raise BookingAlreadyExistsError(str(booking_date_id), str(existing.id))

            conflict = await self.find_overlapping_assignment(property_id, start, end)
            if conflict is not None:
                metrics_collector.record_assignment_rejected("date_conflict")
                logger.warning(
                    "Assignment rejected - overlapping dates",
                    extra={
                        "property_id": str(property_id),
                        "requested_start": start.isoformat(),
                        "requested_end": end.isoformat(),
                        "conflicting_assignment_id": str(conflict.id),
                        "conflicting_start": conflict.start_date.isoformat(),
                        "conflicting_end": conflict.end_date.isoformat()
                    }
                )
                raise DateConflictError(str(property_id), conflict.start_date, conflict.end_date)

            booking_date = await self.db.get(BookingDate, booking_date_id)
            if booking_date is None:
                raise NotFoundError(resource_type="booking_date", resource_id=str(booking_date_id))

            property_ = await self.db.get(Property, property_id)
            if property_ is None:
                raise NotFoundError(resource_type="property", resource_id=str(property_id))

            contractor_id = await self._lookup_contractor(request.contractor_name, request.contractor_email)
            landlord_id = await self._lookup_landlord(request.landlord_name, request.landlord_contact)

            assignment = Assignment(
                booking_date_id=booking_date_id,
                booking_request_id=booking_date.booking_request_id,
                property_id=property_id,
                contractor_id=contractor_id,
                landlord_id=landlord_id,
                start_date=start,
                end_date=end,
                project_postcode=request.postcode,
                team_size=request.team_size,
                contractor_name=request.contractor_name,
                contractor_email=request.contractor_email,
                contractor_phone=request.contractor_phone,
                property_name=request.property_name or property_.property_name,
                property_type=request.property_type or property_.property_type,
                property_address=request.property_address or property_.full_address,
                landlord_name=request.landlord_name,
                landlord_contact=request.landlord_contact,
                value=str(request.value) if request.value is not None else None,
                status="active"
            )
            self.db.add(assignment)
            await self.db.flush()

            booking = Booking(
                source=BookingSource.ASSIGNMENT.value,
                property_id=property_id,
                contractor_id=contractor_id,
                assignment_id=assignment.id,
                start_date=start,
                end_date=end,
                status=BookingStatus.PENDING.value
            )
            self.db.add(booking)

            property_.is_available = False
            booking_date.status = BookingDateStatus.CONFIRMED.value

            await self.db.commit()

        except ApiError:
            # Releases the advisory lock along with the read transaction
            await self.db.rollback()
            raise

        except IntegrityError as e:
            await self.db.rollback()
            if "booking_date_id" in str(e.orig):
                metrics_collector.record_assignment_rejected("booking_already_exists")
                logger.warning(
                    "Assignment rejected by unique constraint on booking date",
                    extra={"booking_date_id": str(booking_date_id)}
                )
                raise BookingAlreadyExistsError(str(booking_date_id)) from e

            logger.error(
                "Assignment violated a database constraint",
                extra={"booking_date_id": str(booking_date_id), "error": str(e.orig)}
            )
            raise UpstreamError(error="Failed to create property assignment", details=str(e.orig)) from e

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Assignment persistence failed",
                extra={
                    "booking_date_id": str(booking_date_id),
                    "property_id": str(property_id),
                    "error": str(e)
                },
                exc_info=True
            )
            raise UpstreamError(error="Failed to create property assignment", details=str(e)) from e

        await self.db.refresh(assignment)
        await self.db.refresh(booking)
        return assignment, booking

    async def _lookup_contractor(self, name: Optional[str], email: Optional[str]) -> UUID | None:
        """Best-effort match on name and email; None when either is missing or unmatched."""
        if not name or not email:
            return None

        stmt = (
            select(Contractor.id)
            .where(Contractor.full_name == name, Contractor.email == email.lower())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        contractor_id = result.scalar_one_or_none()

        if contractor_id is None:
            logger.debug("No contractor matched assignment details", extra={"contractor_email": email})
        return contractor_id

    async def _lookup_landlord(self, name: Optional[str], contact: Optional[str]) -> UUID | None:
        """Match on name plus email when the contact looks like one, else phone number."""
        if not name or not contact:
            return None

        stmt = select(Landlord.id).where(Landlord.full_name == name)
        if "@" in contact:
            stmt = stmt.where(Landlord.email == contact.lower())
        else:
            stmt = stmt.where(Landlord.contact_number == contact)

        result = await self.db.execute(stmt.limit(1))
        landlord_id = result.scalar_one_or_none()

        if landlord_id is None:
            logger.debug("No landlord matched assignment details", extra={"landlord_contact": contact})
        return landlord_id
