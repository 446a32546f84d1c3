"""Booking request intake: provision the requester and record the dates."""

import asyncio
import logging
import re
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import UpstreamError, ValidationError
from ..core.observability import metrics_collector
from ..core.security import hash_password
from ..integrations.notifications import CrmNotifier
from ..models.booking_request import BookingDate, BookingDateStatus, BookingRequest
from ..models.identity import Contractor, Landlord
from ..schemas.booking_request import CreateBookingRequestRequest

logger = logging.getLogger(__name__)

CONTRACTOR_CODE_PREFIX = "CT-"
CONTRACTOR_CODE_RE = re.compile(r"^CT-(\d+)$")


class EmailAlreadyRegisteredError(ValidationError):
    """Signup attempted with an email owned by an existing contractor or landlord."""

    def __init__(self, email: str):
        super().__init__(
            error="An account with this email already exists",
            details=[{"path": "email", "message": f"{email} is already registered"}],
            code="EMAIL_ALREADY_REGISTERED",
        )


class IntakeService:
    """Service for booking request intake."""

    def __init__(self, db: AsyncSession, notifier: Optional[CrmNotifier] = None):
        self.db = db
        self.notifier = notifier

    async def email_is_registered(self, email: str) -> bool:
        """Check both identity classes for ``email``, case-insensitively."""
        normalized = email.lower()

        for model in (Contractor, Landlord):
            stmt = select(model.id).where(func.lower(model.email) == normalized).limit(1)
            result = await self.db.execute(stmt)
            if result.scalar_one_or_none() is not None:
                return True

        return False

    async def next_contractor_code(self) -> str:
        """Next sequential ``CT-<n>`` code, one past the highest in use."""
        stmt = select(Contractor.code).where(Contractor.code.like(f"{CONTRACTOR_CODE_PREFIX}%"))
        result = await self.db.execute(stmt)

        highest = 0
        for code in result.scalars():
            match = CONTRACTOR_CODE_RE.match(code)
            if match:
                highest = max(highest, int(match.group(1)))

        return f"{CONTRACTOR_CODE_PREFIX}{highest + 1}"

    async def create_booking_request(
        self,
        request: CreateBookingRequestRequest
    ) -> tuple[Contractor, BookingRequest, list[BookingDate]]:
        """
        Provision a contractor and record their booking request.

        The contractor, the request and every date range are written in one
        transaction: either all of them exist afterwards or none do.

        Args:
            request: Validated intake payload

        Returns:
            The contractor, the booking request and its date ranges

        Raises:
            EmailAlreadyRegisteredError: If the email belongs to an existing account
            UpstreamError: If the database write fails
        """
        email = str(request.email).lower()

        if await self.email_is_registered(email):
            logger.warning(
                "Booking request rejected - email already registered",
                extra={"email": email}
            )
            raise EmailAlreadyRegisteredError(email)

        code = await self.next_contractor_code()
        password_hash = await asyncio.to_thread(hash_password, request.password)

        contractor = Contractor(
            email=email,
            full_name=request.full_name,
            company_name=request.company_name,
            company_email=email,
            phone=request.phone,
            code=code,
            role="contractor",
            password_hash=password_hash,
            is_active=True,
            email_verified=False
        )

        booking_request = BookingRequest(
            contractor=contractor,
            full_name=request.full_name,
            company_name=request.company_name,
            email=email,
            phone=request.phone,
            project_postcode=request.project_postcode,
            city=request.city,
            team_size=request.team_size,
            budget_per_person_week=request.budget_per_person,
            status="pending"
        )

        dates = [
            BookingDate(
                start_date=pair.start_date,
                end_date=pair.end_date,
                status=BookingDateStatus.PENDING.value
            )
            for pair in request.bookings
        ]
        booking_request.dates = dates

        self.db.add(contractor)
        self.db.add(booking_request)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "Booking request rejected by a uniqueness constraint",
                extra={"email": email, "contractor_code": code, "error": str(e.orig)}
            )
            raise UpstreamError(
                error="Failed to create booking request",
                details="A concurrent signup claimed the same email or contractor code",
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Booking request persistence failed",
                extra={"email": email, "error": str(e)},
                exc_info=True
            )
            raise UpstreamError(error="Failed to create booking request", details=str(e)) from e

        await self.db.refresh(contractor)
        await self.db.refresh(booking_request)
        for booking_date in dates:
            await self.db.refresh(booking_date)

        metrics_collector.record_booking_request_created()

        logger.info(
            "Booking request created successfully",
            extra={
                "contractor_id": str(contractor.id),
                "contractor_code": code,
                "booking_request_id": str(booking_request.id),
                "date_count": len(dates)
            }
        )

        await self._notify_dates(request, booking_request, dates)

        return contractor, booking_request, dates

    async def _notify_dates(
        self,
        request: CreateBookingRequestRequest,
        booking_request: BookingRequest,
        dates: list[BookingDate]
    ) -> None:
        if self.notifier is None:
            return

        for index, booking_date in enumerate(dates, start=1):
            start = booking_date.start_date.isoformat()
            end = booking_date.end_date.isoformat()
            await self.notifier.notify_booking_request_date({
                "full_name": request.full_name,
                "company_name": request.company_name,
                "email": booking_request.email,
                "phone": request.phone,
                "project_postcode": request.project_postcode,
                "city": request.city,
                "team_size": request.team_size,
                "budget_per_person": request.budget_per_person,
                "role": "contractor",
                "booking_request_id": str(booking_request.id),
                "booking_id": str(booking_date.id),
                f"booking_{index}": f"{start} to {end}",
                "booking_start_date": start,
                "booking_end_date": end
            })
