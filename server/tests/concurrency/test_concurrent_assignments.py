"""Concurrency tests for property assignment."""

import asyncio

import pytest
from sqlalchemy import func, select

from bookinghub.models import Assignment, Booking, Property
from bookinghub.schemas.assignment import CreateAssignmentRequest
from bookinghub.schemas.booking_request import CreateBookingRequestRequest
from bookinghub.services.assignment_service import AssignmentService, DateConflictError
from bookinghub.services.intake_service import IntakeService
from bookinghub.services.locks import KeyedLocks


@pytest.mark.asyncio
async def test_concurrent_overlapping_assignments(test_database, test_session, make_property, sample_booking_request_data):
    """Of many simultaneous requests for overlapping dates on one property, exactly one wins."""
    property_ = await make_property()
    property_id = str(property_.id)

    num_concurrent_requests = 10
    data = dict(
        sample_booking_request_data,
        bookings=[{"startDate": "2024-01-10", "endDate": "2024-01-15"}] * num_concurrent_requests
    )
    _, _, dates = await IntakeService(test_session).create_booking_request(
        CreateBookingRequestRequest.model_validate(data)
    )
    booking_date_ids = [str(d.id) for d in dates]

    # Shared like the process-wide registry; each request gets its own session
    locks = KeyedLocks()

    async def assign(index: int):
        async with test_database.session_factory() as session:
            service = AssignmentService(session, locks=locks)
            return await service.assign_property(CreateAssignmentRequest(
                booking_date_id=booking_date_ids[index],
                property_id=property_id,
                start_date=f"2024-01-{10 + index % 3:02d}",
                end_date="2024-01-15",
            ))

    tasks = [assign(i) for i in range(num_concurrent_requests)]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    successes = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, DateConflictError)]

    assert len(successes) == 1
    assert len(conflicts) == num_concurrent_requests - 1
    assert len(locks) == 0

    async with test_database.session_factory() as session:
        assignments = (await session.execute(select(func.count()).select_from(Assignment))).scalar_one()
        bookings = (await session.execute(select(func.count()).select_from(Booking))).scalar_one()
        stored_property = await session.get(Property, property_.id)

    assert assignments == 1
    assert bookings == 1
    assert stored_property.is_available is False


@pytest.mark.asyncio
async def test_concurrent_disjoint_assignments(test_database, test_session, make_property, sample_booking_request_data):
    """Non-overlapping ranges for one property all succeed when submitted together."""
    property_ = await make_property()
    property_id = str(property_.id)

    ranges = [("2024-01-01", "2024-01-05"), ("2024-01-06", "2024-01-10"), ("2024-01-11", "2024-01-15")]
    data = dict(
        sample_booking_request_data,
        bookings=[{"startDate": start, "endDate": end} for start, end in ranges]
    )
    _, _, dates = await IntakeService(test_session).create_booking_request(
        CreateBookingRequestRequest.model_validate(data)
    )
    booking_date_ids = [str(d.id) for d in dates]
    locks = KeyedLocks()

    async def assign(booking_date_id: str, start: str, end: str):
        async with test_database.session_factory() as session:
            service = AssignmentService(session, locks=locks)
            return await service.assign_property(CreateAssignmentRequest(
                booking_date_id=booking_date_id,
                property_id=property_id,
                start_date=start,
                end_date=end,
            ))

    results = await asyncio.gather(
        *(assign(booking_date_id, start, end) for booking_date_id, (start, end) in zip(booking_date_ids, ranges)),
        return_exceptions=True
    )

    assert not [r for r in results if isinstance(r, Exception)]

    async with test_database.session_factory() as session:
        assignments = (await session.execute(select(func.count()).select_from(Assignment))).scalar_one()

    assert assignments == 3
