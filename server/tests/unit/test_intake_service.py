"""Unit tests for booking request intake."""

import threading
from datetime import date

import pytest
from sqlalchemy import func, select

from conftest import password_matches

from bookinghub.models import BookingDate, BookingRequest, Contractor
from bookinghub.schemas.booking_request import CreateBookingRequestRequest
from bookinghub.services import intake_service
from bookinghub.services.intake_service import EmailAlreadyRegisteredError, IntakeService


async def count_rows(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_create_booking_request(test_session, sample_booking_request_data):
    """Intake provisions a contractor, a request and its dates together."""
    service = IntakeService(test_session)
    request = CreateBookingRequestRequest.model_validate(sample_booking_request_data)

    contractor, booking_request, dates = await service.create_booking_request(request)

    assert contractor.code == "CT-1"
    assert contractor.role == "contractor"
    assert contractor.email == "dylan.morgan@example.com"
    assert contractor.email_verified is False
    assert password_matches(contractor.password_hash, "s3cret-pass")

    assert booking_request.user_id == contractor.id
    assert booking_request.status == "pending"
    assert booking_request.team_size == 4
    assert booking_request.budget_per_person_week == "250"

    assert len(dates) == 1
    assert dates[0].booking_request_id == booking_request.id
    assert dates[0].start_date == date(2024, 3, 1)
    assert dates[0].end_date == date(2024, 3, 10)
    assert dates[0].status == "pending"


@pytest.mark.asyncio
async def test_password_hashed_off_event_loop(test_session, sample_booking_request_data, monkeypatch):
    """Key stretching runs in a worker thread so other requests keep being served."""
    hashing_threads = []
    real_hash = intake_service.hash_password

    def recording_hash(password):
        hashing_threads.append(threading.get_ident())
        return real_hash(password)

    monkeypatch.setattr(intake_service, "hash_password", recording_hash)
    request = CreateBookingRequestRequest.model_validate(sample_booking_request_data)

    contractor, _, _ = await IntakeService(test_session).create_booking_request(request)

    assert len(hashing_threads) == 1
    assert hashing_threads[0] != threading.get_ident()
    assert password_matches(contractor.password_hash, "s3cret-pass")


@pytest.mark.asyncio
async def test_contractor_codes_are_sequential(test_session, sample_booking_request_data):
    service = IntakeService(test_session)

    first, _, _ = await service.create_booking_request(
        CreateBookingRequestRequest.model_validate(sample_booking_request_data)
    )
    second_data = dict(sample_booking_request_data, email="second@example.com")
    second, _, _ = await service.create_booking_request(
        CreateBookingRequestRequest.model_validate(second_data)
    )

    assert first.code == "CT-1"
    assert second.code == "CT-2"


@pytest.mark.asyncio
async def test_duplicate_email_rejected(test_session, sample_booking_request_data):
    """Emails are unique across contractors, case-insensitively."""
    service = IntakeService(test_session)
    await service.create_booking_request(CreateBookingRequestRequest.model_validate(sample_booking_request_data))

    duplicate = dict(sample_booking_request_data, email="Dylan.Morgan@EXAMPLE.com")
    with pytest.raises(EmailAlreadyRegisteredError) as exc_info:
        await service.create_booking_request(CreateBookingRequestRequest.model_validate(duplicate))

    assert exc_info.value.status_code == 400
    assert exc_info.value.body["code"] == "EMAIL_ALREADY_REGISTERED"
    assert await count_rows(test_session, Contractor) == 1
    assert await count_rows(test_session, BookingRequest) == 1


@pytest.mark.asyncio
async def test_landlord_email_rejected(test_session, landlord, sample_booking_request_data):
    """A landlord's email cannot be reused for a contractor signup."""
    service = IntakeService(test_session)
    data = dict(sample_booking_request_data, email="margaret.hughes@example.com")

    with pytest.raises(EmailAlreadyRegisteredError):
        await service.create_booking_request(CreateBookingRequestRequest.model_validate(data))

    assert await count_rows(test_session, Contractor) == 0


@pytest.mark.asyncio
async def test_multiple_date_ranges_notify_each(test_session, notifier, crm, sample_booking_request_data):
    """Every stored date range is forwarded to the booking request webhook."""
    data = dict(
        sample_booking_request_data,
        bookings=[
            {"startDate": "2024-03-01", "endDate": "2024-03-10"},
            {"startDate": "2024-04-01", "endDate": "2024-04-05"},
        ],
    )
    service = IntakeService(test_session, notifier)

    _, booking_request, dates = await service.create_booking_request(
        CreateBookingRequestRequest.model_validate(data)
    )

    assert await count_rows(test_session, BookingDate) == 2

    events = crm.events("booking_request_date_created")
    assert len(events) == 2
    assert {e["data"]["booking_id"] for e in events} == {str(d.id) for d in dates}
    assert events[0]["data"]["booking_request_id"] == str(booking_request.id)
    assert events[0]["data"]["booking_1"] == "2024-03-01 to 2024-03-10"
    assert events[1]["data"]["booking_2"] == "2024-04-01 to 2024-04-05"


@pytest.mark.asyncio
async def test_crm_failure_does_not_undo_intake(test_session, notifier, crm, sample_booking_request_data):
    crm.status_code = 503
    service = IntakeService(test_session, notifier)

    contractor, _, _ = await service.create_booking_request(
        CreateBookingRequestRequest.model_validate(sample_booking_request_data)
    )

    assert contractor.id is not None
    assert await count_rows(test_session, Contractor) == 1
