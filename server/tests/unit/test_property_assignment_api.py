"""API tests for property assignment."""

from uuid import UUID

import pytest
from sqlalchemy import func, select

from bookinghub.models import Assignment, BookingDate, Property
from conftest import assign_property, auth_headers, submit_booking_request


@pytest.mark.asyncio
async def test_assign_property_endpoint(test_client, test_session, crm, make_property, sample_booking_request_data):
    """Assignment returns the stored assignment and the new booking's id."""
    property_ = await make_property()
    property_id = str(property_.id)
    intake = await submit_booking_request(test_client, sample_booking_request_data)
    booking_date_id = intake["booking_dates"][0]["id"]

    response = await assign_property(
        test_client, booking_date_id, property_id, "2024-03-01", "2024-03-10",
        contractor_name="Dylan Morgan",
        contractor_email="dylan.morgan@example.com",
        postcode="CF10 1EA",
        team_size=4,
        value="450.00"
    )

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Property assigned successfully"
    assert data["booking_id"]
    assert data["data"]["booking_date_id"] == booking_date_id
    assert data["data"]["property_id"] == property_id
    assert data["data"]["contractor_id"] == intake["contractor"]["id"]
    assert data["data"]["booking_request_id"] == intake["booking_request"]["id"]
    assert data["data"]["project_postcode"] == "CF10 1EA"
    assert data["data"]["value"] == "450.00"
    assert data["data"]["status"] == "active"

    is_available = await test_session.scalar(select(Property.is_available).where(Property.id == property_.id))
    date_status = await test_session.scalar(select(BookingDate.status).where(BookingDate.id == UUID(booking_date_id)))
    assert is_available is False
    assert date_status == "confirmed"

    (event,) = crm.events("property_assigned")
    assert event["data"]["booking_id"] == data["booking_id"]


@pytest.mark.asyncio
async def test_date_conflict_endpoint(test_client, test_session, make_property, sample_booking_request_data):
    property_ = await make_property()
    property_id = str(property_.id)
    intake = await submit_booking_request(
        test_client,
        sample_booking_request_data,
        bookings=[
            {"startDate": "2024-01-10", "endDate": "2024-01-15"},
            {"startDate": "2024-01-12", "endDate": "2024-01-18"},
        ]
    )
    first_id, second_id = (d["id"] for d in intake["booking_dates"])

    first = await assign_property(test_client, first_id, property_id, "2024-01-10", "2024-01-15")
    assert first.status_code == 201

    response = await assign_property(test_client, second_id, property_id, "2024-01-12", "2024-01-18")

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "DATE_CONFLICT"
    assert data["error"] == (
        "Property is unavailable for the selected dates. Already booked from 2024-01-10 to 2024-01-15"
    )
    assert data["conflicting_dates"] == {"start": "2024-01-10", "end": "2024-01-15"}

    second_status = await test_session.scalar(select(BookingDate.status).where(BookingDate.id == UUID(second_id)))
    assert second_status == "pending"
    assert await test_session.scalar(select(func.count()).select_from(Assignment)) == 1


@pytest.mark.asyncio
async def test_booking_already_exists_endpoint(test_client, make_property, sample_booking_request_data):
    first_property = await make_property(name="Riverside House")
    second_property = await make_property(name="Harbour View")
    first_property_id = str(first_property.id)
    second_property_id = str(second_property.id)
    intake = await submit_booking_request(test_client, sample_booking_request_data)
    booking_date_id = intake["booking_dates"][0]["id"]

    first = await assign_property(test_client, booking_date_id, first_property_id, "2024-03-01", "2024-03-10")
    assert first.status_code == 201

    response = await assign_property(test_client, booking_date_id, second_property_id, "2024-03-01", "2024-03-10")

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "BOOKING_ALREADY_EXISTS"
    assert data["existing_assignment_id"] == first.json()["data"]["id"]


@pytest.mark.asyncio
async def test_missing_fields_endpoint(test_client):
    response = await test_client.post("/property-assignment", json={"contractor_name": "Dylan Morgan"})

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "MISSING_FIELDS"
    assert data["details"]["missing"] == ["booking_date_id", "property_id", "start_date", "end_date"]


@pytest.mark.asyncio
async def test_unknown_property_endpoint(test_client, sample_booking_request_data):
    intake = await submit_booking_request(test_client, sample_booking_request_data)

    response = await assign_property(
        test_client,
        intake["booking_dates"][0]["id"],
        "00000000-0000-0000-0000-000000000002",
        "2024-03-01",
        "2024-03-10"
    )

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_booking_value_endpoint(test_client, make_property, sample_booking_request_data):
    property_ = await make_property()
    property_id = str(property_.id)
    data = dict(sample_booking_request_data, bookings=[
        {"startDate": "2024-03-01", "endDate": "2024-03-10"},
        {"startDate": "2024-04-01", "endDate": "2024-04-10"},
    ])
    intake = await submit_booking_request(test_client, data)
    assigned_id, unassigned_id = (d["id"] for d in intake["booking_dates"])
    response = await assign_property(test_client, assigned_id, property_id, "2024-03-01", "2024-03-10", value="450.00")
    assert response.status_code == 201
    headers = auth_headers("contractor", sub=intake["contractor"]["id"])

    assigned = await test_client.get(f"/booking-values/{assigned_id}", headers=headers)
    unassigned = await test_client.get(f"/booking-values/{unassigned_id}", headers=headers)

    assert assigned.status_code == 200
    assert assigned.json() == {"success": True, "booking_date_id": assigned_id, "value": "450.00"}
    assert unassigned.status_code == 200
    assert unassigned.json()["value"] is None


@pytest.mark.asyncio
async def test_booking_value_requires_authentication(test_client):
    response = await test_client.get("/booking-values/00000000-0000-0000-0000-000000000005")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_booking_value_malformed_id(test_client):
    response = await test_client.get("/booking-values/not-a-uuid", headers=auth_headers("contractor"))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
