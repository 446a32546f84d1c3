"""API tests for direct bookings and booking retrieval."""

import pytest

from conftest import assign_property, auth_headers, submit_booking_request


@pytest.mark.asyncio
async def test_create_direct_booking(test_client, crm, make_property, sample_booking_request_data):
    """A known contractor's direct booking is linked to them."""
    property_ = await make_property()
    property_id = str(property_.id)
    intake = await submit_booking_request(test_client, sample_booking_request_data)
    contractor_id = intake["contractor"]["id"]

    response = await test_client.post(
        "/bookings/create",
        json={"property_id": property_id, "start_date": "2024-05-01", "end_date": "2024-05-08"},
        headers=auth_headers("contractor", sub=contractor_id, full_name="Dylan Morgan")
    )

    assert response.status_code == 201
    booking = response.json()["booking"]
    assert booking["source"] == "direct"
    assert booking["status"] == "pending"
    assert booking["contractor_id"] == contractor_id
    assert booking["assignment_id"] is None
    assert booking["start_date"] == "2024-05-01"

    (event,) = crm.events("booking_created")
    assert event["data"]["booking_id"] == booking["id"]
    assert event["data"]["contractor_name"] == "Dylan Morgan"


@pytest.mark.asyncio
async def test_direct_booking_unknown_caller_not_linked(test_client, make_property):
    property_ = await make_property()

    response = await test_client.post(
        "/bookings/create",
        json={"property_id": str(property_.id), "start_date": "2024-05-01", "end_date": "2024-05-08"},
        headers=auth_headers("admin")
    )

    assert response.status_code == 201
    assert response.json()["booking"]["contractor_id"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"start_date": "2024-05-01", "end_date": "2024-05-08"},
        {"property_id": "nope", "start_date": "2024-05-01", "end_date": "2024-05-08"},
        {"property_id": "00000000-0000-0000-0000-000000000005", "start_date": "01/05/2024", "end_date": "2024-05-08"},
        {"property_id": "00000000-0000-0000-0000-000000000005", "start_date": "2024-05-08", "end_date": "2024-05-01"},
    ],
)
async def test_direct_booking_validation(test_client, payload):
    response = await test_client.post("/bookings/create", json=payload, headers=auth_headers("contractor"))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_direct_booking_unknown_property(test_client):
    response = await test_client.post(
        "/bookings/create",
        json={
            "property_id": "00000000-0000-0000-0000-000000000005",
            "start_date": "2024-05-01",
            "end_date": "2024-05-08"
        },
        headers=auth_headers("contractor")
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_direct_booking_requires_contractor(test_client, make_property):
    property_ = await make_property()

    response = await test_client.post(
        "/bookings/create",
        json={"property_id": str(property_.id), "start_date": "2024-05-01", "end_date": "2024-05-08"},
        headers=auth_headers("landlord")
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_booking_permissions(test_client, landlord, make_property, sample_booking_request_data):
    """The booking's contractor, the property's landlord and admins may read it."""
    landlord_id = str(landlord.id)
    property_ = await make_property()
    intake = await submit_booking_request(test_client, sample_booking_request_data)
    contractor_id = intake["contractor"]["id"]
    assigned = await assign_property(
        test_client,
        intake["booking_dates"][0]["id"],
        str(property_.id),
        "2024-03-01",
        "2024-03-10",
        contractor_name="Dylan Morgan",
        contractor_email="dylan.morgan@example.com"
    )
    booking_id = assigned.json()["booking_id"]
    url = f"/bookings/{booking_id}"

    for headers in (
        auth_headers("contractor", sub=contractor_id),
        auth_headers("landlord", sub=landlord_id),
        auth_headers("admin"),
    ):
        response = await test_client.get(url, headers=headers)
        assert response.status_code == 200
        assert response.json()["booking"]["id"] == booking_id

    other = await test_client.get(url, headers=auth_headers("contractor", sub="00000000-0000-0000-0000-000000000006"))
    assert other.status_code == 403
    assert other.json()["error"] == "Access denied"

    anonymous = await test_client.get(url)
    assert anonymous.status_code == 401


@pytest.mark.asyncio
async def test_get_unknown_booking(test_client):
    for booking_id in ("00000000-0000-0000-0000-000000000007", "not-a-uuid"):
        response = await test_client.get(f"/bookings/{booking_id}", headers=auth_headers("admin"))
        assert response.status_code == 404
