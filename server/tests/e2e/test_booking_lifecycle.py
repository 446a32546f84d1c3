"""End-to-end test of a booking from request to payment and confirmation."""

import pytest
from sqlalchemy import select

from bookinghub.models import Property
from conftest import assign_property, auth_headers, checkout_event, sign_payload, submit_booking_request


@pytest.mark.asyncio
async def test_request_assign_pay_confirm(test_client, test_session, crm, payment_gateway, make_property, sample_booking_request_data):
    """Request, assignment, payment and admin confirmation, in order."""
    property_ = await make_property(price="50.00")
    property_id = str(property_.id)

    # 1. The contractor asks for 2024-03-01 to 2024-03-10
    intake = await submit_booking_request(test_client, sample_booking_request_data)
    contractor_id = intake["contractor"]["id"]
    booking_date_id = intake["booking_dates"][0]["id"]

    # 2. Operations assign a property for those dates
    assigned = await assign_property(
        test_client, booking_date_id, property_id, "2024-03-01", "2024-03-10",
        contractor_name="Dylan Morgan",
        contractor_email="dylan.morgan@example.com"
    )
    assert assigned.status_code == 201
    booking_id = assigned.json()["booking_id"]
    assert await test_session.scalar(select(Property.is_available).where(Property.id == property_.id)) is False

    # 3. The contractor opens a checkout session: 9 days at 50.00
    session = await test_client.post("/stripe/create-session", json={"booking_id": booking_id})
    assert session.status_code == 200
    assert session.json()["invoice"]["amount"] == 450.0
    session_id = session.json()["session_id"]

    # 4. Stripe reports the payment
    payload = checkout_event("checkout.session.completed", session_id, booking_id, amount_total=45000)
    paid = await test_client.post(
        "/stripe/webhook",
        content=payload,
        headers={"Stripe-Signature": sign_payload(payload), "Content-Type": "application/json"}
    )
    assert paid.status_code == 200

    contractor_view = await test_client.get(
        f"/bookings/{booking_id}",
        headers=auth_headers("contractor", sub=contractor_id)
    )
    assert contractor_view.json()["booking"]["status"] == "paid"

    # 5. An admin confirms it
    confirmed = await test_client.put(
        f"/admin/bookings/{booking_id}/confirm",
        json={"status": "confirmed"},
        headers=auth_headers("admin")
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["booking"]["status"] == "confirmed"

    # The same dates cannot be given to anyone else
    other = await submit_booking_request(
        test_client, sample_booking_request_data, email="other.contractor@example.com"
    )
    clash = await assign_property(
        test_client, other["booking_dates"][0]["id"], property_id, "2024-03-05", "2024-03-06"
    )
    assert clash.status_code == 409
    assert clash.json()["code"] == "DATE_CONFLICT"

    assert [e["event_type"] for e in crm.events()] == [
        "booking_request_date_created",
        "property_assigned",
        "payment_succeeded",
        "booking_confirmed",
        "booking_request_date_created",
    ]
