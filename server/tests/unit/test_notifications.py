"""Unit tests for CRM event forwarding."""

import httpx
import pytest

from bookinghub.integrations.notifications import CrmNotifier
from conftest import CRM_BOOKING_REQUEST_URL, CRM_URL


@pytest.mark.asyncio
async def test_notify_envelope(notifier, crm):
    """Events are wrapped with their type, a timestamp and the source."""
    delivered = await notifier.notify("property_assigned", {"booking_id": "b-1"})

    assert delivered is True
    ((url, body),) = crm.requests
    assert url == CRM_URL
    assert body["event_type"] == "property_assigned"
    assert body["data"] == {"booking_id": "b-1"}
    assert body["source"] == "property-booking-system"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_booking_request_events_use_their_own_url(notifier, crm):
    await notifier.notify_booking_request_date({"booking_id": "d-1"})

    ((url, body),) = crm.requests
    assert url == CRM_BOOKING_REQUEST_URL
    assert body["event_type"] == "booking_request_date_created"


@pytest.mark.asyncio
async def test_booking_request_url_falls_back(crm):
    client = httpx.AsyncClient(transport=httpx.MockTransport(crm.handler))
    notifier = CrmNotifier(CRM_URL, client=client)

    await notifier.notify_booking_request_date({"booking_id": "d-1"})
    await notifier.aclose()

    assert crm.requests[0][0] == CRM_URL


@pytest.mark.asyncio
async def test_failed_delivery_is_swallowed(notifier, crm):
    """A CRM error response is reported as False, never raised."""
    crm.status_code = 500

    delivered = await notifier.notify("payment_succeeded", {"booking_id": "b-1"})

    assert delivered is False
    assert len(crm.requests) == 1


@pytest.mark.asyncio
async def test_transport_error_is_swallowed():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(unreachable))
    notifier = CrmNotifier(CRM_URL, client=client)

    assert await notifier.notify("payment_succeeded", {}) is False
    await notifier.aclose()


@pytest.mark.asyncio
async def test_unconfigured_notifier_skips(crm):
    client = httpx.AsyncClient(transport=httpx.MockTransport(crm.handler))
    notifier = CrmNotifier(None, client=client)

    assert await notifier.notify("booking_created", {}) is False
    assert crm.requests == []
    await notifier.aclose()
