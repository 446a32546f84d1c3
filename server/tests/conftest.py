"""Test configuration and fixtures."""

import hashlib
import hmac
import json
import time
from decimal import Decimal
from typing import Any

import httpx
import jwt
import pytest
import pytest_asyncio
import stripe
from httpx import ASGITransport, AsyncClient

from bookinghub.core.config import settings
from bookinghub.core.database import Database, get_db
from bookinghub.core.dependencies import get_notifier, get_payment_gateway
from bookinghub.integrations.notifications import CrmNotifier
from bookinghub.integrations.payments import CheckoutSession, PaymentGateway
from bookinghub.models import *  # noqa: F403 - Import all models
from bookinghub.models import Landlord, Property

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

WEBHOOK_SECRET = "whsec_test_secret"
CRM_URL = "http://crm.test/hooks/events"
CRM_BOOKING_REQUEST_URL = "http://crm.test/hooks/booking-requests"


class FakePaymentGateway(PaymentGateway):
    """Payment gateway that opens sessions locally but verifies signatures for real."""

    def __init__(self, **kwargs):
        super().__init__(
            secret_key="",
            webhook_secret=WEBHOOK_SECRET,
            success_url="http://frontend.test/contractor?payment=success",
            cancel_url="http://frontend.test/contractor?payment=cancelled",
            **kwargs
        )
        self.created: list[dict[str, Any]] = []
        self.error: Exception | None = None

    async def _create_session(self, params: dict[str, Any]) -> CheckoutSession:
        if self.error is not None:
            raise self.error
        self.created.append(params)
        session_id = f"cs_test_{len(self.created)}"
        return CheckoutSession(id=session_id, url=f"https://checkout.stripe.test/pay/{session_id}")


class CrmRecorder:
    """Captures what the CRM webhook would receive."""

    def __init__(self):
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((str(request.url), json.loads(request.content)))
        return httpx.Response(self.status_code, json={"ok": self.status_code < 400})

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        return [
            body for _, body in self.requests
            if event_type is None or body["event_type"] == event_type
        ]


def make_token(role: str, sub: str = "admin-1", full_name: str = "Test User") -> str:
    """Create a bearer token the API accepts."""
    payload = {
        "sub": sub,
        "full_name": full_name,
        "email": f"{sub}@example.com",
        "role": role,
        "exp": int(time.time()) + 3600,
    }
    return jwt.encode(payload, settings.bearer_token_secret, algorithm="HS256")


def auth_headers(role: str, sub: str = "admin-1", full_name: str = "Test User") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role, sub, full_name)}"}


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a ``Stripe-Signature`` header value for ``payload``."""
    timestamp = timestamp or int(time.time())
    signed = f"{timestamp}.{payload}".encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def password_matches(stored: str, password: str) -> bool:
    """Recompute a stored pbkdf2 hash for ``password``."""
    algorithm, iterations, salt, hex_digest = stored.split("$")
    digest = hashlib.pbkdf2_hmac(algorithm.removeprefix("pbkdf2_"), password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), hex_digest)


def checkout_event(
    event_type: str,
    session_id: str,
    booking_id: str | None,
    amount_total: int = 45000
) -> str:
    """Serialized Stripe checkout event."""
    metadata = {"booking_id": booking_id} if booking_id else {}
    return json.dumps({
        "id": f"evt_{session_id}_{event_type}",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "amount_total": amount_total,
                "payment_status": "paid" if event_type.endswith("completed") else "unpaid",
                "metadata": metadata,
            }
        },
    })


@pytest_asyncio.fixture(scope="function")
async def test_database():
    """Create a test database with all tables."""
    database = Database(TEST_DATABASE_URL)
    await database.create_all()

    yield database

    await database.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_database):
    """Create a test database session."""
    async with test_database.session_factory() as session:
        yield session


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def crm():
    return CrmRecorder()


@pytest_asyncio.fixture(scope="function")
async def notifier(crm):
    client = httpx.AsyncClient(transport=httpx.MockTransport(crm.handler))
    notifier = CrmNotifier(CRM_URL, CRM_BOOKING_REQUEST_URL, client=client)

    yield notifier

    await notifier.aclose()


@pytest_asyncio.fixture(scope="function")
async def test_app(test_database, test_session, payment_gateway, notifier):
    """The real application with test collaborators swapped in."""
    from bookinghub.main import create_app

    app = create_app()
    app.state.database = test_database

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def landlord(test_session):
    landlord = Landlord(
        full_name="Margaret Hughes",
        email="margaret.hughes@example.com",
        contact_number="07700 900123"
    )
    test_session.add(landlord)
    await test_session.commit()
    return landlord


@pytest.fixture
def make_property(test_session, landlord):
    """Factory creating an available property with the given daily price."""

    async def factory(price: str = "50.00", name: str = "Riverside House") -> Property:
        property_ = Property(
            landlord_id=landlord.id,
            property_name=name,
            property_type="House",
            full_address="12 Quay Street",
            postcode="CF10 1EA",
            city="Cardiff",
            price=Decimal(price),
            is_available=True
        )
        test_session.add(property_)
        await test_session.commit()
        return property_

    return factory


@pytest.fixture
def sample_booking_request_data():
    """Sample booking request payload as sent by the public form."""
    return {
        "fullName": "Dylan Morgan",
        "companyName": "Morgan Civils Ltd",
        "email": "dylan.morgan@example.com",
        "phone": "07700 900789",
        "projectPostcode": "CF10 1EA",
        "password": "s3cret-pass",
        "bookings": [{"startDate": "2024-03-01", "endDate": "2024-03-10"}],
        "teamSize": 4,
        "budgetPerPerson": "250",
        "city": "Cardiff"
    }


@pytest.fixture
def stripe_error():
    return stripe.APIConnectionError("Could not connect to Stripe")


async def submit_booking_request(client: AsyncClient, data: dict[str, Any], **overrides) -> dict[str, Any]:
    """POST a booking request and return the response body."""
    response = await client.post("/booking-requests", json=dict(data, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


async def assign_property(
    client: AsyncClient,
    booking_date_id: str,
    property_id: str,
    start_date: str,
    end_date: str,
    **extra
) -> httpx.Response:
    return await client.post("/property-assignment", json={
        "booking_date_id": booking_date_id,
        "property_id": property_id,
        "start_date": start_date,
        "end_date": end_date,
        **extra
    })
