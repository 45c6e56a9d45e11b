"""Test fixtures and configuration."""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["COOKIE_SECURE"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["RESEND_API_KEY"] = ""
os.environ["STRIPE_SECRET_KEY"] = ""

from datetime import timedelta  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from journey_forward.admin.auth import hash_password, issue_session_token  # noqa: E402
from journey_forward.booking.lifecycle import BookingService  # noqa: E402
from journey_forward.config import settings  # noqa: E402
from journey_forward.database import create_session_factory, get_db  # noqa: E402
from journey_forward.dependencies import (  # noqa: E402
    get_image_storage,
    get_notifier,
    get_payment_gateway,
)
from journey_forward.models import Admin, Base  # noqa: E402
from journey_forward.models.base import utcnow  # noqa: E402
from journey_forward.payments.gateway import IntentInfo  # noqa: E402
from journey_forward.schemas.booking import BookingCreate  # noqa: E402
from journey_forward.uploads.storage import ImageStorage  # noqa: E402

ADMIN_PASSWORD = "secret123"


def build_booking_payload(**overrides) -> dict:
    """JSON body for a valid pickup request three days out."""
    payload = {
        "customer": {
            "first_name": "Jane",
            "last_name": "Doe",
            "email": "Jane.Doe@Example.com",
            "phone": "604-555-0100",
        },
        "pickup": {
            "postal_code": "v6b 1a1",
            "address_line1": "123 Main St",
            "city": "Vancouver",
        },
        "delivery_required": False,
        "preferred_datetime": (utcnow() + timedelta(days=3)).isoformat(),
        "items": [
            {"name": "Sofa", "size": "large", "quantity": 1},
            {"name": "Chair", "size": "small", "quantity": 2},
        ],
    }
    payload.update(overrides)
    return payload


def build_booking(**overrides) -> BookingCreate:
    return BookingCreate.model_validate(build_booking_payload(**overrides))


@pytest.fixture
def booking_payload():
    """Factory for request JSON bodies."""
    return build_booking_payload


@pytest.fixture
def make_booking():
    """Factory for validated ``BookingCreate`` objects."""
    return build_booking


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite shared across connections."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    """Mock email notifier; no failures by default."""
    mock = MagicMock()
    mock.notify = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def gateway():
    """Mock Stripe gateway."""
    mock = MagicMock()
    mock.create_customer = AsyncMock(return_value="cus_test")
    mock.create_setup_intent = AsyncMock(
        return_value=IntentInfo("seti_test", "requires_payment_method", "seti_secret")
    )
    mock.create_payment_intent = AsyncMock(
        return_value=IntentInfo("pi_test", "requires_confirmation", "pi_secret")
    )
    mock.confirm_payment_intent = AsyncMock(
        return_value=IntentInfo("pi_test", "succeeded", "pi_secret")
    )
    mock.charge_off_session = AsyncMock(return_value=IntentInfo("pi_fee", "succeeded"))
    mock.construct_event = MagicMock()
    return mock


@pytest.fixture
def storage():
    """Image storage with the S3 client mocked out."""
    storage = ImageStorage(
        bucket_name="jfs-items",
        region="ca-central-1",
        base_url="https://cdn.example.com/",
    )
    storage.s3 = MagicMock()
    return storage


@pytest.fixture
def booking_service(db_session, notifier, gateway):
    return BookingService(db_session, notifier, gateway)


@pytest_asyncio.fixture
async def admin(session_factory):
    async with session_factory() as session:
        admin = Admin(
            username="admin",
            email="admin@example.com",
            password_hash=hash_password(ADMIN_PASSWORD, rounds=4),
        )
        session.add(admin)
        await session.commit()
        return admin


@pytest_asyncio.fixture
async def client(session_factory, notifier, gateway, storage):
    """HTTP client against the app with external clients replaced."""
    from journey_forward.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_image_storage] = lambda: storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_client(client, admin):
    """Client carrying a valid admin session cookie."""
    token = issue_session_token(
        admin.id,
        admin.username,
        settings.admin_jwt_secret,
        settings.admin_session_max_age,
    )
    client.cookies.set(settings.admin_session_name, token)
    return client


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD
