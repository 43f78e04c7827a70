"""
Centralized Test Configuration.
"""

import itertools
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from zap_shift.app.main import app
from zap_shift.app.db.session import get_db, Base
from zap_shift.app.core.exceptions import AuthenticationError
from zap_shift.app.core.firebase import get_identity_verifier
from zap_shift.app.models.enums import UserRole, RiderStatus, WorkStatus
from zap_shift.app.models.rider import Rider
from zap_shift.app.models.user import User
from zap_shift.app.services.payment_gateway import CheckoutSession, get_payment_gateway

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

TOKEN_PREFIX = "valid-token:"


def auth_header(email: str) -> dict:
    """Authorization header the fake verifier accepts for ``email``."""
    return {"Authorization": f"Bearer {TOKEN_PREFIX}{email}"}


class FakeIdentityVerifier:
    """Accepts ``valid-token:<email>`` and rejects everything else."""

    def __init__(self):
        self.calls = 0

    async def verify(self, token: str) -> str:
        self.calls += 1
        if not token.startswith(TOKEN_PREFIX):
            raise AuthenticationError("Unauthorized access")
        return token[len(TOKEN_PREFIX):]


class FakePaymentGateway:
    """In-memory stand-in for Stripe checkout."""

    def __init__(self):
        self.created = []
        self.sessions = {}
        self._ids = itertools.count(1)

    async def create_checkout_session(self, *, unit_amount, product_name, customer_email, metadata):
        session_id = f"cs_test_{next(self._ids)}"
        self.created.append({
            "id": session_id,
            "unit_amount": unit_amount,
            "product_name": product_name,
            "customer_email": customer_email,
            "metadata": metadata,
        })
        return f"https://checkout.stripe.test/pay/{session_id}"

    def complete(self, session_id, *, parcel_id, tracking_id=None, amount_total=1250,
                 payment_status="paid", payment_intent="pi_test_1",
                 customer_email="sender@zapshift.io"):
        """Register a finished session as Stripe would report it."""
        metadata = {"parcelId": str(parcel_id)}
        if tracking_id:
            metadata["trackingId"] = tracking_id
        self.sessions[session_id] = CheckoutSession(
            id=session_id,
            payment_status=payment_status,
            payment_intent=payment_intent,
            amount_total=amount_total,
            currency="usd",
            customer_email=customer_email,
            metadata=metadata,
        )

    async def retrieve_session(self, session_id):
        return self.sessions[session_id]


@pytest.fixture
def identity_verifier():
    return FakeIdentityVerifier()


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture(autouse=True)
def apply_overrides(identity_verifier, payment_gateway):
    """Route the app's DB, identity and payment dependencies to test doubles."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    async def _make_user(email: str, role: UserRole = UserRole.USER, display_name: str = None) -> User:
        user = User(email=email, display_name=display_name, role=role)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_rider(db_session):
    async def _make_rider(email: str, district: str = "Dhaka",
                          status: RiderStatus = RiderStatus.APPROVED,
                          work_status: WorkStatus = WorkStatus.AVAILABLE,
                          name: str = "Test Rider") -> Rider:
        rider = Rider(
            rider_email=email,
            rider_district=district,
            name=name,
            status=status,
            work_status=work_status,
        )
        db_session.add(rider)
        await db_session.commit()
        await db_session.refresh(rider)
        return rider
    return _make_rider


@pytest.fixture
async def admin_headers(make_user):
    await make_user("admin@zapshift.io", UserRole.ADMIN, "Admin")
    return auth_header("admin@zapshift.io")


@pytest.fixture
async def rider_headers(make_user):
    await make_user("rider@zapshift.io", UserRole.RIDER, "Rider")
    return auth_header("rider@zapshift.io")


@pytest.fixture
def headers_for():
    return auth_header


@pytest.fixture
def create_parcel(client):
    async def _create_parcel(**overrides) -> dict:
        payload = {"senderEmail": "sender@zapshift.io", "cost": 10, "parcelName": "Box"}
        payload.update(overrides)
        response = await client.post("/parcels", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _create_parcel


@pytest.fixture
def pay_parcel(client, payment_gateway):
    """Complete a paid checkout for a parcel through the payment-success callback."""
    async def _pay_parcel(parcel_id: int, tracking_id: str, intent: str = None) -> dict:
        session_id = f"cs_paid_{parcel_id}"
        payment_gateway.complete(
            session_id,
            parcel_id=parcel_id,
            tracking_id=tracking_id,
            payment_intent=intent or f"pi_{parcel_id}",
        )
        response = await client.patch("/payment-success", params={"session_id": session_id})
        assert response.status_code == 200, response.text
        return response.json()
    return _pay_parcel
