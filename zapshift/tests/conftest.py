"""
Centralized Test Configuration.
"""

import itertools

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.dml import Update

from zapshift.app.main import app
from zapshift.app.db.session import get_db, Base
from zapshift.app.core.jwt import create_access_token
import zapshift.app.core.redis_client as redis_client_module
from zapshift.app.models.user import User
from zapshift.app.models.rider import Rider
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.enums import UserRole
from zapshift.app.models.rider_enums import RiderStatus, WorkStatus
from zapshift.app.models.parcel_enums import DeliveryStatus, PaymentStatus

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_EMAIL = "admin@zapshift.io"
SENDER_EMAIL = "sender@zapshift.io"
RIDER_EMAIL = "rider@zapshift.io"

_tracking_seq = itertools.count(1)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        return not self._closed

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    async def exists(self, key):
        return 1 if key in self.store else 0

    async def flushdb(self):
        self.store = {}


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    @event.listens_for(test_engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mock_redis(monkeypatch):
    fake = MockRedis()
    monkeypatch.setattr(redis_client_module, "redis_client", fake)
    return fake


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, mock_redis):
    """Route the app's sessions and token store to the test doubles."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


def auth_headers(email: str) -> dict:
    """Bearer header as issued by the identity provider."""
    return {"Authorization": f"Bearer {create_access_token({'sub': email})}"}


async def reload(db_session, model, pk):
    """Read a row as committed by another session."""
    return await db_session.get(model, pk, populate_existing=True)


async def create_user(db_session, email: str, role: UserRole = UserRole.USER) -> User:
    user = User(email=email, name=email.split("@")[0], role=role)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def create_rider(
    db_session,
    email: str = RIDER_EMAIL,
    district: str = "Dhaka",
    status: RiderStatus = RiderStatus.ACTIVE,
    work_status: WorkStatus = WorkStatus.IDLE,
) -> Rider:
    rider = Rider(
        name=email.split("@")[0].title(),
        email=email,
        district=district,
        status=status,
        work_status=work_status,
    )
    db_session.add(rider)
    await db_session.commit()
    await db_session.refresh(rider)
    return rider


async def create_parcel(
    db_session,
    owner: str = SENDER_EMAIL,
    cost: int = 1000,
    sender_district: str = "Dhaka",
    receiver_district: str = "Dhaka",
    tracking_id: str = None,
    **fields,
) -> Parcel:
    parcel = Parcel(
        tracking_id=tracking_id or f"ZS-T{next(_tracking_seq):05d}",
        user_email=owner,
        title="Documents",
        sender_name="Sender",
        sender_district=sender_district,
        receiver_name="Receiver",
        receiver_district=receiver_district,
        cost=cost,
        delivery_status=fields.pop("delivery_status", DeliveryStatus.NOT_COLLECTED),
        payment_status=fields.pop("payment_status", PaymentStatus.UNPAID),
        **fields,
    )
    db_session.add(parcel)
    await db_session.commit()
    await db_session.refresh(parcel)
    return parcel


@pytest.fixture
async def admin(db_session):
    return await create_user(db_session, ADMIN_EMAIL, UserRole.ADMIN)


@pytest.fixture
async def sender(db_session):
    return await create_user(db_session, SENDER_EMAIL, UserRole.USER)


@pytest.fixture
async def rider_user(db_session):
    return await create_user(db_session, RIDER_EMAIL, UserRole.RIDER)


@pytest.fixture
async def rider(db_session, rider_user):
    return await create_rider(db_session, RIDER_EMAIL)


@pytest.fixture
async def parcel(db_session, sender):
    return await create_parcel(db_session)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(ADMIN_EMAIL)


@pytest.fixture
def sender_headers(sender):
    return auth_headers(SENDER_EMAIL)


@pytest.fixture
def rider_headers(rider):
    return auth_headers(RIDER_EMAIL)


def before_update_of(monkeypatch, session, table_name: str, hook):
    """
    Run `hook()` right before `session` issues an UPDATE on `table_name`.

    Lets a test commit a competing change between a service's read and its
    conditional write.
    """
    execute = session.execute

    async def execute_with_hook(statement, *args, **kwargs):
        if isinstance(statement, Update) and statement.table.name == table_name:
            await hook()
        return await execute(statement, *args, **kwargs)

    monkeypatch.setattr(session, "execute", execute_with_hook)
