"""
Shared fixtures: a fresh on-disk SQLite database per test (aiosqlite),
stored users, a ride factory and an HTTPX client wired to the app.
"""
from datetime import date, time, timedelta

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import carpool.models  # noqa: F401  registers tables on Base.metadata
from carpool.database import Base, get_db
from carpool.main import app
from carpool.middleware.auth import create_access_token
from carpool.models import Ride, RideRequest, User, UserRole
from carpool.services import rides


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'carpool.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enforce_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def _make_user(session_factory, name: str, email: str, role: UserRole) -> User:
    async with session_factory() as session:
        user = User(name=name, email=email, role=role)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest_asyncio.fixture
async def driver(session_factory):
    return await _make_user(session_factory, "Neha Krishnan", "neha@carconnect.com", UserRole.driver)


@pytest_asyncio.fixture
async def other_driver(session_factory):
    return await _make_user(session_factory, "Arjun Mehta", "arjun@carconnect.com", UserRole.driver)


@pytest_asyncio.fixture
async def rider(session_factory):
    return await _make_user(session_factory, "Priya Sharma", "priya@carconnect.com", UserRole.rider)


@pytest_asyncio.fixture
async def rider_b(session_factory):
    return await _make_user(session_factory, "Rahul Verma", "rahul@carconnect.com", UserRole.rider)


def ride_fields(**overrides) -> dict:
    fields = {
        "vehicle_name": "Honda City",
        "vehicle_number": "KA01AB1234",
        "from_location": "Koramangala",
        "to_location": "Whitefield Tech Park",
        "ride_date": date.today() + timedelta(days=3),
        "ride_time": time(8, 30),
        "seats_available": 3,
        "notes": None,
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_ride(session_factory):
    async def factory(owner: User, **overrides) -> Ride:
        async with session_factory() as session:
            return await rides.create_ride(session, owner.id, ride_fields(**overrides))
    return factory


@pytest.fixture
def fetch(session_factory):
    """Read a row back through a new session, bypassing any identity map."""
    async def loader(model: type[Ride] | type[RideRequest], pk: int):
        async with session_factory() as session:
            return await session.get(model, pk)
    return loader


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def new_ride_fields():
    return ride_fields
