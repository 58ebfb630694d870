"""
Test configuration and fixtures for the realty booking API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="realty-uploads-"))

import io
import uuid
import datetime as dt
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from fastapi import UploadFile
from httpx import AsyncClient, ASGITransport
from PIL import Image
from starlette.datastructures import Headers
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

import realty.models  # noqa: F401
from realty.main import app
from realty.database import Base, get_db
from realty.models.user import User, UserRole
from realty.models.property import Property, PropertyType, PropertyStatus
from realty.models.booking import Booking, BookingStatus, BookingType, TimeSlot
from realty.repositories.user import UserRepository
from realty.repositories.property import PropertyRepository
from realty.repositories.booking import BookingRepository
from realty.repositories.favorite import FavoriteRepository
from realty.services.auth import AuthService
from realty.services.booking import BookingService
from realty.services.favorite import FavoriteService
from realty.services.property import PropertyService
from realty.services.storage import FileStorageService
from realty.utils.auth import create_access_token
from realty.utils.dependencies import get_file_storage_service

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")

TEST_PASSWORD = "testpassword123"

# Fixed "today" so booking date checks do not depend on the wall clock
TODAY = dt.date(2030, 5, 14)


@pytest.fixture
async def test_engine():
    """Fresh schema per test, in memory unless TEST_DATABASE_URL says otherwise."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False}
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def file_storage(tmp_path) -> FileStorageService:
    return FileStorageService(str(tmp_path / "uploads"))


@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    file_storage: FileStorageService
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client bound to the test session and upload directory."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage_service] = lambda: file_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def booking_repository(db_session: AsyncSession) -> BookingRepository:
    return BookingRepository(db_session)


@pytest.fixture
def favorite_repository(db_session: AsyncSession) -> FavoriteRepository:
    return FavoriteRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession, file_storage: FileStorageService) -> PropertyService:
    return PropertyService(db_session, file_storage)


@pytest.fixture
def booking_service(db_session: AsyncSession) -> BookingService:
    """Booking service whose calendar is pinned to TODAY."""
    return BookingService(db_session, clock=lambda: TODAY)


@pytest.fixture
def favorite_service(db_session: AsyncSession) -> FavoriteService:
    return FavoriteService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        full_name: str = "Test User",
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> User:
        return await user_repo.create_user({
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "full_name": full_name,
            "role": role,
            "is_active": is_active,
        })


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        agent_id: Optional[uuid.UUID] = None,
        name: str = "Test Villa",
        property_type: PropertyType = PropertyType.VILLA,
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        description: str = "A beautiful test property",
        address: str = "12 Palm Road, Limassol",
        price: Decimal = Decimal("250000.00"),
        bedrooms: int = 3,
        bathrooms: int = 2,
        area: int = 1800,
        facilities: Optional[List[str]] = None,
        latitude: Optional[Decimal] = None,
        longitude: Optional[Decimal] = None,
        images: Optional[List[str]] = None
    ) -> Dict:
        return {
            "agent_id": agent_id,
            "name": name,
            "type": property_type,
            "status": status,
            "description": description,
            "address": address,
            "price": price,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area": area,
            "facilities": facilities if facilities is not None else ["Wifi"],
            "images": images or [],
            "latitude": latitude,
            "longitude": longitude,
        }

    @staticmethod
    async def create_property(property_repo: PropertyRepository, agent_id: uuid.UUID, **overrides) -> Property:
        property_data = PropertyFactory.create_property_data(agent_id=agent_id, **overrides)
        return await property_repo.create_property(property_data)


class BookingFactory:
    """Factory for creating bookings directly in the store."""

    @staticmethod
    async def create_booking(
        booking_repo: BookingRepository,
        property_obj: Property,
        user_id: uuid.UUID,
        date: dt.date = TODAY,
        time_slot: TimeSlot = TimeSlot.SLOT_10_11,
        status: BookingStatus = BookingStatus.PENDING,
        booking_type: BookingType = BookingType.VIEWING
    ) -> Booking:
        return await booking_repo.create({
            "property_id": property_obj.id,
            "user_id": user_id,
            "agent_id": property_obj.agent_id,
            "booking_type": booking_type,
            "status": status,
            "date": date,
            "time_slot": time_slot,
        })


def make_image_bytes(image_format: str = "PNG", size=(16, 16)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


def make_upload(data: bytes, filename: str = "front.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename, headers=Headers({"content-type": content_type}))


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    """A renter/buyer account."""
    return await UserFactory.create_user(user_repository, email="renter@test.com", full_name="Test Renter")


@pytest.fixture
async def other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="other@test.com", full_name="Other Renter")


@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="agent@test.com",
        full_name="Test Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def other_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="agent2@test.com",
        full_name="Other Agent",
        role=UserRole.AGENT
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@test.com",
        full_name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@test.com",
        full_name="Inactive User",
        is_active=False
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agent: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        test_agent.id,
        facilities=["Wifi", "Gym"],
        latitude=Decimal("34.68"),
        longitude=Decimal("33.04")
    )
