import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from datetime import datetime, timedelta, timezone
import uuid
from app.main import app
from app.api.routers.properties import get_property_service
from app.core.auth import AuthService
from app.core.database import Base, get_db, get_session_factory
from app.db.models import Property, Message, User
from app.modules.properties.service import PropertyService
from app.modules.properties.storage import ImageStorage

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return engine

@pytest.fixture(scope="function")
def test_session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

@pytest.fixture(scope="function")
def test_db_session(test_engine, test_session_factory):
    """Create a test database session"""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    session = test_session_factory()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)

@pytest.fixture(scope="function")
def override_get_db(test_db_session):
    """Override the get_db dependency for testing"""
    def _override_get_db():
        try:
            yield test_db_session
        finally:
            pass
    return _override_get_db

@pytest.fixture(scope="function")
def image_storage(tmp_path):
    return ImageStorage(upload_dir=str(tmp_path / "uploads"), max_size_bytes=1024 * 1024)

@pytest.fixture(scope="function")
def client(override_get_db, test_db_session, test_session_factory, image_storage):
    """TestClient wired to the test database and a temporary upload directory"""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: test_session_factory
    app.dependency_overrides[get_property_service] = lambda: PropertyService(test_db_session, storage=image_storage)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

# Record factories

_counter = {"value": 0}

def _next() -> int:
    _counter["value"] += 1
    return _counter["value"]

@pytest.fixture
def make_user(test_db_session):
    """Create a user row; returns the ORM instance"""
    def _make_user(role="homeowner", name=None, email=None, phone="9876543210", password="secret123"):
        n = _next()
        user = User(
            id=uuid.uuid4(),
            name=name or f"User {n}",
            email=email or f"user{n}@rentals.io",
            phone=phone,
            role=role,
            hashed_password=AuthService.get_password_hash(password),
            is_active=True,
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)
        return user
    return _make_user

@pytest.fixture
def make_property(test_db_session):
    """Create a property row owned by ``owner``; keyword args override columns"""
    def _make_property(owner, **overrides):
        n = _next()
        values = {
            "id": uuid.uuid4(),
            "owner_id": owner.id,
            "title": f"Sunny flat number {n}",
            "description": "Bright two bedroom flat close to the metro station.",
            "property_type": "flat",
            "rent": 15000,
            "rent_type": "monthly",
            "city": "Bangalore",
            "area": "Koramangala",
            "pin_code": "560034",
            "address": f"{n} 5th Cross Road",
            "latitude": 12.93,
            "longitude": 77.62,
            "images": [],
            "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=n),
        }
        values.update(overrides)
        record = Property(**values)
        test_db_session.add(record)
        test_db_session.commit()
        test_db_session.refresh(record)
        return record
    return _make_property

@pytest.fixture
def make_message(test_db_session):
    """Create a message row from ``sender`` about ``prop``"""
    def _make_message(sender, prop, **overrides):
        n = _next()
        values = {
            "id": uuid.uuid4(),
            "sender_id": sender.id,
            "receiver_id": prop.owner_id,
            "property_id": prop.id,
            "subject": f"Inquiry {n}",
            "content": "Is this flat still available next month?",
            "created_at": datetime(2025, 2, 1, tzinfo=timezone.utc) + timedelta(minutes=n),
        }
        values.update(overrides)
        record = Message(**values)
        test_db_session.add(record)
        test_db_session.commit()
        test_db_session.refresh(record)
        return record
    return _make_message

def auth_headers_for(user) -> dict:
    token = AuthService.create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def auth_headers():
    return auth_headers_for
