"""
Shared test fixtures
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.db import Base, get_db
from app.models import Guest, Table
from app.services import repositories
from app.utils.security import rate_limiter
from fake_firestore import FakeFirestore
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_seating.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db_session):
    """Test client bound to the test database session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

@pytest.fixture
def fs(monkeypatch):
    """Route every repository call to an in-memory Firestore"""
    fake = FakeFirestore()
    monkeypatch.setattr(settings, "USE_FIREBASE", True)
    monkeypatch.setattr(repositories, "get_firestore_client", lambda: fake)
    return fake

@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.clear()
    yield
    rate_limiter.clear()

@pytest.fixture
def make_table(db_session):
    """Factory inserting a table row"""
    def _make(name="Table 1", seats=4, table_type="regular"):
        table = Table(name=name, seats=seats, notes="", table_type=table_type)
        db_session.add(table)
        db_session.commit()
        return table.id
    return _make

@pytest.fixture
def make_guest(db_session):
    """Factory inserting a guest row, optionally already seated"""
    def _make(first_name="Guest", rsvp_status="confirmed", table_id=None, seat_index=None, **extra):
        guest = Guest(
            first_name=first_name,
            last_name=extra.pop("last_name", ""),
            rsvp_status=rsvp_status,
            table_id=table_id,
            seat_index=seat_index,
            **extra
        )
        db_session.add(guest)
        db_session.commit()
        return guest.id
    return _make
