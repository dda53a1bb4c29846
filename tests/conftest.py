import itertools
import os
from datetime import datetime, timezone

# before gymbook reads its settings
os.environ.setdefault("GYM_DATABASE_URL", "sqlite://")
os.environ["GYM_TIMEZONE"] = "UTC"

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from gymbook.auth import create_access_token
from gymbook.db import get_session, init_db, make_engine
from gymbook.deps import get_now
from gymbook.main import app
from gymbook.models import Booking, Profile

# Friday morning; every API test runs against this clock.
NOW = datetime(2025, 5, 30, 9, 0, tzinfo=timezone.utc)


def utc(year, month, day, hour, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def iso(value: datetime) -> str:
    return value.isoformat()


def parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'gym.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine):
    """Test client bound to the per-test database and the fixed clock."""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_now] = lambda: NOW

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def make_user(client, engine):
    """Sign up a user through the API and hand back auth headers for it."""
    counter = itertools.count(1)

    def _make(role="neighbor", email=None, flat_number="3B"):
        email = email or f"user{next(counter)}@example.com"
        response = client.post(
            "/auth/signup",
            json={"email": email, "password": "password123", "flat_number": flat_number},
        )
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]

        if role != "neighbor":
            with Session(engine) as session:
                profile = session.get(Profile, user_id)
                profile.role = role
                session.add(profile)
                session.commit()

        token = create_access_token({"sub": email})
        return {
            "id": user_id,
            "email": email,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make


@pytest.fixture
def add_booking(engine):
    """Insert a booking directly, skipping the booking rules."""

    def _add(user_id, start, end):
        with Session(engine) as session:
            booking = Booking(user_id=user_id, start_time=start, end_time=end)
            session.add(booking)
            session.commit()
            session.refresh(booking)
            return booking.id

    return _add
