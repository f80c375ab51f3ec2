import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["ADMIN_EMAILS"] = "admin@salon-model.test"
os.environ["NOTIFICATION_FUNCTION_URL"] = ""
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import app
from app.services.notification_service import get_notifier
from app.shared.time_window import get_clock
from helpers import FakeClock, RecordingNotifier, auth_headers, listing_payload, make_token


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(clock, notifier):
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def student():
    return auth_headers(
        make_token("student-1", "hanako@example.ac.jp", "student", name="Hanako", school_name="Tokyo Beauty College")
    )


@pytest.fixture
def other_student():
    return auth_headers(make_token("student-2", "taro@example.com", "student", name="Taro"))


@pytest.fixture
def salon():
    return auth_headers(make_token("salon-1", "owner@salon.test", "salon", salon_name="Salon Aoyama"))


@pytest.fixture
def admin():
    return auth_headers(make_token("admin-1", "admin@salon-model.test", "salon", salon_name="Admin Salon"))


@pytest.fixture
def listing(client, salon):
    response = client.post("/listings", json=listing_payload(), headers=salon)
    assert response.status_code == 201, response.text
    return response.json()
