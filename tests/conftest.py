import pytest
import os
from datetime import timedelta

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ENABLE_RATE_LIMITING"] = "false"

from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.core.time_utils import utc_today
from app.models.employee import Employee
from fastapi.testclient import TestClient


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema and session per test; the in-memory engine shares one connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def make_employee(db_session):
    """Factory for employees so tests can create as many as they need."""
    counter = {"n": 0}

    def _make_employee(first_name="Alice", last_name="Martin"):
        counter["n"] += 1
        emp = Employee(
            first_name=first_name,
            last_name=last_name,
            email=f"{first_name.lower()}.{counter['n']}@example.com",
            position="Engineer",
        )
        db_session.add(emp)
        db_session.commit()
        return emp
    return _make_employee


@pytest.fixture(scope="function")
def employee(make_employee):
    return make_employee()


@pytest.fixture(scope="function")
def next_monday():
    """A Monday strictly after today, so leave requests are never in the past."""
    today = utc_today()
    return today + timedelta(days=7 - today.weekday())


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
