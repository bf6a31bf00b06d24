import os
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ["APP_ENV"] = "dev"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["REMINDER_SCHEDULER_ENABLED"] = "false"  # No background timer inside TestClient
# Transports stay unconfigured by default; tests opt in with their own Settings
for _var in ("RESEND_API_KEY", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_FROM_NUMBER",
             "SQUARE_ACCESS_TOKEN", "SQUARE_LOCATION_ID", "SQUARE_APP_ID"):
    os.environ.pop(_var, None)

from app.core.config import Settings, get_settings
from app.db.base import Base
from app.db.deps import get_db
import app.db.models as _models  # noqa: F401
from app.db.models import Booking, BookingVehicle, Customer
from app.main import app

SQLALCHEMY_DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///:memory:")


def is_sqlite() -> bool:
    """Return True if the test database is SQLite (e.g. in-memory tests)."""
    return (SQLALCHEMY_DATABASE_URL or "").startswith("sqlite")


# SQLite needs check_same_thread=False and StaticPool; Postgres does not support check_same_thread
if is_sqlite():
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Background jobs open their own sessions; point them at the test database
import app.db.session as _db_session

_db_session.engine = engine
_db_session.SessionLocal = TestingSessionLocal


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings():
    """Settings with every transport configured (no real credentials)."""
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        resend_api_key="re_test_key",
        resend_from="JetSki Miami <bookings@test.dev>",
        twilio_account_sid="AC_test",
        twilio_auth_token="twilio_token",
        twilio_from_number="+15550000000",
        square_access_token="sq_test_token",
        square_location_id="LOC_TEST",
        square_app_id="sandbox-sq0idb-test",
        admin_email="admin@test.dev",
        waiver_signing_url="https://waiver.test/sign",
        reminder_scheduler_enabled=False,
    )


@pytest.fixture(scope="function")
def client(db, test_settings):
    """Create a test client with database and settings dependency overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_booking(db):
    """Factory: persist a customer + booking (+ vehicles) and return the booking."""

    counter = {"next": 100}

    def _make_booking(
        *,
        customer: dict | None = None,
        vehicles: int = 0,
        **fields,
    ) -> Booking:
        customer_fields = {
            "full_name": "Jane Smith",
            "email": "jane@example.com",
            "phone": "+13055550100",
            "has_boater_certificate": None,
        }
        customer_fields.update(customer or {})
        cust = Customer(**customer_fields)
        db.add(cust)
        db.flush()

        booking_fields = {
            "booking_number": f"JS-{counter['next']}",
            "rental_date": date(2025, 6, 1),
            "start_time": "14:00",
            "duration_hours": 2,
            "subtotal": Decimal("300"),
            "tax_amount": Decimal("21"),
            "total_amount": Decimal("321"),
            "addons_price": Decimal("0"),
            "status": "confirmed",
            "payment_status": "paid",
        }
        booking_fields.update(fields)
        counter["next"] += 1
        booking = Booking(customer_id=cust.id, **booking_fields)
        db.add(booking)
        db.flush()
        for i in range(vehicles):
            db.add(BookingVehicle(booking_id=booking.id, vehicle_name=f"Ski {i + 1}"))
        db.commit()
        db.refresh(booking)
        return booking

    return _make_booking
