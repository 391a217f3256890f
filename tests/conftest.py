"""
Shared fixtures: a throwaway SQLite database, a TestClient and user/kos factories.

DATABASE_URL must be set before any application module is imported, since
the engine is created at import time.
"""

import os
import tempfile
from datetime import date

import pytest

_db_dir = tempfile.mkdtemp(prefix="kos-booking-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from fastapi.testclient import TestClient  # noqa: E402

from database.init import Base, SessionLocal, engine  # noqa: E402
from database.models import Booking, Kos, User  # noqa: E402
from enums.booking_status import BookingStatus  # noqa: E402
from enums.user_role import UserRole  # noqa: E402
from main import app  # noqa: E402
from utils.date_utils import add_months  # noqa: E402
from utils.dependencies import create_access_token, hash_password  # noqa: E402

PASSWORD = "secret123"
# Always in the future relative to the day the suite runs
NEXT_YEAR = date.today().year + 1


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_user(db, username, role=UserRole.RENTER, name=None):
    user = User(
        name=name or username.title(),
        username=username,
        contact=f"{username}@example.com",
        role=role,
        hashed_password=hash_password(PASSWORD),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_kos(db, owner, price=500000, name="Kos Melati", city="Yogyakarta"):
    kos = Kos(
        owner_id=owner.id,
        name=name,
        address="Jl. Kaliurang Km 5",
        city=city,
        description="Dekat kampus",
        facilities="WiFi, AC",
        price=price,
    )
    db.add(kos)
    db.commit()
    db.refresh(kos)
    return kos


def make_booking(db, kos, renter, check_in, duration, status=BookingStatus.PENDING):
    booking = Booking(
        kos_id=kos.id,
        user_id=renter.id,
        check_in_date=check_in,
        check_out_date=add_months(check_in, duration),
        duration=duration,
        total_price=kos.price * duration,
        status=status.value,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def auth_header(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def seller(db):
    return make_user(db, "seller", UserRole.SELLER)


@pytest.fixture
def other_seller(db):
    return make_user(db, "otherseller", UserRole.SELLER)


@pytest.fixture
def renter(db):
    return make_user(db, "renter", UserRole.RENTER)


@pytest.fixture
def other_renter(db):
    return make_user(db, "otherrenter", UserRole.RENTER)


@pytest.fixture
def admin(db):
    return make_user(db, "admin", UserRole.ADMIN)


@pytest.fixture
def kos(db, seller):
    return make_kos(db, seller)
