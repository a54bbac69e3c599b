"""
Test configuration and fixtures.

Each test gets its own file-backed SQLite database so the BEGIN IMMEDIATE
hook behaves as in production. Sessions opened here must be closed before a
request is made through the client; an open transaction holds the write lock.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

import app.models  # noqa: F401
from app.core.clock import Clock, get_clock
from app.core.deps import get_db
from app.core.security import create_access_token, hash_password
from app.db.base import Base
from app.db.session import make_engine, make_session_factory
from app.main import app as fastapi_app
from app.models.kart import Kart
from app.models.settings import AppSettings
from app.models.user import User
from app.services.notifier import get_notifier
from app.services.policy import BookingPolicy, WorkingDay

TZ = "Europe/Tallinn"

# Monday
TODAY = date(2026, 10, 19)
NEXT_MONDAY = date(2026, 10, 26)


class FixedClock(Clock):
    def __init__(self, now: datetime):
        super().__init__(TZ)
        self._now = now.replace(tzinfo=self.tz) if now.tzinfo is None else now.astimezone(self.tz)

    def now(self) -> datetime:
        return self._now


class RecordingNotifier:
    def __init__(self):
        self.confirmations = []
        self.cancellations = []
        self.test_emails = []

    def send_booking_confirmation(self, booking, settings_row) -> bool:
        self.confirmations.append(booking.id)
        return True

    def send_booking_cancellation(self, booking, settings_row) -> bool:
        self.cancellations.append(booking.id)
        return True

    def send_test_email(self, to_email, settings_row) -> None:
        self.test_emails.append(to_email)


class FailingNotifier(RecordingNotifier):
    def send_booking_confirmation(self, booking, settings_row) -> bool:
        raise ConnectionRefusedError("smtp down")

    def send_booking_cancellation(self, booking, settings_row) -> bool:
        raise ConnectionRefusedError("smtp down")

    def send_test_email(self, to_email, settings_row) -> None:
        raise ConnectionRefusedError("smtp down")


# ============================================================================
# PURE FIXTURES
# ============================================================================

@pytest.fixture
def policy():
    """Monday 09:00-18:00 open, every other day closed, 30 minute slots."""
    return BookingPolicy(
        timeslot_duration=30,
        max_advance_booking_days=30,
        max_karts_per_timeslot=5,
        max_minutes_per_session=60,
        working_hours=(
            WorkingDay("monday", True, "09:00", "18:00"),
            WorkingDay("tuesday", False, "00:00", "00:00"),
        ),
        holidays=frozenset(),
    )


@pytest.fixture
def adult_kart():
    return SimpleNamespace(id="adult", name="Adult", type="Adult", price_per_slot=Decimal("25"), quantity=2)


@pytest.fixture
def child_kart():
    return SimpleNamespace(id="child", name="Child", type="Child", price_per_slot=Decimal("20"), quantity=3)


def make_booking(selected, selections, *, start_time=None, status="confirmed", booking_id="b1"):
    """Booking-shaped object for ledger tests; ``selections`` are (kart_id, qty, timeslot) tuples."""
    if start_time is None:
        start_time = selected[0].split("-")[0] if selected else "09:00"
    return SimpleNamespace(
        id=booking_id,
        status=status,
        start_time=start_time,
        selected_timeslots=list(selected),
        kart_selections=[SimpleNamespace(kart_id=k, quantity=q, timeslot=t) for k, q, t in selections],
    )


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    factory = make_session_factory(engine)

    db = factory()
    db.add(
        AppSettings(
            id=1,
            timeslot_duration=30,
            max_karts_per_timeslot=5,
            max_minutes_per_session=60,
            max_advance_booking_days=30,
        )
    )
    db.commit()
    db.close()
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def add_kart(session_factory, *, name="Adult", quantity=2, price="25", kart_type="Adult", is_active=True) -> str:
    db = session_factory()
    try:
        kart = Kart(name=name, type=kart_type, quantity=quantity, price_per_slot=Decimal(price), is_active=is_active)
        db.add(kart)
        db.commit()
        return kart.id
    finally:
        db.close()


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 19, 8, 0, tzinfo=ZoneInfo(TZ)))


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ============================================================================
# API FIXTURES
# ============================================================================

@pytest.fixture
def client(session_factory, clock, notifier):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_clock] = lambda: clock
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


def _add_user(session_factory, *, email, is_admin) -> str:
    db = session_factory()
    try:
        user = User(email=email, name=email.split("@")[0], hashed_password=hash_password("secret123"), is_admin=is_admin)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


@pytest.fixture
def admin_headers(session_factory):
    user_id = _add_user(session_factory, email="admin@kartbooking.com", is_admin=True)
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def staff_headers(session_factory):
    user_id = _add_user(session_factory, email="staff@kartbooking.com", is_admin=False)
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
