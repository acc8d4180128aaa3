"""Shared test fixtures and helpers."""

import os

# Keep the app-level engine off disk and events off Redis during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EVENTS_ENABLED", "false")

from datetime import datetime, timedelta
from typing import Optional

import pytest
from sqlalchemy import insert

from marketplace.database import init_db, make_engine, make_session_factory
from marketplace.models.generated import (
    Bookings,
    Branches,
    Offers,
    Services,
    Staff,
    Stores,
    Users,
    t_staff_services,
)
from marketplace.services.events import EventEmitter
from marketplace.services.slots.config import BookingConfig

# Friday morning; the next Monday is 2026-10-12, the Sunday in between 2026-10-11
NOW = datetime(2026, 10, 9, 8, 0)
NEXT_MONDAY = "2026-10-12"
NEXT_SUNDAY = "2026-10-11"

MON_SAT = '["monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]'


class RecordingRedis:
    """Stands in for the Redis client: keeps pushed messages in memory."""

    def __init__(self):
        self.lists: dict[str, list[str]] = {}

    def rpush(self, key, *values):
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'booking.db'}", busy_timeout=10)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def impatient_session_factory(tmp_path):
    """Sessions that give up on a locked database after 0.2s."""
    engine = make_engine(f"sqlite:///{tmp_path / 'impatient.db'}", busy_timeout=0.2)
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def config():
    return BookingConfig()


@pytest.fixture
def recording_redis():
    return RecordingRedis()


@pytest.fixture
def events(recording_redis):
    return EventEmitter(recording_redis)


# ── Factories ────────────────────────────────────────────────────────────


def make_store(
    db,
    working_days=MON_SAT,
    opening_time: Optional[str] = "09:00",
    closing_time: Optional[str] = "17:00",
    name: str = "Glow Salon",
) -> Stores:
    store = Stores(
        name=name,
        location="Westlands, Nairobi",
        opening_time=opening_time,
        closing_time=closing_time,
        working_days=working_days,
    )
    db.add(store)
    db.commit()
    return store


def make_service(
    db,
    store: Stores,
    duration: int = 60,
    buffer_time: int = 0,
    max_concurrent_bookings: int = 1,
    **kwargs,
) -> Services:
    service = Services(
        store_id=store.id,
        name=kwargs.pop("name", "Haircut"),
        duration=duration,
        buffer_time=buffer_time,
        max_concurrent_bookings=max_concurrent_bookings,
        **kwargs,
    )
    db.add(service)
    db.commit()
    return service


def make_offer(db, service: Services, **kwargs) -> Offers:
    offer = Offers(
        service_id=service.id,
        title=kwargs.pop("title", "20% off haircut"),
        discount=kwargs.pop("discount", 20),
        **kwargs,
    )
    db.add(offer)
    db.commit()
    return offer


def make_staff(db, store: Stores, services: tuple = (), name: str = "Amina", **kwargs) -> Staff:
    staff = Staff(store_id=store.id, name=name, **kwargs)
    db.add(staff)
    db.commit()
    for service in services:
        db.execute(insert(t_staff_services).values(staff_id=staff.id, service_id=service.id))
    db.commit()
    return staff


def make_branch(db, store: Stores, name: str = "CBD") -> Branches:
    branch = Branches(store_id=store.id, name=name)
    db.add(branch)
    db.commit()
    return branch


def make_user(db, first_name: str = "Wanjiru") -> Users:
    user = Users(first_name=first_name, email=f"{first_name.lower()}@example.com")
    db.add(user)
    db.commit()
    return user


def make_booking(
    db,
    service: Services,
    user: Users,
    start: str,
    duration: int = 60,
    status: str = "confirmed",
    offer: Optional[Offers] = None,
    staff: Optional[Staff] = None,
) -> Bookings:
    """Insert a booking directly, bypassing the reservation checks."""
    start_dt = datetime.fromisoformat(start)
    booking = Bookings(
        user_id=user.id,
        store_id=service.store_id,
        service_id=service.id,
        offer_id=offer.id if offer else None,
        staff_id=staff.id if staff else None,
        booking_type="offer" if offer else "service",
        start_time=start_dt.strftime("%Y-%m-%d %H:%M:%S"),
        end_time=(start_dt + timedelta(minutes=duration)).strftime("%Y-%m-%d %H:%M:%S"),
        status=status,
    )
    db.add(booking)
    db.commit()
    return booking
