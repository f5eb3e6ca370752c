import os

# Before any reki import: settings and the module-level engine read these once.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ["DEFAULT_TIMEZONE"] = "Europe/London"

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import reki.models  # noqa: E402,F401
from reki.db.base import Base  # noqa: E402
from reki.models.enums import BusynessLevel, OfferType, VenueCategory, VibeType  # noqa: E402
from reki.services.automation.heartbeat import reset_tick_heartbeat  # noqa: E402
from reki.services.offers import create_offer  # noqa: E402
from reki.services.venue_service import create_city, create_venue  # noqa: E402
from reki.services.vibe_schedule import create_rule  # noqa: E402

# Friday 2026-10-16; Europe/London is on BST (UTC+1) until 2026-10-25.
FRIDAY = datetime(2026, 10, 16, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def _clean_heartbeat():
    reset_tick_heartbeat()
    yield
    reset_tick_heartbeat()


@pytest.fixture
def make_city(db):
    counter = {"n": 0}

    def _make(timezone_name="Europe/London", name=None, country_code="GB"):
        counter["n"] += 1
        return create_city(db, name or f"City {counter['n']}", country_code, timezone_name)

    return _make


@pytest.fixture
def make_venue(db, make_city):
    cities = {}

    def _make(category=VenueCategory.BAR, timezone_name="Europe/London", name=None, now=FRIDAY):
        city = cities.get(timezone_name)
        if city is None:
            city = cities[timezone_name] = make_city(timezone_name)
        return create_venue(db, city.id, name or f"{category.value.title()} {len(cities)}", category, now=now)

    return _make


@pytest.fixture
def make_rule(db):
    def _make(venue, day, start, end, vibe=VibeType.CHILL, priority=0, is_active=True):
        return create_rule(db, venue.id, day, start, end, vibe, priority=priority, is_active=is_active)

    return _make


@pytest.fixture
def make_offer(db):
    def _make(
        venue,
        min_busyness=BusynessLevel.QUIET,
        starts_at=None,
        ends_at=None,
        title="Two for one",
        offer_type=OfferType.BOGO,
        is_active=True,
    ):
        starts_at = starts_at or FRIDAY
        ends_at = ends_at or starts_at + timedelta(days=2)
        return create_offer(
            db,
            venue.id,
            title,
            offer_type,
            starts_at,
            ends_at,
            min_busyness=min_busyness,
            is_active=is_active,
        )

    return _make
