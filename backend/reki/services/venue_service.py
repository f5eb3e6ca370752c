"""
Venue/city directory: the minimal reads and writes the engine needs (category + timezone per venue).

Creating a venue also creates its live state (QUIET/CHILL) in the same commit, so every
venue has exactly one live state for its whole life.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from reki.config import settings
from reki.core.errors import CityNotFoundError, InvalidInputError, VenueNotFoundError
from reki.models.city import City
from reki.models.enums import BusynessLevel, VenueCategory, VibeType
from reki.models.venue import Venue
from reki.models.venue_live_state import VenueLiveState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VenueContext:
    """What the engines need to know about a venue."""
    venue_id: int
    name: str
    category: VenueCategory
    timezone: str


def _validate_timezone(tz_name: str) -> str:
    tz_name = (tz_name or "").strip()
    if not tz_name:
        return settings.default_timezone
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidInputError(f"Unknown timezone {tz_name!r}")
    return tz_name


def create_city(db: Session, name: str, country_code: str, timezone: str | None = None) -> City:
    name = (name or "").strip()
    country_code = (country_code or "").strip().upper()
    if not name:
        raise InvalidInputError("City name is required.")
    if len(country_code) != 2:
        raise InvalidInputError("country_code must be a 2-letter ISO code.")
    row = City(name=name, country_code=country_code, timezone=_validate_timezone(timezone or ""))
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("City created: %s (%s, %s)", row.name, row.country_code, row.timezone)
    return row


def create_venue(
    db: Session,
    city_id: int,
    name: str,
    category: VenueCategory | str,
    now: datetime | None = None,
) -> Venue:
    """Create a venue and its initial live state. now, when given, stamps the live state timestamps."""
    name = (name or "").strip()
    if not name or len(name) > 160:
        raise InvalidInputError("Venue name must be 1-160 characters.")
    try:
        category = VenueCategory(category)
    except ValueError:
        raise InvalidInputError(f"Unknown venue category {category!r}")
    city = db.query(City).filter(City.id == city_id, City.is_active.is_(True)).first()
    if not city:
        raise CityNotFoundError(city_id)

    venue = Venue(city_id=city.id, name=name, category=category)
    db.add(venue)
    db.flush()
    live = VenueLiveState(venue_id=venue.id, busyness=BusynessLevel.QUIET, vibe=VibeType.CHILL)
    if now is not None:
        live.busyness_updated_at = now
        live.vibe_updated_at = now
        live.updated_at = now
    db.add(live)
    db.commit()
    db.refresh(venue)
    logger.info("Venue created: %s in city %s", venue.name, city.name)
    return venue


def get_venue(db: Session, venue_id: int) -> Venue:
    venue = db.query(Venue).filter(Venue.id == venue_id).first()
    if not venue:
        raise VenueNotFoundError(venue_id)
    return venue


def get_venue_context(db: Session, venue_id: int) -> VenueContext:
    row = (
        db.query(Venue.id, Venue.name, Venue.category, City.timezone)
        .join(City, City.id == Venue.city_id)
        .filter(Venue.id == venue_id)
        .first()
    )
    if not row:
        raise VenueNotFoundError(venue_id)
    return VenueContext(
        venue_id=row.id,
        name=row.name,
        category=row.category,
        timezone=row.timezone or settings.default_timezone,
    )


def list_venue_contexts(db: Session, venue_ids: set[int] | None = None) -> list[VenueContext]:
    """All venues (or the given subset) with category and timezone, ordered by id. Bulk scan for ticks."""
    q = db.query(Venue.id, Venue.name, Venue.category, City.timezone).join(City, City.id == Venue.city_id)
    if venue_ids is not None:
        if not venue_ids:
            return []
        q = q.filter(Venue.id.in_(venue_ids))
    return [
        VenueContext(
            venue_id=r.id,
            name=r.name,
            category=r.category,
            timezone=r.timezone or settings.default_timezone,
        )
        for r in q.order_by(Venue.id.asc()).all()
    ]


def count_venues(db: Session) -> int:
    return db.query(Venue).count()
