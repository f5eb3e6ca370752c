#!/usr/bin/env python3
"""
Seed a small Manchester demo: 3 bars, Friday/Saturday evening vibe schedules, 3 offers
valid for the next 7 days. Skips everything if the city already exists.

Run from backend dir (after alembic upgrade head):
  python scripts/seed_demo.py
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from reki.db.session import SessionLocal
from reki.models.city import City
from reki.models.enums import BusynessLevel, OfferType, VenueCategory, VibeType
from reki.services.offers import create_offer
from reki.services.venue_service import create_city, create_venue
from reki.services.vibe_schedule import create_rule

VENUES = ("The Alchemist", "Albert's Schloss", "Northern Monk")

# (day_of_week, start, end, vibe, priority); Friday = 5, Saturday = 6
SCHEDULE = (
    (5, "17:00", "19:00", VibeType.CHILL, 1),
    (5, "19:00", "22:00", VibeType.SOCIAL, 2),
    (5, "22:00", "23:59", VibeType.PARTY, 3),
    (6, "16:00", "19:00", VibeType.CHILL, 1),
    (6, "19:00", "22:00", VibeType.SOCIAL, 2),
    (6, "22:00", "23:59", VibeType.LATE_NIGHT, 3),
)

OFFERS = (
    ("50% Off House Lagers", "Valid during busy hours", OfferType.PERCENT_OFF, BusynessLevel.MODERATE),
    ("Free Cocktail", "Limited-time demo offer", OfferType.FREE_ITEM, BusynessLevel.BUSY),
    ("Happy Hour 2-for-1", "Early evening deal", OfferType.HAPPY_HOUR, BusynessLevel.QUIET),
)


def main() -> int:
    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        if db.query(City).filter(City.name == "Manchester", City.country_code == "GB").first():
            print("Manchester already seeded; nothing to do.")
            return 0
        city = create_city(db, "Manchester", "GB", "Europe/London")
        venues = [create_venue(db, city.id, name, VenueCategory.BAR, now=now) for name in VENUES]
        for v in venues:
            for day, start, end, vibe, priority in SCHEDULE:
                create_rule(db, v.id, day, start, end, vibe, priority=priority)
        for v, (title, description, offer_type, min_busyness) in zip(venues, OFFERS):
            create_offer(
                db,
                v.id,
                title,
                offer_type,
                now,
                now + timedelta(days=7),
                min_busyness=min_busyness,
                description=description,
            )
        print(f"Seeded city {city.id} with {len(venues)} venues, {len(venues) * len(SCHEDULE)} rules, {len(OFFERS)} offers.")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
