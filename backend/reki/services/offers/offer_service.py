"""
Offer store and read paths: create, eligible-by-venue, engagement counters and stats.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from reki.core.constants import OFFER_TITLE_MAX_LENGTH
from reki.core.errors import InvalidInputError, OfferNotFoundError
from reki.core.timeutil import as_utc
from reki.models.enums import BusynessLevel, OfferType
from reki.models.offer import Offer
from reki.services.live_state_service import find_live_state
from reki.services.offers.eligibility import meets_busyness
from reki.services.venue_service import get_venue

logger = logging.getLogger(__name__)


def create_offer(
    db: Session,
    venue_id: int,
    title: str,
    offer_type: OfferType | str,
    starts_at: datetime,
    ends_at: datetime,
    min_busyness: BusynessLevel | str | None = None,
    description: str | None = None,
    is_active: bool = True,
) -> Offer:
    title = (title or "").strip()
    if not title or len(title) > OFFER_TITLE_MAX_LENGTH:
        raise InvalidInputError(f"Offer title must be 1-{OFFER_TITLE_MAX_LENGTH} characters.")
    try:
        offer_type = OfferType(offer_type)
        min_busyness = BusynessLevel(min_busyness) if min_busyness is not None else BusynessLevel.QUIET
    except ValueError as e:
        raise InvalidInputError(str(e))
    if starts_at is None or ends_at is None:
        raise InvalidInputError("starts_at and ends_at are required.")
    starts_at, ends_at = as_utc(starts_at), as_utc(ends_at)
    if ends_at <= starts_at:
        raise InvalidInputError("ends_at must be after starts_at.")
    get_venue(db, venue_id)

    offer = Offer(
        venue_id=venue_id,
        title=title,
        description=(description or "").strip() or None,
        offer_type=offer_type,
        min_busyness=min_busyness,
        starts_at=starts_at,
        ends_at=ends_at,
        is_active=bool(is_active),
    )
    db.add(offer)
    db.commit()
    db.refresh(offer)
    logger.info("Offer %s created for venue %s: %s (min %s)", offer.id, venue_id, title, min_busyness.value)
    return offer


def get_offer(db: Session, offer_id: int) -> Offer:
    offer = db.query(Offer).filter(Offer.id == offer_id).populate_existing().first()
    if not offer:
        raise OfferNotFoundError(offer_id)
    return offer


def list_offers_for_venue(db: Session, venue_id: int) -> list[Offer]:
    """Every offer of a venue regardless of state, newest window first."""
    get_venue(db, venue_id)
    return (
        db.query(Offer)
        .filter(Offer.venue_id == venue_id)
        .order_by(Offer.starts_at.desc(), Offer.id.desc())
        .all()
    )


def list_eligible_offers(db: Session, venue_id: int, now: datetime) -> list[Offer]:
    """
    Offers a user could redeem at now: active, now within [starts_at, ends_at] and the venue's
    current busyness meets min_busyness. Venue without live state -> empty (fail closed).
    """
    get_venue(db, venue_id)
    live = find_live_state(db, venue_id)
    if live is None:
        return []
    now = as_utc(now)
    rows = (
        db.query(Offer)
        .filter(
            Offer.venue_id == venue_id,
            Offer.is_active.is_(True),
            Offer.starts_at <= now,
            Offer.ends_at >= now,
        )
        .order_by(Offer.starts_at.asc(), Offer.id.asc())
        .all()
    )
    return [o for o in rows if meets_busyness(live.busyness, o.min_busyness)]


def _increment(db: Session, offer_id: int, column) -> Offer:
    updated = (
        db.query(Offer)
        .filter(Offer.id == offer_id)
        .update({column: column + 1}, synchronize_session=False)
    )
    if not updated:
        db.rollback()
        raise OfferNotFoundError(offer_id)
    db.commit()
    return get_offer(db, offer_id)


def record_view(db: Session, offer_id: int) -> Offer:
    return _increment(db, offer_id, Offer.view_count)


def record_click(db: Session, offer_id: int) -> Offer:
    return _increment(db, offer_id, Offer.click_count)


def update_offer_status(db: Session, offer_id: int, is_active: bool) -> Offer:
    offer = get_offer(db, offer_id)
    offer.is_active = bool(is_active)
    db.commit()
    db.refresh(offer)
    logger.info("Offer %s %s", offer_id, "activated" if offer.is_active else "deactivated")
    return offer


def get_offer_stats(db: Session, offer_id: int) -> dict:
    """Engagement counters plus conversion rate (redemptions / views, percent, 2 dp)."""
    offer = get_offer(db, offer_id)
    views = offer.view_count or 0
    redemptions = offer.redeem_count or 0
    rate = round(redemptions / views * 100, 2) if views else 0.0
    return {
        "offer_id": offer.id,
        "views": views,
        "clicks": offer.click_count or 0,
        "redemptions": redemptions,
        "conversion_rate": rate,
    }


def count_active_offers(db: Session, venue_id: int | None = None) -> int:
    q = db.query(Offer).filter(Offer.is_active.is_(True))
    if venue_id is not None:
        q = q.filter(Offer.venue_id == venue_id)
    return q.count()
