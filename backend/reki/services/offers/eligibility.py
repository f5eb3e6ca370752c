"""
Pure offer eligibility. No DB access: callers hand in the offer row, the venue's current
busyness (None when the venue has no live state) and now.

Check order is fixed and the first failure wins:
  OFFER_NOT_FOUND -> OFFER_INACTIVE -> OUTSIDE_WINDOW -> BUSYNESS_NOT_MET
"""
from datetime import datetime
from enum import Enum

from reki.core.timeutil import as_utc
from reki.models.enums import BUSYNESS_RANK, BusynessLevel


class EligibilityError(str, Enum):
    OFFER_NOT_FOUND = "OFFER_NOT_FOUND"
    OFFER_INACTIVE = "OFFER_INACTIVE"
    OUTSIDE_WINDOW = "OUTSIDE_WINDOW"
    BUSYNESS_NOT_MET = "BUSYNESS_NOT_MET"


ELIGIBILITY_MESSAGES = {
    EligibilityError.OFFER_NOT_FOUND: "Offer not found",
    EligibilityError.OFFER_INACTIVE: "Offer is not active",
    EligibilityError.OUTSIDE_WINDOW: "Offer is not valid at this time",
    EligibilityError.BUSYNESS_NOT_MET: "Venue is not busy enough for this offer",
}


def busyness_rank(level: BusynessLevel | str) -> int:
    return BUSYNESS_RANK[BusynessLevel(level)]


def meets_busyness(current: BusynessLevel | str, required: BusynessLevel | str) -> bool:
    """QUIET < MODERATE < BUSY; current satisfies required when it ranks at least as high."""
    return busyness_rank(current) >= busyness_rank(required)


def within_window(starts_at: datetime, ends_at: datetime, now: datetime) -> bool:
    """Closed interval: valid at exactly starts_at and exactly ends_at."""
    return as_utc(starts_at) <= as_utc(now) <= as_utc(ends_at)


def check_offer_eligibility(offer, current_busyness: BusynessLevel | None, now: datetime) -> EligibilityError | None:
    """Returns the first failing check, or None when the offer can be redeemed at now."""
    if offer is None:
        return EligibilityError.OFFER_NOT_FOUND
    if not offer.is_active:
        return EligibilityError.OFFER_INACTIVE
    if not within_window(offer.starts_at, offer.ends_at, now):
        return EligibilityError.OUTSIDE_WINDOW
    if current_busyness is None or not meets_busyness(current_busyness, offer.min_busyness):
        return EligibilityError.BUSYNESS_NOT_MET
    return None
