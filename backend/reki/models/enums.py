"""Closed value sets shared by models and services.

Busyness is ordered; compare through BUSYNESS_RANK, never through member order.
"""
import enum


class BusynessLevel(str, enum.Enum):
    QUIET = "QUIET"
    MODERATE = "MODERATE"
    BUSY = "BUSY"


BUSYNESS_RANK: dict[BusynessLevel, int] = {
    BusynessLevel.QUIET: 1,
    BusynessLevel.MODERATE: 2,
    BusynessLevel.BUSY: 3,
}


class VibeType(str, enum.Enum):
    CHILL = "CHILL"
    SOCIAL = "SOCIAL"
    PARTY = "PARTY"
    ROMANTIC = "ROMANTIC"
    LATE_NIGHT = "LATE_NIGHT"


class VenueCategory(str, enum.Enum):
    BAR = "BAR"
    CLUB = "CLUB"
    RESTAURANT = "RESTAURANT"
    CASINO = "CASINO"


class OfferType(str, enum.Enum):
    PERCENT_OFF = "PERCENT_OFF"
    BOGO = "BOGO"
    FREE_ITEM = "FREE_ITEM"
    HAPPY_HOUR = "HAPPY_HOUR"
    ENTRY_DEAL = "ENTRY_DEAL"
