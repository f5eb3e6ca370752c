from reki.models.city import City
from reki.models.enums import BUSYNESS_RANK, BusynessLevel, OfferType, VenueCategory, VibeType
from reki.models.offer import Offer
from reki.models.offer_redemption import OfferRedemption
from reki.models.venue import Venue
from reki.models.venue_live_state import BusynessState, VenueLiveState, VibeState
from reki.models.vibe_schedule import VenueVibeSchedule

__all__ = [
    "BUSYNESS_RANK",
    "BusynessLevel",
    "BusynessState",
    "City",
    "Offer",
    "OfferRedemption",
    "OfferType",
    "Venue",
    "VenueCategory",
    "VenueLiveState",
    "VenueVibeSchedule",
    "VibeState",
    "VibeType",
]
