from reki.services.offers.eligibility import (
    EligibilityError,
    busyness_rank,
    check_offer_eligibility,
    meets_busyness,
    within_window,
)
from reki.services.offers.offer_service import (
    count_active_offers,
    create_offer,
    get_offer,
    get_offer_stats,
    list_eligible_offers,
    list_offers_for_venue,
    record_click,
    record_view,
    update_offer_status,
)
from reki.services.offers.redemption import RedemptionResult, redeem

__all__ = [
    "EligibilityError",
    "RedemptionResult",
    "busyness_rank",
    "check_offer_eligibility",
    "count_active_offers",
    "create_offer",
    "get_offer",
    "get_offer_stats",
    "list_eligible_offers",
    "list_offers_for_venue",
    "meets_busyness",
    "record_click",
    "record_view",
    "redeem",
    "update_offer_status",
    "within_window",
]
