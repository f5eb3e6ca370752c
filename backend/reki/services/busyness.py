"""
Synthetic busyness: a deterministic step function of (local hour, venue category).

Each category follows its own diurnal curve; any category without one is MODERATE all day.
Pure: no clock, no DB. The busyness tick passes the venue-local hour.
"""
from reki.core.errors import InvalidInputError
from reki.models.enums import BusynessLevel, VenueCategory

QUIET = BusynessLevel.QUIET
MODERATE = BusynessLevel.MODERATE
BUSY = BusynessLevel.BUSY

DEFAULT_BUSYNESS = MODERATE

# (start_hour inclusive, end_hour exclusive, level); each curve covers 0..24 without gaps
BUSYNESS_CURVES: dict[VenueCategory, tuple[tuple[int, int, BusynessLevel], ...]] = {
    VenueCategory.CLUB: (
        (0, 6, BUSY),  # late night
        (6, 17, QUIET),  # closed
        (17, 21, MODERATE),  # early evening
        (21, 24, BUSY),  # peak
    ),
    VenueCategory.BAR: (
        (0, 3, BUSY),  # late night
        (3, 16, QUIET),
        (16, 19, MODERATE),  # happy hour
        (19, 23, BUSY),  # peak
        (23, 24, MODERATE),  # winding down
    ),
    VenueCategory.RESTAURANT: (
        (0, 11, QUIET),
        (11, 14, BUSY),  # lunch
        (14, 17, QUIET),  # afternoon lull
        (17, 21, BUSY),  # dinner
        (21, 24, MODERATE),  # late dining
    ),
}


def simulate_busyness(hour: int, category: VenueCategory | str) -> BusynessLevel:
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        raise InvalidInputError(f"hour must be 0-23, got {hour!r}")
    try:
        category = VenueCategory(category)
    except ValueError:
        return DEFAULT_BUSYNESS
    for start, end, level in BUSYNESS_CURVES.get(category, ()):
        if start <= hour < end:
            return level
    return DEFAULT_BUSYNESS
