"""
Centralized constants for the scheduler, scenario presets and offers.

Change job IDs or limits here instead of scattering literals across main, routes and services.
Tick intervals come from automation_config (env-driven).
"""
from reki.core.automation_config import (
    BUSYNESS_TICK_SECONDS,
    SCENARIO_VENUE_LIMIT,
    VIBE_TICK_SECONDS,
)

# Scheduler job IDs (must match ids used in main.py add_job)
VIBE_TICK_JOB_ID = "vibe_tick"
BUSYNESS_TICK_JOB_ID = "busyness_tick"

# Scenario presets (one-shot bulk writes that bypass schedules and simulation)
SCENARIO_QUIET_TO_BUSY = "quiet_to_busy"
SCENARIO_BUSY_TO_QUIET = "busy_to_quiet"
SCENARIO_VIBE_SHIFT = "vibe_shift"
SCENARIOS = (SCENARIO_QUIET_TO_BUSY, SCENARIO_BUSY_TO_QUIET, SCENARIO_VIBE_SHIFT)

# Offers
OFFER_TITLE_MAX_LENGTH = 160
REDEMPTION_SOURCE_MAX_LENGTH = 32
DEFAULT_REDEMPTION_SOURCE = "DEMO"

# Notifications: webhook posts in flight at once (extra events queue in the executor)
NOTIFY_MAX_WORKERS = 4

__all__ = [
    "BUSYNESS_TICK_JOB_ID",
    "BUSYNESS_TICK_SECONDS",
    "DEFAULT_REDEMPTION_SOURCE",
    "NOTIFY_MAX_WORKERS",
    "OFFER_TITLE_MAX_LENGTH",
    "REDEMPTION_SOURCE_MAX_LENGTH",
    "SCENARIOS",
    "SCENARIO_BUSY_TO_QUIET",
    "SCENARIO_QUIET_TO_BUSY",
    "SCENARIO_VENUE_LIMIT",
    "SCENARIO_VIBE_SHIFT",
    "VIBE_TICK_JOB_ID",
    "VIBE_TICK_SECONDS",
]
