"""
Single source of truth for database tables that exist after migrations.

Use these names when writing raw SQL (e.g. TRUNCATE). alembic/env.py asserts the models match.
"""
# All tables that exist in the DB. Must match models and migration 001.
ALL_TABLE_NAMES = (
    "cities",
    "venues",
    "venue_live_state",
    "venue_vibe_schedule",
    "offers",
    "offer_redemptions",
)
