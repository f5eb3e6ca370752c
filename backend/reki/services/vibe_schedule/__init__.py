"""Weekly vibe schedules: rule store, pure matching, and current/next resolution."""
from reki.services.vibe_schedule.resolver import NextVibeChange, resolve_current_vibe, resolve_next_change
from reki.services.vibe_schedule.schedule_service import (
    count_active_rules_for_day,
    create_rule,
    delete_rule,
    get_active_rules,
    get_active_rules_by_venue,
    list_rules,
)

__all__ = [
    "NextVibeChange",
    "count_active_rules_for_day",
    "create_rule",
    "delete_rule",
    "get_active_rules",
    "get_active_rules_by_venue",
    "list_rules",
    "resolve_current_vibe",
    "resolve_next_change",
]
