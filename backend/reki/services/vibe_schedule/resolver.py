"""
Vibe resolution: which vibe a venue's schedule says it has right now, and when it next changes.

"now" is always passed in and converted to the venue's city timezone before taking the day of
week and the time of day; both come from the same local wall clock. Read-only.
"""
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from sqlalchemy.orm import Session

from reki.core.timeutil import local_day_of_week, minute_of_day, to_local
from reki.models.enums import VibeType
from reki.services.venue_service import get_venue_context
from reki.services.vibe_schedule.rules import parse_time_of_day, select_current_rule, select_next_rule
from reki.services.vibe_schedule.schedule_service import get_active_rules


@dataclass(frozen=True)
class NextVibeChange:
    vibe: VibeType
    starts_at: str  # HH:MM local
    day_of_week: int
    at: datetime  # same instant, venue-local aware datetime
    rule_id: int

    def as_dict(self) -> dict:
        return {
            "vibe": self.vibe.value,
            "starts_at": self.starts_at,
            "day_of_week": self.day_of_week,
            "at": self.at.isoformat(),
            "rule_id": self.rule_id,
        }


def resolve_current_vibe(db: Session, venue_id: int, now: datetime) -> VibeType | None:
    """Winning scheduled vibe at now, or None. Raises VenueNotFoundError for unknown venues."""
    ctx = get_venue_context(db, venue_id)
    local = to_local(now, ctx.timezone)
    rule = select_current_rule(get_active_rules(db, venue_id), local_day_of_week(local), minute_of_day(local))
    return rule.vibe if rule else None


def resolve_next_change(db: Session, venue_id: int, now: datetime) -> NextVibeChange | None:
    """Next rule start after now (see rules.select_next_rule), or None when the venue has no active rules."""
    ctx = get_venue_context(db, venue_id)
    local = to_local(now, ctx.timezone)
    found = select_next_rule(get_active_rules(db, venue_id), local_day_of_week(local), minute_of_day(local))
    if found is None:
        return None
    rule, days_ahead = found
    start = parse_time_of_day(rule.start_time)
    day = local.date() + timedelta(days=days_ahead)
    at = datetime.combine(day, time(start // 60, start % 60), tzinfo=local.tzinfo)
    return NextVibeChange(
        vibe=rule.vibe,
        starts_at=rule.start_time,
        day_of_week=rule.day_of_week,
        at=at,
        rule_id=rule.id,
    )
