"""Read-only automation status for observability. Not part of the mutation path."""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from reki.config import settings
from reki.core.timeutil import as_utc, local_day_of_week, to_local
from reki.services.automation.heartbeat import get_tick_heartbeat
from reki.services.live_state_service import get_last_live_state_write
from reki.services.venue_service import count_venues
from reki.services.vibe_schedule.schedule_service import count_active_rules_for_day


@dataclass(frozen=True)
class AutomationStatus:
    active_rule_count: int  # active rules whose day_of_week is today (default timezone)
    venue_count: int
    last_update_at: datetime | None  # most recent live-state write, None before any
    day_of_week: int
    ticks: dict

    def as_dict(self) -> dict:
        return {
            "active_rule_count": self.active_rule_count,
            "venue_count": self.venue_count,
            "last_update_at": self.last_update_at.isoformat() if self.last_update_at else None,
            "day_of_week": self.day_of_week,
            "ticks": self.ticks,
        }


def get_automation_status(db: Session, now: datetime, tz_name: str | None = None) -> AutomationStatus:
    day = local_day_of_week(to_local(now, tz_name or settings.default_timezone))
    last = get_last_live_state_write(db)
    return AutomationStatus(
        active_rule_count=count_active_rules_for_day(db, day),
        venue_count=count_venues(db),
        last_update_at=as_utc(last) if last is not None else None,
        day_of_week=day,
        ticks=get_tick_heartbeat(),
    )
