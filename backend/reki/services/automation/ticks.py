"""
Periodic re-evaluation of venue live state. Two independent ticks:

  vibe tick      every VIBE_TICK_SECONDS: schedule -> vibe (venues with no matching rule keep theirs)
  busyness tick  every BUSYNESS_TICK_SECONDS: simulate_busyness(local hour, category) -> busyness

Both take db and now explicitly and know nothing about APScheduler (see reki.scheduler).
Each venue is its own unit of work: one UPDATE + commit, so no lock spans the venue set and a
failing venue is logged, rolled back and skipped while the rest of the tick carries on.
Writes only happen when the value changes, so re-running a tick with the same inputs writes nothing.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from reki.core.timeutil import as_utc, local_day_of_week, minute_of_day, to_local
from reki.services.automation.heartbeat import record_tick
from reki.services.busyness import simulate_busyness
from reki.services.live_state_service import write_busyness, write_vibe
from reki.services.notify import EVENT_BUSYNESS_CHANGED, EVENT_VIBE_CHANGED, dispatch_event
from reki.services.venue_service import list_venue_contexts
from reki.services.vibe_schedule.rules import select_current_rule
from reki.services.vibe_schedule.schedule_service import get_active_rules_by_venue

logger = logging.getLogger(__name__)

TICK_VIBE = "vibe"
TICK_BUSYNESS = "busyness"


@dataclass
class TickResult:
    kind: str
    evaluated: int = 0
    updated: int = 0
    failed: int = 0
    updated_venue_ids: list[int] = field(default_factory=list)
    failed_venue_ids: list[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "evaluated": self.evaluated,
            "updated": self.updated,
            "failed": self.failed,
            "updated_venue_ids": list(self.updated_venue_ids),
            "failed_venue_ids": list(self.failed_venue_ids),
        }


def run_vibe_tick(db: Session, now: datetime) -> TickResult:
    """
    For every venue with active rules: resolve the winning rule at now (venue-local) and, when
    its vibe differs from the stored one, write vibe + vibe_updated_at.
    """
    result = TickResult(kind=TICK_VIBE)
    rules_by_venue = get_active_rules_by_venue(db)
    venues = list_venue_contexts(db, set(rules_by_venue))

    for ctx in venues:
        result.evaluated += 1
        try:
            local = to_local(now, ctx.timezone)
            rule = select_current_rule(
                rules_by_venue.get(ctx.venue_id, []), local_day_of_week(local), minute_of_day(local)
            )
            if rule is None:
                continue
            if write_vibe(db, ctx.venue_id, rule.vibe, now):
                db.commit()
                result.updated += 1
                result.updated_venue_ids.append(ctx.venue_id)
                logger.info("Updated %s vibe to %s (rule %s)", ctx.name, rule.vibe.value, rule.id)
                dispatch_event(
                    EVENT_VIBE_CHANGED,
                    {"venue_id": ctx.venue_id, "vibe": rule.vibe.value, "at": as_utc(now).isoformat()},
                )
            else:
                db.rollback()
        except Exception as e:
            db.rollback()
            result.failed += 1
            result.failed_venue_ids.append(ctx.venue_id)
            logger.exception("Vibe tick: venue %s failed (tick continues): %s", ctx.venue_id, e)

    record_tick(TICK_VIBE, now, result.evaluated, result.updated, result.failed)
    if result.updated or result.failed:
        logger.info(
            "Vibe tick: evaluated=%s updated=%s failed=%s", result.evaluated, result.updated, result.failed
        )
    return result


def run_busyness_tick(db: Session, now: datetime) -> TickResult:
    """
    For every venue: simulate busyness for the venue-local hour and category and, when it
    differs from the stored level, write busyness + busyness_updated_at.
    """
    result = TickResult(kind=TICK_BUSYNESS)
    venues = list_venue_contexts(db)

    for ctx in venues:
        result.evaluated += 1
        try:
            hour = to_local(now, ctx.timezone).hour
            level = simulate_busyness(hour, ctx.category)
            if write_busyness(db, ctx.venue_id, level, now):
                db.commit()
                result.updated += 1
                result.updated_venue_ids.append(ctx.venue_id)
                logger.debug("Updated %s busyness to %s (local hour %s)", ctx.name, level.value, hour)
                dispatch_event(
                    EVENT_BUSYNESS_CHANGED,
                    {"venue_id": ctx.venue_id, "busyness": level.value, "at": as_utc(now).isoformat()},
                )
            else:
                db.rollback()
        except Exception as e:
            db.rollback()
            result.failed += 1
            result.failed_venue_ids.append(ctx.venue_id)
            logger.exception("Busyness tick: venue %s failed (tick continues): %s", ctx.venue_id, e)

    record_tick(TICK_BUSYNESS, now, result.evaluated, result.updated, result.failed)
    if result.updated or result.failed:
        logger.info(
            "Busyness tick: evaluated=%s updated=%s failed=%s", result.evaluated, result.updated, result.failed
        )
    return result
