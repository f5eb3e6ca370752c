"""
Schedule store: create, list and delete weekly vibe rules. Rules are validated before they
are persisted; nothing here ever mutates a rule on its own.
"""
import logging
from collections import defaultdict

from sqlalchemy.orm import Session

from reki.core.errors import InvalidInputError, ScheduleRuleNotFoundError
from reki.models.enums import VibeType
from reki.models.vibe_schedule import VenueVibeSchedule
from reki.services.venue_service import get_venue
from reki.services.vibe_schedule.rules import RuleSnapshot, normalize_time, validate_day_of_week

logger = logging.getLogger(__name__)


def create_rule(
    db: Session,
    venue_id: int,
    day_of_week: int,
    start_time: str,
    end_time: str,
    vibe: VibeType | str,
    priority: int = 0,
    is_active: bool = True,
) -> VenueVibeSchedule:
    """Add a rule for a venue. end_time < start_time is an overnight rule."""
    validate_day_of_week(day_of_week)
    start = normalize_time(start_time)
    end = normalize_time(end_time)
    try:
        vibe = VibeType(vibe)
    except ValueError:
        raise InvalidInputError(f"Unknown vibe {vibe!r}")
    if isinstance(priority, bool) or not isinstance(priority, int) or priority < 0:
        raise InvalidInputError("priority must be an integer >= 0.")
    get_venue(db, venue_id)

    row = VenueVibeSchedule(
        venue_id=venue_id,
        day_of_week=day_of_week,
        start_time=start,
        end_time=end,
        vibe=vibe,
        priority=priority,
        is_active=bool(is_active),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(
        "Vibe schedule %s created for venue %s: day=%s %s-%s %s (priority %s)",
        row.id, venue_id, day_of_week, start, end, vibe.value, priority,
    )
    return row


def list_rules(db: Session, venue_id: int) -> list[VenueVibeSchedule]:
    """All rules for a venue (active or not), ordered by day, start, priority desc."""
    get_venue(db, venue_id)
    return (
        db.query(VenueVibeSchedule)
        .filter(VenueVibeSchedule.venue_id == venue_id)
        .order_by(
            VenueVibeSchedule.day_of_week.asc(),
            VenueVibeSchedule.start_time.asc(),
            VenueVibeSchedule.priority.desc(),
            VenueVibeSchedule.id.asc(),
        )
        .all()
    )


def get_active_rules(db: Session, venue_id: int) -> list[VenueVibeSchedule]:
    return (
        db.query(VenueVibeSchedule)
        .filter(VenueVibeSchedule.venue_id == venue_id, VenueVibeSchedule.is_active.is_(True))
        .order_by(VenueVibeSchedule.id.asc())
        .all()
    )


def get_active_rules_by_venue(db: Session) -> dict[int, list[RuleSnapshot]]:
    """Every active rule grouped by venue, as detached snapshots. Venues without active rules are absent."""
    out: dict[int, list[RuleSnapshot]] = defaultdict(list)
    rows = (
        db.query(VenueVibeSchedule)
        .filter(VenueVibeSchedule.is_active.is_(True))
        .order_by(VenueVibeSchedule.venue_id.asc(), VenueVibeSchedule.id.asc())
        .all()
    )
    for r in rows:
        out[r.venue_id].append(RuleSnapshot.from_row(r))
    return dict(out)


def count_active_rules_for_day(db: Session, day_of_week: int) -> int:
    return (
        db.query(VenueVibeSchedule)
        .filter(VenueVibeSchedule.day_of_week == day_of_week, VenueVibeSchedule.is_active.is_(True))
        .count()
    )


def delete_rule(db: Session, rule_id: int) -> None:
    deleted = db.query(VenueVibeSchedule).filter(VenueVibeSchedule.id == rule_id).delete()
    if not deleted:
        db.rollback()
        raise ScheduleRuleNotFoundError(rule_id)
    db.commit()
    logger.info("Vibe schedule %s deleted", rule_id)
