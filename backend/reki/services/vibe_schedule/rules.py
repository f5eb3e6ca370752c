"""
Pure rule matching for weekly vibe schedules. No DB access; works on anything with the
VenueVibeSchedule attributes (id, day_of_week, start_time, end_time, vibe, priority, is_active).

Matching is done on local wall-clock minutes (0..1439), both ends inclusive:
  - normal rule (end >= start): rule day, start <= t <= end
  - overnight rule (end < start): rule day with t >= start, or the FOLLOWING day with t <= end
    (Friday 22:00-02:00 covers Friday 23:30 and Saturday 01:00, not Friday 01:00)

Overlaps: highest priority wins; equal priority -> lowest rule id.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Protocol

from reki.core.errors import InvalidInputError
from reki.models.enums import VibeType

DAYS_PER_WEEK = 7
_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


class ScheduleRule(Protocol):
    id: int
    day_of_week: int
    start_time: str
    end_time: str
    vibe: VibeType
    priority: int
    is_active: bool


@dataclass(frozen=True)
class RuleSnapshot:
    """Detached copy of a rule row; safe to use across commits and rollbacks."""
    id: int
    day_of_week: int
    start_time: str
    end_time: str
    vibe: VibeType
    priority: int
    is_active: bool

    @classmethod
    def from_row(cls, row: ScheduleRule) -> "RuleSnapshot":
        return cls(
            id=row.id,
            day_of_week=row.day_of_week,
            start_time=row.start_time,
            end_time=row.end_time,
            vibe=row.vibe,
            priority=row.priority,
            is_active=row.is_active,
        )


def parse_time_of_day(value: str) -> int:
    """'HH:MM' (or 'H:MM') -> minutes since midnight. Seconds ('HH:MM:SS' from TIME columns) are dropped."""
    raw = (value or "").strip()
    if raw.count(":") == 2:
        raw = raw.rsplit(":", 1)[0]
    m = _TIME_RE.match(raw)
    if not m:
        raise InvalidInputError(f"Invalid time {value!r}. Use HH:MM (00:00-23:59).")
    return int(m.group(1)) * 60 + int(m.group(2))


def format_time_of_day(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    return format_time_of_day(parse_time_of_day(value))


def validate_day_of_week(day: int) -> int:
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day < DAYS_PER_WEEK:
        raise InvalidInputError(f"Invalid day_of_week {day!r}. Use 0 (Sunday) to 6 (Saturday).")
    return day


def rule_matches(rule: ScheduleRule, day: int, minute: int) -> bool:
    if not rule.is_active:
        return False
    start = parse_time_of_day(rule.start_time)
    end = parse_time_of_day(rule.end_time)
    if end >= start:
        return rule.day_of_week == day and start <= minute <= end
    if rule.day_of_week == day and minute >= start:
        return True
    return (rule.day_of_week + 1) % DAYS_PER_WEEK == day and minute <= end


def _precedence(rule: ScheduleRule) -> tuple[int, int]:
    return (-rule.priority, rule.id)


def select_current_rule(rules: Iterable[ScheduleRule], day: int, minute: int) -> ScheduleRule | None:
    """The winning rule at (day, minute), or None when nothing matches."""
    matches = [r for r in rules if rule_matches(r, day, minute)]
    if not matches:
        return None
    return min(matches, key=_precedence)


def _start_order(rule: ScheduleRule) -> tuple[int, int, int]:
    return (parse_time_of_day(rule.start_time), -rule.priority, rule.id)


def select_next_rule(
    rules: Iterable[ScheduleRule], day: int, minute: int
) -> tuple[ScheduleRule, int] | None:
    """
    Next rule to start after (day, minute): the earliest start later today, otherwise the
    earliest start on the first following day that has an active rule (up to a full week,
    so today's earlier rules come back as next week's). Returns (rule, days_ahead) or None.
    """
    active = [r for r in rules if r.is_active]
    if not active:
        return None
    later_today = [
        r for r in active if r.day_of_week == day and parse_time_of_day(r.start_time) > minute
    ]
    if later_today:
        return min(later_today, key=_start_order), 0
    for ahead in range(1, DAYS_PER_WEEK + 1):
        check_day = (day + ahead) % DAYS_PER_WEEK
        candidates = [r for r in active if r.day_of_week == check_day]
        if candidates:
            return min(candidates, key=_start_order), ahead
    return None

