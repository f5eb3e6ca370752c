"""
Scenario presets: one-shot bulk writes that bypass schedules and simulation (demos, ops).

  quiet_to_busy  -> BUSY / PARTY
  busy_to_quiet  -> QUIET / CHILL
  vibe_shift     -> vibe CHILL <-> PARTY (anything else becomes CHILL), busyness kept

Every affected venue gets BOTH timestamps refreshed. Same per-venue semantics as the ticks:
one UPDATE + commit per venue, failures logged and skipped.
"""
import logging
from datetime import datetime

from sqlalchemy import case
from sqlalchemy.orm import Session

from reki.core.constants import (
    SCENARIO_BUSY_TO_QUIET,
    SCENARIO_QUIET_TO_BUSY,
    SCENARIO_VENUE_LIMIT,
    SCENARIO_VIBE_SHIFT,
    SCENARIOS,
)
from reki.core.errors import InvalidInputError
from reki.core.timeutil import as_utc
from reki.models.enums import BusynessLevel, VibeType
from reki.models.venue import Venue
from reki.models.venue_live_state import VenueLiveState
from reki.services.live_state_service import write_live_state
from reki.services.notify import EVENT_SCENARIO_APPLIED, dispatch_event

logger = logging.getLogger(__name__)

_PRESETS: dict[str, tuple[BusynessLevel, VibeType]] = {
    SCENARIO_QUIET_TO_BUSY: (BusynessLevel.BUSY, VibeType.PARTY),
    SCENARIO_BUSY_TO_QUIET: (BusynessLevel.QUIET, VibeType.CHILL),
}


def _shift_vibe(db: Session, venue_id: int, now: datetime) -> bool:
    # Toggle inside the UPDATE so a concurrent tick cannot slip between read and write.
    # Enum columns store member names.
    toggled = case(
        (VenueLiveState.vibe == VibeType.CHILL, VibeType.PARTY.name),
        else_=VibeType.CHILL.name,
    )
    updated = (
        db.query(VenueLiveState)
        .filter(VenueLiveState.venue_id == venue_id)
        .update(
            {
                VenueLiveState.vibe: toggled,
                VenueLiveState.vibe_updated_at: now,
                VenueLiveState.busyness_updated_at: now,
                VenueLiveState.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    return updated > 0


def apply_scenario_preset(
    db: Session,
    name: str,
    now: datetime,
    limit: int | None = None,
) -> dict:
    """
    Apply a preset to venues in id order. limit caps how many (None -> SCENARIO_VENUE_LIMIT,
    0 -> all). Returns {"scenario", "affected", "failed", "message"}.
    """
    name = (name or "").strip().lower()
    if name not in SCENARIOS:
        raise InvalidInputError(f"Invalid scenario {name!r}. Valid options: {', '.join(SCENARIOS)}")
    if limit is None:
        limit = SCENARIO_VENUE_LIMIT
    if limit < 0:
        raise InvalidInputError("limit must be >= 0.")

    q = db.query(Venue.id).order_by(Venue.id.asc())
    if limit:
        q = q.limit(limit)
    venue_ids = [r.id for r in q.all()]
    logger.info("Applying scenario %s to %s venues", name, len(venue_ids))

    affected = 0
    failed = 0
    for venue_id in venue_ids:
        try:
            if name == SCENARIO_VIBE_SHIFT:
                written = _shift_vibe(db, venue_id, now)
            else:
                busyness, vibe = _PRESETS[name]
                written = write_live_state(db, venue_id, now, busyness=busyness, vibe=vibe)
            if written:
                db.commit()
                affected += 1
            else:
                db.rollback()
        except Exception as e:
            db.rollback()
            failed += 1
            logger.exception("Scenario %s: venue %s failed (continuing): %s", name, venue_id, e)

    if affected:
        dispatch_event(EVENT_SCENARIO_APPLIED, {"scenario": name, "affected": affected, "at": as_utc(now).isoformat()})
    return {
        "scenario": name,
        "affected": affected,
        "failed": failed,
        "message": f"Scenario '{name}' applied successfully",
    }
