"""
Live state store: read a venue's busyness/vibe and write them back.

Each half is written as a pair (value + its timestamp) in a single UPDATE statement, so a
concurrent tick or manual override can never leave a value with someone else's timestamp.
Last writer wins per pair. Callers own the transaction (commit/rollback).
"""
import logging
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from reki.core.errors import InvalidInputError, LiveStateNotFoundError
from reki.models.enums import BusynessLevel, VibeType
from reki.models.venue import Venue
from reki.models.venue_live_state import VenueLiveState

logger = logging.getLogger(__name__)


def get_live_state(db: Session, venue_id: int) -> VenueLiveState:
    row = (
        db.query(VenueLiveState)
        .filter(VenueLiveState.venue_id == venue_id)
        .populate_existing()
        .first()
    )
    if not row:
        raise LiveStateNotFoundError(venue_id)
    return row


def find_live_state(db: Session, venue_id: int) -> VenueLiveState | None:
    """Like get_live_state but None when missing (eligibility fails closed on None)."""
    return (
        db.query(VenueLiveState)
        .filter(VenueLiveState.venue_id == venue_id)
        .populate_existing()
        .first()
    )


def write_live_state(
    db: Session,
    venue_id: int,
    now: datetime,
    *,
    busyness: BusynessLevel | None = None,
    vibe: VibeType | None = None,
    only_if_changed: bool = False,
) -> bool:
    """
    Single UPDATE for the supplied pairs. only_if_changed adds "value differs" to the WHERE,
    which makes repeated ticks with unchanged inputs write nothing.
    Returns True when a row was written. Does not commit.
    """
    values: dict = {}
    changed = []
    if busyness is not None:
        values[VenueLiveState.busyness] = busyness
        values[VenueLiveState.busyness_updated_at] = now
        changed.append(VenueLiveState.busyness != busyness)
    if vibe is not None:
        values[VenueLiveState.vibe] = vibe
        values[VenueLiveState.vibe_updated_at] = now
        changed.append(VenueLiveState.vibe != vibe)
    if not values:
        return False
    values[VenueLiveState.updated_at] = now

    q = db.query(VenueLiveState).filter(VenueLiveState.venue_id == venue_id)
    if only_if_changed:
        q = q.filter(or_(*changed))
    return q.update(values, synchronize_session=False) > 0


def write_busyness(db: Session, venue_id: int, level: BusynessLevel, now: datetime) -> bool:
    """Tick write: busyness + busyness_updated_at, only when the level changes."""
    return write_live_state(db, venue_id, now, busyness=level, only_if_changed=True)


def write_vibe(db: Session, venue_id: int, vibe: VibeType, now: datetime) -> bool:
    """Tick write: vibe + vibe_updated_at, only when the vibe changes."""
    return write_live_state(db, venue_id, now, vibe=vibe, only_if_changed=True)


def apply_override(
    db: Session,
    venue_id: int,
    now: datetime,
    busyness: BusynessLevel | str | None = None,
    vibe: VibeType | str | None = None,
) -> VenueLiveState:
    """Manual override: each supplied field is written with a fresh timestamp, even if unchanged."""
    try:
        busyness = BusynessLevel(busyness) if busyness is not None else None
        vibe = VibeType(vibe) if vibe is not None else None
    except ValueError as e:
        raise InvalidInputError(str(e))
    if busyness is None and vibe is None:
        raise InvalidInputError("Provide busyness and/or vibe.")
    get_live_state(db, venue_id)
    write_live_state(db, venue_id, now, busyness=busyness, vibe=vibe)
    db.commit()
    logger.info("Live state override for venue %s: busyness=%s vibe=%s", venue_id, busyness, vibe)
    return get_live_state(db, venue_id)


def get_busyness_stats(db: Session) -> list[dict]:
    """Active venues per busyness level, e.g. [{"level": "BUSY", "count": 3}, ...]. Levels with no venues are 0."""
    rows = (
        db.query(VenueLiveState.busyness, func.count())
        .join(Venue, Venue.id == VenueLiveState.venue_id)
        .filter(Venue.is_active.is_(True))
        .group_by(VenueLiveState.busyness)
        .all()
    )
    counts = {level: n for level, n in rows}
    return [{"level": level.value, "count": int(counts.get(level, 0))} for level in BusynessLevel]


def get_last_live_state_write(db: Session) -> datetime | None:
    return db.query(func.max(VenueLiveState.updated_at)).scalar()
