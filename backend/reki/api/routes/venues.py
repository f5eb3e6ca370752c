"""
Venue directory, live state and weekly vibe schedules.

Mounted without a prefix: paths are /cities, /venues/... and /vibe-schedules/....
"""
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from reki.core.errors import RekiError, error_to_http
from reki.db.session import get_db
from reki.models.enums import BusynessLevel, VenueCategory, VibeType
from reki.services.live_state_service import apply_override, get_busyness_stats, get_live_state
from reki.services.venue_service import create_city, create_venue, get_venue, get_venue_context
from reki.services.vibe_schedule import (
    create_rule,
    delete_rule,
    list_rules,
    resolve_current_vibe,
    resolve_next_change,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _live_state_out(row) -> dict[str, Any]:
    return {
        "venue_id": row.venue_id,
        "busyness": row.busyness.value,
        "vibe": row.vibe.value,
        "busyness_updated_at": _iso(row.busyness_updated_at),
        "vibe_updated_at": _iso(row.vibe_updated_at),
        "updated_at": _iso(row.updated_at),
    }


def _rule_out(row) -> dict[str, Any]:
    return {
        "id": row.id,
        "venue_id": row.venue_id,
        "day_of_week": row.day_of_week,
        "start_time": row.start_time,
        "end_time": row.end_time,
        "vibe": row.vibe.value,
        "priority": row.priority,
        "is_active": row.is_active,
    }


# --- Cities / venues ---


class CreateCityRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    country_code: str = Field(..., min_length=2, max_length=2)
    timezone: str | None = Field(None, description="IANA zone, e.g. Europe/London")


@router.post("/cities")
def post_city(body: CreateCityRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        city = create_city(db, body.name, body.country_code, body.timezone)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"id": city.id, "name": city.name, "country_code": city.country_code, "timezone": city.timezone}


class CreateVenueRequest(BaseModel):
    city_id: int
    name: str = Field(..., min_length=1, max_length=160)
    category: VenueCategory


@router.post("/venues")
def post_venue(body: CreateVenueRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Create a venue; its live state starts QUIET / CHILL."""
    try:
        venue = create_venue(db, body.city_id, body.name, body.category, now=datetime.now(timezone.utc))
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"id": venue.id, "city_id": venue.city_id, "name": venue.name, "category": venue.category.value}


# Declared before /venues/{venue_id} so the literal path wins.
@router.get("/venues/busyness-stats")
def busyness_stats(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Active venues per busyness level."""
    return {"levels": get_busyness_stats(db)}


@router.get("/venues/{venue_id}")
def get_venue_detail(venue_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        venue = get_venue(db, venue_id)
        ctx = get_venue_context(db, venue_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {
        "id": venue.id,
        "city_id": venue.city_id,
        "name": venue.name,
        "category": venue.category.value,
        "is_active": venue.is_active,
        "timezone": ctx.timezone,
    }


# --- Live state ---


@router.get("/venues/{venue_id}/live-state")
def read_live_state(venue_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        return _live_state_out(get_live_state(db, venue_id))
    except RekiError as exc:
        raise error_to_http(exc) from exc


class LiveStateOverrideRequest(BaseModel):
    busyness: BusynessLevel | None = None
    vibe: VibeType | None = None


@router.patch("/venues/{venue_id}/live-state")
def override_live_state(
    venue_id: int,
    body: LiveStateOverrideRequest,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Manual override. Supplied fields are written with a fresh timestamp."""
    try:
        row = apply_override(db, venue_id, datetime.now(timezone.utc), busyness=body.busyness, vibe=body.vibe)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return _live_state_out(row)


@router.get("/venues/{venue_id}/current-vibe")
def current_vibe(venue_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Schedule-resolved vibe right now (null when no rule covers now) plus the next change."""
    now = datetime.now(timezone.utc)
    try:
        vibe = resolve_current_vibe(db, venue_id, now)
        nxt = resolve_next_change(db, venue_id, now)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {
        "venue_id": venue_id,
        "vibe": vibe.value if vibe else None,
        "next_change": nxt.as_dict() if nxt else None,
    }


# --- Vibe schedules ---


class CreateRuleRequest(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    start_time: str = Field(..., examples=["20:00"])
    end_time: str = Field(..., examples=["02:00"])
    vibe: VibeType
    priority: int = Field(0, ge=0)
    is_active: bool = True


@router.post("/venues/{venue_id}/vibe-schedules")
def post_rule(venue_id: int, body: CreateRuleRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        row = create_rule(
            db,
            venue_id,
            body.day_of_week,
            body.start_time,
            body.end_time,
            body.vibe,
            priority=body.priority,
            is_active=body.is_active,
        )
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return _rule_out(row)


@router.get("/venues/{venue_id}/vibe-schedules")
def get_rules(venue_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        rows = list_rules(db, venue_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"venue_id": venue_id, "rules": [_rule_out(r) for r in rows]}


@router.delete("/vibe-schedules/{rule_id}")
def remove_rule(rule_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        delete_rule(db, rule_id)
    except RekiError as exc:
        raise error_to_http(exc) from exc
    return {"deleted": rule_id}
