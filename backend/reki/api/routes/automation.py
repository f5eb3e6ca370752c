"""
Automation API: status, scenario presets and manual ticks (same code path as the scheduler jobs).
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from reki.core.constants import (
    BUSYNESS_TICK_JOB_ID,
    BUSYNESS_TICK_SECONDS,
    SCENARIOS,
    VIBE_TICK_JOB_ID,
    VIBE_TICK_SECONDS,
)
from reki.core.errors import RekiError, error_to_http
from reki.db.session import get_db
from reki.services.automation import (
    apply_scenario_preset,
    get_automation_status,
    run_busyness_tick,
    run_vibe_tick,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _next_run_iso(request: Request, job_id: str, interval_seconds: int) -> str:
    """Next run time of a scheduler job (UTC ISO). Falls back to now + interval when the scheduler is not running."""
    fallback = (datetime.now(timezone.utc) + timedelta(seconds=interval_seconds)).isoformat()
    scheduler = getattr(request.app.state, "scheduler", None)
    if not scheduler:
        return fallback
    job = scheduler.get_job(job_id)
    if job and getattr(job, "next_run_time", None):
        at = job.next_run_time
        if at.tzinfo is None:
            at = at.replace(tzinfo=timezone.utc)
        return at.astimezone(timezone.utc).isoformat()
    return fallback


@router.get("/status")
def automation_status(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    out = get_automation_status(db, datetime.now(timezone.utc)).as_dict()
    out["next_vibe_tick_at"] = _next_run_iso(request, VIBE_TICK_JOB_ID, VIBE_TICK_SECONDS)
    out["next_busyness_tick_at"] = _next_run_iso(request, BUSYNESS_TICK_JOB_ID, BUSYNESS_TICK_SECONDS)
    return out


class ScenarioRequest(BaseModel):
    scenario: str = Field(..., description=" | ".join(SCENARIOS))
    limit: int | None = Field(None, ge=0, description="Max venues (lowest ids first); 0 = all")


@router.post("/scenario")
def post_scenario(body: ScenarioRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    try:
        return apply_scenario_preset(db, body.scenario, datetime.now(timezone.utc), limit=body.limit)
    except RekiError as exc:
        raise error_to_http(exc) from exc


@router.post("/update-vibes")
def update_vibes(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Run one vibe tick now."""
    return run_vibe_tick(db, datetime.now(timezone.utc)).as_dict()


@router.post("/update-busyness")
def update_busyness(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Run one busyness tick now."""
    return run_busyness_tick(db, datetime.now(timezone.utc)).as_dict()
