"""Runs every VIBE_TICK_SECONDS: apply the winning schedule rule's vibe to each venue."""
import logging
from datetime import datetime, timezone

from reki.db.session import SessionLocal
from reki.services.automation.ticks import run_vibe_tick

logger = logging.getLogger(__name__)


def run_vibe_tick_job() -> None:
    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        run_vibe_tick(db, now)
    except Exception as e:
        db.rollback()
        logger.exception("Vibe tick job failed: %s", e)
    finally:
        db.close()
