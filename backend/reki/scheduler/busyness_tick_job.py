"""Runs every BUSYNESS_TICK_SECONDS: re-simulate busyness for each venue's local hour."""
import logging
from datetime import datetime, timezone

from reki.db.session import SessionLocal
from reki.services.automation.ticks import run_busyness_tick

logger = logging.getLogger(__name__)


def run_busyness_tick_job() -> None:
    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        run_busyness_tick(db, now)
    except Exception as e:
        db.rollback()
        logger.exception("Busyness tick job failed: %s", e)
    finally:
        db.close()
