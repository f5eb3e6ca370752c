"""
FastAPI app entrypoint.

Live state + offers engine: venues carry a busyness level and a vibe, kept current by two
APScheduler interval ticks (schedule-driven vibe, simulated busyness); offers gate on both.
"""
import logging
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reki.api.routes import automation, offers, venues
from reki.config import settings
from reki.core.automation_config import get_automation_config
from reki.core.constants import (
    BUSYNESS_TICK_JOB_ID,
    BUSYNESS_TICK_SECONDS,
    VIBE_TICK_JOB_ID,
    VIBE_TICK_SECONDS,
)
from reki.scheduler.busyness_tick_job import run_busyness_tick_job
from reki.scheduler.vibe_tick_job import run_vibe_tick_job
from reki.services.notify import shutdown_notify

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler(timezone=timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _scheduler.add_job(
        run_vibe_tick_job,
        "interval",
        seconds=VIBE_TICK_SECONDS,
        id=VIBE_TICK_JOB_ID,
        coalesce=True,
        max_instances=1,
        replace_existing=True,
    )
    _scheduler.add_job(
        run_busyness_tick_job,
        "interval",
        seconds=BUSYNESS_TICK_SECONDS,
        id=BUSYNESS_TICK_JOB_ID,
        coalesce=True,
        max_instances=1,
        replace_existing=True,
    )
    _scheduler.start()
    app.state.scheduler = _scheduler

    def startup_background():
        # One tick of each on startup so live state is current before the first interval elapses.
        try:
            run_busyness_tick_job()
            run_vibe_tick_job()
            logger.info(
                "Startup ticks done; next vibe tick in %ss, busyness tick in %ss",
                VIBE_TICK_SECONDS,
                BUSYNESS_TICK_SECONDS,
            )
        except Exception as e:
            logger.warning("Startup ticks failed: %s", e, exc_info=True)

    threading.Thread(target=startup_background, daemon=True).start()
    logger.info("Backend ready; scheduler running (%s jobs)", len(_scheduler.get_jobs()))
    yield
    _scheduler.shutdown(wait=False)
    shutdown_notify()


app = FastAPI(title="Reki Live State", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for a deployed frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(venues.router, tags=["venues"])
app.include_router(offers.router, prefix="/offers", tags=["offers"])
app.include_router(automation.router, prefix="/automation", tags=["automation"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Reki API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict:
    cfg = get_automation_config()
    return {
        "status": "ok",
        "time": datetime.now(timezone.utc).isoformat(),
        "automation": {
            "vibe_tick_seconds": cfg.vibe_tick_seconds,
            "busyness_tick_seconds": cfg.busyness_tick_seconds,
            "scenario_venue_limit": cfg.scenario_venue_limit,
        },
    }
