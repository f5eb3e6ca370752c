"""
Automation workload config. .env is the source of truth; these defaults apply only when
the env var is unset. All values read at import time.

Env vars: VIBE_TICK_SECONDS, BUSYNESS_TICK_SECONDS, SCENARIO_VENUE_LIMIT.

Vibes change on schedule boundaries, so the vibe tick runs more often than the busyness
tick (a slow-moving simulated signal). Verify effective values with GET /health.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load backend/.env so scripts/tests/workers that import this module see the same values as main.py
_backend_dir = Path(__file__).resolve().parent.parent.parent
_env_path = _backend_dir / ".env"
_env_paths = [_env_path]
if Path.cwd() != _backend_dir:
    _env_paths.extend([Path.cwd() / ".env", Path.cwd() / "backend" / ".env"])
for _p in _env_paths:
    if _p.exists():
        load_dotenv(_p, override=False)
        break

_log = logging.getLogger(__name__)


def _int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = os.environ.get(key)
    if raw is None:
        v = default
    else:
        try:
            v = int(raw.strip())
        except ValueError:
            v = default
    if min_val is not None and v < min_val:
        v = min_val
    if max_val is not None and v > max_val:
        v = max_val
    return v


# -----------------------------------------------------------------------------
# Tick intervals (set in .env; defaults below only when unset)
# -----------------------------------------------------------------------------
VIBE_TICK_SECONDS = _int("VIBE_TICK_SECONDS", 300, min_val=30, max_val=3600)
BUSYNESS_TICK_SECONDS = _int("BUSYNESS_TICK_SECONDS", 1800, min_val=60, max_val=7200)

# Scenario presets touch at most this many venues (lowest ids first); 0 = all venues
SCENARIO_VENUE_LIMIT = _int("SCENARIO_VENUE_LIMIT", 0, min_val=0)

_log.info(
    "Automation config (from env): vibe_tick_sec=%s busyness_tick_sec=%s scenario_venue_limit=%s",
    VIBE_TICK_SECONDS,
    BUSYNESS_TICK_SECONDS,
    SCENARIO_VENUE_LIMIT,
)


@dataclass(frozen=True)
class AutomationConfig:
    """Snapshot of automation config for passing around (e.g. /health, tests)."""
    vibe_tick_seconds: int
    busyness_tick_seconds: int
    scenario_venue_limit: int


def get_automation_config() -> AutomationConfig:
    return AutomationConfig(
        vibe_tick_seconds=VIBE_TICK_SECONDS,
        busyness_tick_seconds=BUSYNESS_TICK_SECONDS,
        scenario_venue_limit=SCENARIO_VENUE_LIMIT,
    )
