"""
Tick heartbeat: instant and counts of the last run per tick kind. In-memory only (per process);
set by the automation ticks, read by GET /automation/status.
"""
import threading
from datetime import datetime

_lock = threading.Lock()
_last: dict[str, dict] = {}


def record_tick(kind: str, at: datetime, evaluated: int, updated: int, failed: int) -> None:
    with _lock:
        _last[kind] = {
            "last_run_at": at.isoformat(),
            "evaluated": evaluated,
            "updated": updated,
            "failed": failed,
        }


def get_tick_heartbeat() -> dict[str, dict]:
    with _lock:
        return {kind: dict(v) for kind, v in _last.items()}


def reset_tick_heartbeat() -> None:
    with _lock:
        _last.clear()
