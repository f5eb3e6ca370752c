#!/usr/bin/env python3
"""
Run one automation tick now (same code path as the scheduler jobs).

Run from backend dir:
  python scripts/run_automation_tick.py            # both ticks
  python scripts/run_automation_tick.py vibe
  python scripts/run_automation_tick.py busyness
"""
import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from reki.db.session import SessionLocal
from reki.services.automation import run_busyness_tick, run_vibe_tick


def main() -> int:
    parser = argparse.ArgumentParser(description="Run venue live-state ticks once.")
    parser.add_argument("which", nargs="?", choices=("vibe", "busyness", "both"), default="both")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        if args.which in ("busyness", "both"):
            r = run_busyness_tick(db, now)
            print(f"busyness: evaluated={r.evaluated} updated={r.updated} failed={r.failed}")
        if args.which in ("vibe", "both"):
            r = run_vibe_tick(db, now)
            print(f"vibe: evaluated={r.evaluated} updated={r.updated} failed={r.failed}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
