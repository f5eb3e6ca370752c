#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from repo root or backend/:
  python backend/scripts/check_backend.py
"""
import os
import socket
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Set DATABASE_URL (and optionally NOTIFY_WEBHOOK_URL, tick intervals).")
    else:
        print("OK  .env exists")

    # 2) DB connection and schema
    try:
        from sqlalchemy import inspect, text

        from reki.db.session import engine
        from reki.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = sorted(set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names()))
        if missing:
            errors.append(f"Missing tables {missing}. Run: cd backend && alembic upgrade head")
            print("FAIL Missing tables:", ", ".join(missing))
        else:
            print("OK  All tables present")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 3) App import (catches missing deps, bad imports)
    try:
        from reki.main import app  # noqa: F401
        print("OK  App import (reki.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    # 4) Port 8000
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 8000))
        print("OK  Port 8000 is free")
    except OSError:
        errors.append("Port 8000 is in use. Stop the other process or use another port (e.g. --port 8001).")
        print("FAIL Port 8000 is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("-", e)
        print("\nThen start: cd backend && uvicorn reki.main:app --reload --port 8000")
        return 1

    print("\nAll checks passed. Start with: cd backend && uvicorn reki.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
