from reki.db.base import Base
from reki.db.session import get_db, engine, SessionLocal
from reki.db.tables import ALL_TABLE_NAMES

__all__ = ["get_db", "engine", "SessionLocal", "Base", "ALL_TABLE_NAMES"]
