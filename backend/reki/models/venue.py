"""Canonical venue record. Category drives busyness simulation; the city supplies the timezone."""
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.sql import expression, func

from reki.db.base import Base
from reki.models.enums import VenueCategory


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    city_id = Column(Integer, ForeignKey("cities.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(160), nullable=False, index=True)
    category = Column(
        Enum(VenueCategory, name="venue_category", native_enum=False, length=16),
        nullable=False,
        index=True,
    )
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
