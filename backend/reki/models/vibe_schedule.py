"""Weekly recurring vibe rule: (day_of_week, start_time, end_time) -> vibe, in the venue's local time.

day_of_week: 0 = Sunday .. 6 = Saturday. Times are 'HH:MM'; end_time < start_time means the
rule runs past midnight into the next day. Higher priority wins when rules overlap.
"""
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, SmallInteger, String
from sqlalchemy.sql import expression, func

from reki.db.base import Base
from reki.models.enums import VibeType


class VenueVibeSchedule(Base):
    __tablename__ = "venue_vibe_schedule"

    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(SmallInteger, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM local
    end_time = Column(String(5), nullable=False)  # HH:MM local
    vibe = Column(Enum(VibeType, name="vibe_type", native_enum=False, length=16), nullable=False)
    priority = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (Index("ix_venue_vibe_schedule_venue_day", "venue_id", "day_of_week"),)
