"""One row per venue (PK = venue_id): current busyness and vibe, each with its own timestamp.

The two halves are separate sub-records. Writers always set a value together with its
timestamp in one UPDATE (see services.live_state_service); never one without the other.
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer
from sqlalchemy.sql import func

from reki.db.base import Base
from reki.models.enums import BusynessLevel, VibeType


@dataclass(frozen=True)
class BusynessState:
    level: BusynessLevel
    updated_at: datetime


@dataclass(frozen=True)
class VibeState:
    value: VibeType
    updated_at: datetime


class VenueLiveState(Base):
    __tablename__ = "venue_live_state"

    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), primary_key=True)
    busyness = Column(
        Enum(BusynessLevel, name="busyness_level", native_enum=False, length=16),
        nullable=False,
        default=BusynessLevel.QUIET,
    )
    vibe = Column(
        Enum(VibeType, name="vibe_type", native_enum=False, length=16),
        nullable=False,
        default=VibeType.CHILL,
    )
    busyness_updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    vibe_updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def busyness_state(self) -> BusynessState:
        return BusynessState(level=self.busyness, updated_at=self.busyness_updated_at)

    @property
    def vibe_state(self) -> VibeState:
        return VibeState(value=self.vibe, updated_at=self.vibe_updated_at)
