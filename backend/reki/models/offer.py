"""Venue offer with an absolute window and a minimum-busyness gate. Counters are only ever
incremented in SQL (SET n = n + 1), never read-then-written."""
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.sql import expression, func

from reki.db.base import Base
from reki.models.enums import BusynessLevel, OfferType


class Offer(Base):
    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    offer_type = Column(Enum(OfferType, name="offer_type", native_enum=False, length=16), nullable=False)
    min_busyness = Column(
        Enum(BusynessLevel, name="busyness_level", native_enum=False, length=16),
        nullable=False,
        default=BusynessLevel.QUIET,
    )
    starts_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ends_at = Column(DateTime(timezone=True), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true(), index=True)

    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    click_count = Column(Integer, nullable=False, default=0, server_default="0")
    redeem_count = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
