"""Append-only redemption ledger: one row per successful redemption. Never updated or deleted."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from reki.db.base import Base


class OfferRedemption(Base):
    __tablename__ = "offer_redemptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    offer_id = Column(Integer, ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=True, index=True)
    source = Column(String(32), nullable=False, default="DEMO", server_default="DEMO")  # DEMO, INVESTOR, INTERNAL, ...
    redeemed_at = Column(DateTime(timezone=True), nullable=False)  # the redemption instant ("now"), not DB clock
