"""City: groups venues and carries the IANA timezone their schedules are written in."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.sql import expression, func

from reki.db.base import Base


class City(Base):
    __tablename__ = "cities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    country_code = Column(String(2), nullable=False)
    timezone = Column(String(64), nullable=False, default="Europe/London", server_default="Europe/London")
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (UniqueConstraint("name", "country_code", name="uq_cities_name_country"),)
