"""Initial schema: cities, venues, live state, vibe schedules, offers, redemption ledger

Revision ID: 001
Revises:
Create Date: (run alembic upgrade head)

Enum columns are non-native (VARCHAR(16) holding the member name), matching the models.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "cities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("country_code", sa.String(2), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="Europe/London"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("name", "country_code", name="uq_cities_name_country"),
    )

    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("city_id", sa.Integer(), sa.ForeignKey("cities.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(160), nullable=False),
        sa.Column("category", sa.String(16), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_venues_city_id", "venues", ["city_id"])
    op.create_index("ix_venues_name", "venues", ["name"])
    op.create_index("ix_venues_category", "venues", ["category"])

    op.create_table(
        "venue_live_state",
        sa.Column(
            "venue_id",
            sa.Integer(),
            sa.ForeignKey("venues.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("busyness", sa.String(16), nullable=False, server_default="QUIET"),
        sa.Column("vibe", sa.String(16), nullable=False, server_default="CHILL"),
        sa.Column("busyness_updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("vibe_updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "venue_vibe_schedule",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("vibe", sa.String(16), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_venue_vibe_schedule_venue_id", "venue_vibe_schedule", ["venue_id"])
    op.create_index("ix_venue_vibe_schedule_is_active", "venue_vibe_schedule", ["is_active"])
    op.create_index("ix_venue_vibe_schedule_venue_day", "venue_vibe_schedule", ["venue_id", "day_of_week"])

    op.create_table(
        "offers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(160), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("offer_type", sa.String(16), nullable=False),
        sa.Column("min_busyness", sa.String(16), nullable=False, server_default="QUIET"),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("click_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("redeem_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_offers_venue_id", "offers", ["venue_id"])
    op.create_index("ix_offers_starts_at", "offers", ["starts_at"])
    op.create_index("ix_offers_ends_at", "offers", ["ends_at"])
    op.create_index("ix_offers_is_active", "offers", ["is_active"])

    op.create_table(
        "offer_redemptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("offer_id", sa.Integer(), sa.ForeignKey("offers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("source", sa.String(32), nullable=False, server_default="DEMO"),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_offer_redemptions_offer_id", "offer_redemptions", ["offer_id"])
    op.create_index("ix_offer_redemptions_venue_id", "offer_redemptions", ["venue_id"])
    op.create_index("ix_offer_redemptions_user_id", "offer_redemptions", ["user_id"])


def downgrade() -> None:
    op.drop_table("offer_redemptions")
    op.drop_table("offers")
    op.drop_table("venue_vibe_schedule")
    op.drop_table("venue_live_state")
    op.drop_table("venues")
    op.drop_table("cities")
