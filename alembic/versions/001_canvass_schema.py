"""Initial schema: users, friendships, addresses, people, visits, scores, rankings.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("state_code", sa.String(2), nullable=True),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_state_code", "users", ["state_code"])

    op.create_table(
        "friendships",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("friend_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "friend_id", name="uq_friendship_pair"),
        sa.CheckConstraint("user_id <> friend_id", name="ck_friendship_not_self"),
    )
    op.create_index("ix_friendships_user_id", "friendships", ["user_id"])
    op.create_index("ix_friendships_friend_id", "friendships", ["friend_id"])

    op.create_table(
        "addresses",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("latitude", sa.Double, nullable=True),
        sa.Column("longitude", sa.Double, nullable=True),
        sa.Column("street_1", sa.String(255), nullable=True),
        sa.Column("street_2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state_code", sa.String(2), nullable=True),
        sa.Column("zip_code", sa.String(10), nullable=True),
        sa.Column("usps_verified_street_1", sa.String(255), nullable=True),
        sa.Column("usps_verified_street_2", sa.String(255), nullable=True),
        sa.Column("usps_verified_city", sa.String(100), nullable=True),
        sa.Column("usps_verified_state", sa.String(2), nullable=True),
        sa.Column("usps_verified_zip", sa.String(10), nullable=True),
        sa.Column("best_canvass_response", sa.String(30), nullable=False, server_default="not_yet_visited"),
        sa.Column("last_canvass_response", sa.String(30), nullable=False, server_default="not_yet_visited"),
        sa.Column("most_supportive_resident_id", UUID(as_uuid=True), nullable=True),
        sa.Column("version_id", sa.Integer, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_addresses_lat_lng", "addresses", ["latitude", "longitude"])
    op.create_index("ix_addresses_street_1", "addresses", ["street_1"])

    op.create_table(
        "people",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("address_id", UUID(as_uuid=True), sa.ForeignKey("addresses.id"), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("canvass_response", sa.String(30), nullable=False, server_default="unknown"),
        sa.Column("party_affiliation", sa.String(30), nullable=False, server_default="unknown_affiliation"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("preferred_contact_method", sa.String(10), nullable=True),
        sa.Column(
            "previously_participated_in_caucus_or_primary", sa.Boolean, nullable=False, server_default="false"
        ),
        sa.Column("canvassed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_people_address_id", "people", ["address_id"])

    op.create_table(
        "visits",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("address_id", UUID(as_uuid=True), sa.ForeignKey("addresses.id"), nullable=False),
        sa.Column("duration_sec", sa.Integer, nullable=False),
        sa.Column("submitted_latitude", sa.Double, nullable=True),
        sa.Column("submitted_longitude", sa.Double, nullable=True),
        sa.Column("submitted_street_1", sa.String(255), nullable=True),
        sa.Column("corrected_latitude", sa.Double, nullable=False),
        sa.Column("corrected_longitude", sa.Double, nullable=False),
        sa.Column("total_points", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_visits_user_id", "visits", ["user_id"])
    op.create_index("ix_visits_address_id", "visits", ["address_id"])
    op.create_index("ix_visits_created_at", "visits", ["created_at"])

    op.create_table(
        "person_updates",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("person_id", UUID(as_uuid=True), sa.ForeignKey("people.id"), nullable=False),
        sa.Column("visit_id", UUID(as_uuid=True), sa.ForeignKey("visits.id"), nullable=False),
        sa.Column("update_type", sa.String(10), nullable=False),
        sa.Column("old_canvass_response", sa.String(30), nullable=True),
        sa.Column("new_canvass_response", sa.String(30), nullable=False),
        sa.Column("old_party_affiliation", sa.String(30), nullable=True),
        sa.Column("new_party_affiliation", sa.String(30), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_person_updates_person_id", "person_updates", ["person_id"])
    op.create_index("ix_person_updates_visit_id", "person_updates", ["visit_id"])

    op.create_table(
        "scores",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("visit_id", UUID(as_uuid=True), sa.ForeignKey("visits.id"), nullable=False, unique=True),
        sa.Column("points_for_knock", sa.Integer, nullable=False),
        sa.Column("points_for_updates", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "rankings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("scope", sa.String(20), nullable=False),
        sa.Column("scope_key", sa.String(64), nullable=False, server_default=""),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("rank", sa.Integer, nullable=False),
        sa.Column("computed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("scope", "scope_key", "user_id", name="uq_ranking_scope_user"),
    )
    op.create_index("ix_rankings_scope_rank", "rankings", ["scope", "scope_key", "rank"])


def downgrade() -> None:
    op.drop_table("rankings")
    op.drop_table("scores")
    op.drop_table("person_updates")
    op.drop_table("visits")
    op.drop_table("people")
    op.drop_table("addresses")
    op.drop_table("friendships")
    op.drop_table("users")
