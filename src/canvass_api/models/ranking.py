"""Ranking model — materialized leaderboard rows, rebuilt from user totals."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.models.base import Base, UUIDMixin, utcnow


class RankingScope(enum.StrEnum):
    """Leaderboard partitions."""

    EVERYONE = "everyone"
    STATE = "state"
    FRIENDS = "friends"


class Ranking(Base, UUIDMixin):
    """One user's line on one leaderboard.

    ``scope_key`` is empty for the everyone board, the state code for state
    boards, and the owning user's id for friends boards. Rows are a
    projection, not a source of truth: each board is deleted and rewritten
    on recompute.
    """

    __tablename__ = "rankings"

    scope: Mapped[str] = mapped_column(String(20), nullable=False)
    scope_key: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    computed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("scope", "scope_key", "user_id", name="uq_ranking_scope_user"),
        Index("ix_rankings_scope_rank", "scope", "scope_key", "rank"),
    )
