"""User model — a canvassing volunteer and their denormalized point total."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.models.base import Base, UUIDMixin, utcnow


class User(Base, UUIDMixin):
    """Authenticated volunteer.

    ``total_points`` is the source of truth for a volunteer's current score;
    it is recounted from their visits by the leaderboard aggregator and
    Ranking rows are derived from it.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="volunteer")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    state_code: Mapped[str | None] = mapped_column(String(2), nullable=True, index=True)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
