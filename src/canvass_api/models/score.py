"""Score model — the points earned by a visit."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.models.base import Base, UUIDMixin, utcnow


class Score(Base, UUIDMixin):
    """Immutable points record; exactly one per visit."""

    __tablename__ = "scores"

    visit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("visits.id"), nullable=False, unique=True
    )
    points_for_knock: Mapped[int] = mapped_column(Integer, nullable=False)
    points_for_updates: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def total(self) -> int:
        return self.points_for_knock + self.points_for_updates
