"""Visit model — one canvassing report submitted by a volunteer."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Double, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.models.base import Base, UUIDMixin, utcnow


class Visit(Base, UUIDMixin):
    """A door knock.

    Submitted coordinates come from the device; corrected coordinates are
    always the reverse-geocoded result. ``total_points`` is written once, by
    scoring, inside the ingestion transaction.
    """

    __tablename__ = "visits"

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    address_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("addresses.id"), nullable=False, index=True
    )
    duration_sec: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_latitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    submitted_longitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    submitted_street_1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    corrected_latitude: Mapped[float] = mapped_column(Double, nullable=False)
    corrected_longitude: Mapped[float] = mapped_column(Double, nullable=False)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
