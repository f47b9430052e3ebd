"""PersonUpdate model — append-only audit of canvass response and affiliation changes."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.models.base import Base, UUIDMixin, utcnow


class PersonUpdate(Base, UUIDMixin):
    """Write-only record of what a visit changed on a person (no updates or deletes)."""

    __tablename__ = "person_updates"

    person_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("people.id"), nullable=False, index=True
    )
    visit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("visits.id"), nullable=False, index=True
    )
    update_type: Mapped[str] = mapped_column(String(10), nullable=False)
    old_canvass_response: Mapped[str | None] = mapped_column(String(30), nullable=True)
    new_canvass_response: Mapped[str] = mapped_column(String(30), nullable=False)
    old_party_affiliation: Mapped[str | None] = mapped_column(String(30), nullable=True)
    new_party_affiliation: Mapped[str] = mapped_column(String(30), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
