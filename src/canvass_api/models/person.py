"""Person model — a resident recorded by canvassers."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.lib.canvass.responses import CanvassResponse, PartyAffiliation
from canvass_api.models.base import Base, TimestampMixin, UUIDMixin

# Attributes a visit payload may merge into a person
PERSON_MERGE_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "canvass_response",
    "party_affiliation",
    "email",
    "phone",
    "preferred_contact_method",
    "previously_participated_in_caucus_or_primary",
)


class Person(Base, UUIDMixin, TimestampMixin):
    """A resident living at exactly one address."""

    __tablename__ = "people"

    address_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("addresses.id"), nullable=False, index=True
    )
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    canvass_response: Mapped[str] = mapped_column(
        String(30), nullable=False, default=CanvassResponse.UNKNOWN.value
    )
    party_affiliation: Mapped[str] = mapped_column(
        String(30), nullable=False, default=PartyAffiliation.UNKNOWN.value
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    preferred_contact_method: Mapped[str | None] = mapped_column(String(10), nullable=True)
    previously_participated_in_caucus_or_primary: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    canvassed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
