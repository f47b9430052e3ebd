"""Address model — a canvassed household and its aggregate canvass status."""

import uuid

from sqlalchemy import Double, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from canvass_api.lib.canvass.responses import CanvassResponse
from canvass_api.models.base import Base, TimestampMixin, UUIDMixin


class Address(Base, UUIDMixin, TimestampMixin):
    """Household address with submitted fields, postal-verified fields, and derived status.

    Attributes:
        best_canvass_response: Highest-ranked response among residents, or an
            operational status set directly by a visit.
        last_canvass_response: Response recorded by the most recent visit.
        most_supportive_resident_id: Id of the resident holding the best
            response. A lookup reference only; the address does not own people.
        version_id: Optimistic lock counter; concurrent visits to the same
            address serialize on it.
    """

    __tablename__ = "addresses"

    latitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Double, nullable=True)
    street_1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    street_2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state_code: Mapped[str | None] = mapped_column(String(2), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Postal-verified variants from the geocoder's verification tier
    usps_verified_street_1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    usps_verified_street_2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    usps_verified_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    usps_verified_state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    usps_verified_zip: Mapped[str | None] = mapped_column(String(10), nullable=True)

    best_canvass_response: Mapped[str] = mapped_column(
        String(30), nullable=False, default=CanvassResponse.NOT_YET_VISITED.value
    )
    last_canvass_response: Mapped[str] = mapped_column(
        String(30), nullable=False, default=CanvassResponse.NOT_YET_VISITED.value
    )
    most_supportive_resident_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    __table_args__ = (
        Index("ix_addresses_lat_lng", "latitude", "longitude"),
        Index("ix_addresses_street_1", "street_1"),
    )
