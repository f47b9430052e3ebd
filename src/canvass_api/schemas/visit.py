"""Pydantic v2 schemas for visit ingestion.

The request is a primary ``visits`` resource plus side-loaded ``addresses``
(at most one) and ``people`` resources. Omitted and null attributes mean
"keep the stored value".
"""

import uuid
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator

from canvass_api.lib.canvass import CanvassResponse, PartyAffiliation, PreferredContactMethod

# --- Request schemas ---


class AddressAttributes(BaseModel):
    """Partial address payload."""

    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    street_1: str | None = Field(default=None, max_length=255)
    street_2: str | None = Field(default=None, max_length=255)
    city: str | None = Field(default=None, max_length=100)
    state_code: str | None = Field(default=None, min_length=2, max_length=2)
    zip_code: str | None = Field(default=None, max_length=10)
    best_canvass_response: CanvassResponse | None = None
    last_canvass_response: CanvassResponse | None = None


class PersonAttributes(BaseModel):
    """Partial person payload."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    canvass_response: CanvassResponse | None = None
    party_affiliation: PartyAffiliation | None = None
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    preferred_contact_method: PreferredContactMethod | None = None
    previously_participated_in_caucus_or_primary: bool | None = None


class IncludedAddress(BaseModel):
    """Side-loaded address: ``id`` to reference a stored one, attributes to create or update."""

    type: Literal["addresses"]
    id: uuid.UUID | None = None
    attributes: AddressAttributes = Field(default_factory=AddressAttributes)


class IncludedPerson(BaseModel):
    """Side-loaded person: with ``id`` it updates, without it creates."""

    type: Literal["people"]
    id: uuid.UUID | None = None
    attributes: PersonAttributes = Field(default_factory=PersonAttributes)


IncludedResource = Annotated[IncludedAddress | IncludedPerson, Field(discriminator="type")]


class VisitAttributes(BaseModel):
    """Primary visit attributes reported by the device."""

    duration_sec: int = Field(ge=0)
    submitted_latitude: float | None = Field(default=None, ge=-90, le=90)
    submitted_longitude: float | None = Field(default=None, ge=-180, le=180)
    submitted_street_1: str | None = Field(default=None, max_length=255)


class VisitData(BaseModel):
    type: Literal["visits"] = "visits"
    attributes: VisitAttributes


class VisitCreateRequest(BaseModel):
    """Request body for recording a visit."""

    data: VisitData
    included: list[IncludedResource] = Field(default_factory=list)

    @model_validator(mode="after")
    def _at_most_one_address(self) -> "VisitCreateRequest":
        if sum(1 for item in self.included if isinstance(item, IncludedAddress)) > 1:
            msg = "at most one included address is allowed"
            raise ValueError(msg)
        return self

    @property
    def address(self) -> IncludedAddress | None:
        return next((item for item in self.included if isinstance(item, IncludedAddress)), None)

    @property
    def people(self) -> list[IncludedPerson]:
        return [item for item in self.included if isinstance(item, IncludedPerson)]


# --- Response schemas ---


class ScoreResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    points_for_knock: int
    points_for_updates: int
    total: int


class AddressResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    latitude: float | None
    longitude: float | None
    street_1: str | None
    street_2: str | None
    city: str | None
    state_code: str | None
    zip_code: str | None
    usps_verified_street_1: str | None
    usps_verified_street_2: str | None
    usps_verified_city: str | None
    usps_verified_state: str | None
    usps_verified_zip: str | None
    best_canvass_response: str
    last_canvass_response: str
    most_supportive_resident_id: uuid.UUID | None


class PersonResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: uuid.UUID
    address_id: uuid.UUID
    first_name: str | None
    last_name: str | None
    canvass_response: str
    party_affiliation: str
    email: str | None
    phone: str | None
    preferred_contact_method: str | None
    previously_participated_in_caucus_or_primary: bool
    canvassed_at: datetime | None


class VisitResponse(BaseModel):
    """The recorded visit with its score, resolved address, and the address's people."""

    id: uuid.UUID
    user_id: uuid.UUID
    duration_sec: int
    total_points: int
    submitted_latitude: float | None
    submitted_longitude: float | None
    submitted_street_1: str | None
    corrected_latitude: float
    corrected_longitude: float
    created_at: datetime
    score: ScoreResponse
    address: AddressResponse
    people: list[PersonResponse]

    @classmethod
    def from_ingested(cls, ingested: Any) -> "VisitResponse":
        """Build the response from a ``visit_service.IngestedVisit``."""
        visit = ingested.visit
        return cls(
            id=visit.id,
            user_id=visit.user_id,
            duration_sec=visit.duration_sec,
            total_points=visit.total_points,
            submitted_latitude=visit.submitted_latitude,
            submitted_longitude=visit.submitted_longitude,
            submitted_street_1=visit.submitted_street_1,
            corrected_latitude=visit.corrected_latitude,
            corrected_longitude=visit.corrected_longitude,
            created_at=visit.created_at,
            score=ScoreResponse.model_validate(ingested.score),
            address=AddressResponse.model_validate(ingested.address),
            people=[PersonResponse.model_validate(person) for person in ingested.people],
        )
