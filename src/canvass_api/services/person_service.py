"""Person service — merge partial resident payloads and keep the audit trail.

Null or absent attributes never erase stored data. Changes to the two
audited fields, ``canvass_response`` and ``party_affiliation``, produce a
PersonUpdate carrying both fields' old and new values.
"""

import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.errors import RecordNotFoundError, ValidationFailedError
from canvass_api.lib.canvass import CanvassResponse, PartyAffiliation, UpdateType, apply_changes, merge_attributes
from canvass_api.models.person import PERSON_MERGE_FIELDS, Person
from canvass_api.models.person_update import PersonUpdate
from canvass_api.models.visit import Visit

AUDITED_FIELDS: tuple[str, str] = ("canvass_response", "party_affiliation")


async def get_person(session: AsyncSession, person_id: uuid.UUID) -> Person:
    """Load a person by id.

    Raises:
        RecordNotFoundError: If no person has that id.
    """
    person = await session.get(Person, person_id)
    if person is None:
        raise RecordNotFoundError("person", person_id)
    return person


async def list_residents(session: AsyncSession, address_id: uuid.UUID) -> list[Person]:
    """Return the people currently associated with an address, oldest first."""
    result = await session.execute(
        select(Person).where(Person.address_id == address_id).order_by(Person.created_at, Person.id)
    )
    return list(result.scalars().all())


def _new_person() -> Person:
    return Person(
        id=uuid.uuid4(),
        canvass_response=CanvassResponse.UNKNOWN.value,
        party_affiliation=PartyAffiliation.UNKNOWN.value,
        previously_participated_in_caucus_or_primary=False,
    )


def build_person_update(
    person: Person,
    visit: Visit,
    update_type: UpdateType,
    old_canvass_response: str | None,
    old_party_affiliation: str | None,
) -> PersonUpdate:
    """Build an audit record for ``person`` as changed by ``visit``.

    Raises:
        ValidationFailedError: If a required reference or new value is missing.
    """
    errors: dict[str, str] = {}
    if person.id is None:
        errors["person"] = "is required"
    if visit.id is None:
        errors["visit"] = "is required"
    if person.canvass_response is None:
        errors["new_canvass_response"] = "is required"
    if person.party_affiliation is None:
        errors["new_party_affiliation"] = "is required"
    if errors:
        raise ValidationFailedError(errors)

    return PersonUpdate(
        id=uuid.uuid4(),
        person_id=person.id,
        visit_id=visit.id,
        update_type=update_type.value,
        old_canvass_response=old_canvass_response,
        new_canvass_response=person.canvass_response,
        old_party_affiliation=old_party_affiliation,
        new_party_affiliation=person.party_affiliation,
    )


def reconcile(
    existing: Person | None,
    attributes: Mapping[str, Any],
    visit: Visit,
    *,
    now: datetime | None = None,
) -> tuple[Person, PersonUpdate | None]:
    """Merge an incoming partial person payload.

    Args:
        existing: The stored person, or None to create one.
        attributes: Partial payload keyed by Person attribute name. Unknown
            keys are ignored.
        visit: The visit doing the merge; the person moves to its address.
        now: Timestamp stamped on ``canvassed_at`` (defaults to current UTC).

    Returns:
        Tuple of (person, audit record or None). An audit record is built
        only when an audited field is among the changed fields. Every field
        supplied for a created person counts as changed.
    """
    created = existing is None
    person = _new_person() if existing is None else existing

    old_canvass_response = None if created else person.canvass_response
    old_party_affiliation = None if created else person.party_affiliation

    current = {name: getattr(person, name) for name in PERSON_MERGE_FIELDS}
    merge = merge_attributes(current, attributes, PERSON_MERGE_FIELDS)
    apply_changes(person, merge.changes)

    person.address_id = visit.address_id
    person.canvassed_at = now or datetime.now(UTC)

    if created:
        audited_change = any(name in merge.supplied for name in AUDITED_FIELDS)
    else:
        audited_change = any(merge.changed(name) for name in AUDITED_FIELDS)
    if not audited_change:
        logger.debug(f"Person {person.id} merged without audited changes")
        return person, None

    update_type = UpdateType.CREATED if created else UpdateType.MODIFIED
    update = build_person_update(person, visit, update_type, old_canvass_response, old_party_affiliation)
    logger.debug(f"Person {person.id} {update_type.value} by visit {visit.id}")
    return person, update
