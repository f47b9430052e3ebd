"""Unit tests for person service — partial merges and the audit trail."""

import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.errors import RecordNotFoundError, ValidationFailedError
from canvass_api.lib.canvass import UpdateType
from canvass_api.models.person import Person
from canvass_api.models.visit import Visit
from canvass_api.services import person_service

NOW = datetime(2026, 3, 1, 18, 30, tzinfo=UTC)


def _visit() -> Visit:
    return Visit(id=uuid.uuid4(), address_id=uuid.uuid4(), user_id=uuid.uuid4(), duration_sec=200)


def _stored_person(**overrides) -> Person:
    values = {
        "id": uuid.uuid4(),
        "address_id": uuid.uuid4(),
        "first_name": "Ada",
        "last_name": "Lovelace",
        "canvass_response": "undecided",
        "party_affiliation": "independent_affiliation",
        "email": "ada@example.com",
        "phone": "555-0100",
        "preferred_contact_method": "email",
        "previously_participated_in_caucus_or_primary": True,
    }
    values.update(overrides)
    return Person(**values)


class TestReconcileCreate:
    """A payload without a stored person creates one."""

    def test_creates_person_with_defaults(self) -> None:
        visit = _visit()
        person, update = person_service.reconcile(None, {"first_name": "Grace"}, visit, now=NOW)

        assert person.id is not None
        assert person.first_name == "Grace"
        assert person.canvass_response == "unknown"
        assert person.party_affiliation == "unknown_affiliation"
        assert person.previously_participated_in_caucus_or_primary is False
        assert person.address_id == visit.address_id
        assert person.canvassed_at == NOW

        assert update is None

    def test_created_person_with_party_is_audited(self) -> None:
        visit = _visit()
        person, update = person_service.reconcile(
            None, {"first_name": "Grace", "party_affiliation": "democrat_affiliation"}, visit, now=NOW
        )

        assert update is not None
        assert update.update_type == UpdateType.CREATED
        assert update.person_id == person.id
        assert update.visit_id == visit.id
        assert update.old_canvass_response is None
        assert update.old_party_affiliation is None
        assert update.new_canvass_response == "unknown"
        assert update.new_party_affiliation == "democrat_affiliation"

    def test_created_person_keeps_supplied_response(self) -> None:
        person, update = person_service.reconcile(None, {"canvass_response": "strongly_for"}, _visit(), now=NOW)
        assert person.canvass_response == "strongly_for"
        assert update.new_canvass_response == "strongly_for"


class TestReconcileModify:
    """A payload for a stored person merges into it."""

    def test_null_fields_keep_stored_values(self) -> None:
        stored = _stored_person()
        payload = {
            "canvass_response": "leaning_for",
            "party_affiliation": "democrat_affiliation",
            "email": None,
            "phone": None,
            "preferred_contact_method": None,
            "previously_participated_in_caucus_or_primary": None,
        }

        person, update = person_service.reconcile(stored, payload, _visit(), now=NOW)

        assert person is stored
        assert person.email == "ada@example.com"
        assert person.phone == "555-0100"
        assert person.preferred_contact_method == "email"
        assert person.previously_participated_in_caucus_or_primary is True
        assert person.canvass_response == "leaning_for"
        assert person.party_affiliation == "democrat_affiliation"

        assert update.update_type == UpdateType.MODIFIED
        assert update.old_canvass_response == "undecided"
        assert update.new_canvass_response == "leaning_for"
        assert update.old_party_affiliation == "independent_affiliation"
        assert update.new_party_affiliation == "democrat_affiliation"

    def test_unaudited_change_has_no_update(self) -> None:
        stored = _stored_person()
        person, update = person_service.reconcile(stored, {"phone": "555-0199"}, _visit(), now=NOW)
        assert person.phone == "555-0199"
        assert update is None

    def test_same_response_is_not_a_change(self) -> None:
        stored = _stored_person()
        _, update = person_service.reconcile(stored, {"canvass_response": "undecided"}, _visit(), now=NOW)
        assert update is None

    def test_false_is_a_value_not_an_absence(self) -> None:
        stored = _stored_person()
        person, _ = person_service.reconcile(
            stored, {"previously_participated_in_caucus_or_primary": False}, _visit(), now=NOW
        )
        assert person.previously_participated_in_caucus_or_primary is False

    def test_person_moves_to_visit_address(self) -> None:
        stored = _stored_person()
        visit = _visit()
        person, _ = person_service.reconcile(stored, {}, visit, now=NOW)
        assert person.address_id == visit.address_id
        assert person.canvassed_at == NOW

    def test_unknown_keys_ignored(self) -> None:
        stored = _stored_person()
        person, update = person_service.reconcile(stored, {"id": uuid.uuid4(), "shoe_size": 9}, _visit(), now=NOW)
        assert person.first_name == "Ada"
        assert update is None


class TestBuildPersonUpdate:
    def test_missing_references_fail_validation(self) -> None:
        person = _stored_person(id=None)
        visit = Visit(id=None, address_id=uuid.uuid4())
        with pytest.raises(ValidationFailedError) as exc_info:
            person_service.build_person_update(person, visit, UpdateType.MODIFIED, None, None)
        assert set(exc_info.value.errors) == {"person", "visit"}

    def test_missing_new_values_fail_validation(self) -> None:
        person = _stored_person(canvass_response=None, party_affiliation=None)
        with pytest.raises(ValidationFailedError) as exc_info:
            person_service.build_person_update(person, _visit(), UpdateType.MODIFIED, "undecided", None)
        assert set(exc_info.value.errors) == {"new_canvass_response", "new_party_affiliation"}


class TestGetPerson:
    @pytest.mark.asyncio
    async def test_unknown_id_raises(self, async_session: AsyncSession) -> None:
        with pytest.raises(RecordNotFoundError) as exc_info:
            await person_service.get_person(async_session, uuid.uuid4())
        assert exc_info.value.code == "RECORD_NOT_FOUND"
