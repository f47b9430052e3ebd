"""Integration tests for POST /api/v1/visits."""

import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.models.address import Address
from canvass_api.models.person import Person
from canvass_api.models.user import User
from canvass_api.services import leaderboard_service
from tests.conftest import FakeGeocoder, RecordingQueue

URL = "/api/v1/visits"
LAT, LNG = 40.7233, -73.9832


def _body(included: list[dict] | None = None, **attributes) -> dict:
    return {
        "data": {"type": "visits", "attributes": {"duration_sec": 200, **attributes}},
        "included": included or [],
    }


def _new_address() -> dict:
    return {
        "type": "addresses",
        "attributes": {
            "latitude": LAT,
            "longitude": LNG,
            "street_1": "5 Avenue A",
            "city": "New York",
            "state_code": "NY",
            "zip_code": "10009",
        },
    }


async def _seed_household(session: AsyncSession) -> tuple[Address, Person]:
    address = Address(id=uuid.uuid4(), latitude=LAT, longitude=LNG, street_1="5 Avenue A")
    person = Person(
        id=uuid.uuid4(),
        address_id=address.id,
        first_name="Ada",
        canvass_response="undecided",
        party_affiliation="independent_affiliation",
        email="ada@example.com",
        phone="555-0100",
        preferred_contact_method="email",
        previously_participated_in_caucus_or_primary=True,
    )
    session.add_all([address, person])
    await session.commit()
    return address, person


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient) -> None:
        resp = await client.post(URL, json=_body([_new_address()]))
        assert resp.status_code == 401
        assert resp.json()["code"] == "NOT_AUTHORIZED"
        assert resp.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_bad_token(self, client: AsyncClient) -> None:
        resp = await client.post(URL, json=_body([_new_address()]), headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401


class TestCreateVisit:
    @pytest.mark.asyncio
    async def test_new_address_and_person(
        self,
        client: AsyncClient,
        auth_headers: dict,
        volunteer: User,
        task_queue: RecordingQueue,
    ) -> None:
        body = _body(
            [
                _new_address(),
                {"type": "people", "attributes": {"first_name": "Grace", "canvass_response": "strongly_for"}},
            ]
        )

        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 201
        data = resp.json()
        assert data["user_id"] == str(volunteer.id)
        assert data["duration_sec"] == 200
        assert data["total_points"] == 5
        assert data["score"] == {
            "id": data["score"]["id"],
            "points_for_knock": 5,
            "points_for_updates": 0,
            "total": 5,
        }
        assert data["address"]["usps_verified_street_1"] == "5 AVENUE A"
        assert data["address"]["best_canvass_response"] == "strongly_for"
        assert len(data["people"]) == 1
        assert data["address"]["most_supportive_resident_id"] == data["people"][0]["id"]
        assert task_queue.score_ids == [uuid.UUID(data["score"]["id"])]

    @pytest.mark.asyncio
    async def test_partial_update_keeps_stored_fields(
        self, client: AsyncClient, auth_headers: dict, async_session: AsyncSession, volunteer: User
    ) -> None:
        _, ada = await _seed_household(async_session)
        body = _body(
            [
                {
                    "type": "people",
                    "id": str(ada.id),
                    "attributes": {
                        "canvass_response": "leaning_for",
                        "party_affiliation": "democrat_affiliation",
                        "email": None,
                        "phone": None,
                        "preferred_contact_method": None,
                        "previously_participated_in_caucus_or_primary": None,
                    },
                }
            ],
            submitted_latitude=LAT,
            submitted_longitude=LNG,
        )

        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 201
        (person,) = resp.json()["people"]
        assert person["email"] == "ada@example.com"
        assert person["phone"] == "555-0100"
        assert person["preferred_contact_method"] == "email"
        assert person["previously_participated_in_caucus_or_primary"] is True
        assert person["canvass_response"] == "leaning_for"
        assert person["party_affiliation"] == "democrat_affiliation"
        assert resp.json()["total_points"] == 8

    @pytest.mark.asyncio
    async def test_one_created_one_updated(
        self, client: AsyncClient, auth_headers: dict, async_session: AsyncSession, volunteer: User
    ) -> None:
        address, ada = await _seed_household(async_session)
        body = _body(
            [
                {"type": "addresses", "id": str(address.id)},
                {"type": "people", "id": str(ada.id), "attributes": {"canvass_response": "strongly_for"}},
                {"type": "people", "attributes": {"first_name": "Grace", "canvass_response": "leaning_against"}},
            ]
        )

        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 201
        data = resp.json()
        assert len(data["people"]) == 2
        assert data["address"]["most_supportive_resident_id"] == str(ada.id)
        assert data["address"]["best_canvass_response"] == "strongly_for"
        assert data["address"]["last_canvass_response"] == "leaning_against"

    @pytest.mark.asyncio
    async def test_operational_best_set_directly(
        self, client: AsyncClient, auth_headers: dict, async_session: AsyncSession, volunteer: User
    ) -> None:
        address, _ = await _seed_household(async_session)
        body = _body([{"type": "addresses", "id": str(address.id), "attributes": {"best_canvass_response": "not_home"}}])

        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 201
        assert resp.json()["address"]["best_canvass_response"] == "not_home"


class TestCreateVisitErrors:
    @pytest.mark.asyncio
    async def test_unknown_person(self, client: AsyncClient, auth_headers: dict, volunteer: User) -> None:
        missing = uuid.uuid4()
        body = _body([_new_address(), {"type": "people", "id": str(missing), "attributes": {}}])

        resp = await client.post(URL, json=body, headers=auth_headers)

        assert resp.status_code == 404
        assert resp.json()["code"] == "RECORD_NOT_FOUND"
        assert str(missing) in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_geocoder_down(
        self, client: AsyncClient, auth_headers: dict, volunteer: User, geocoder: FakeGeocoder
    ) -> None:
        geocoder.reverse_finds_nothing = True
        resp = await client.post(URL, json=_body([_new_address()]), headers=auth_headers)
        assert resp.status_code == 502
        assert resp.json()["code"] == "GEOCODE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_no_coordinates(self, client: AsyncClient, auth_headers: dict, volunteer: User) -> None:
        resp = await client.post(URL, json=_body(submitted_street_1="5 Avenue A"), headers=auth_headers)
        assert resp.status_code == 422
        fields = {error["field"] for error in resp.json()["errors"]}
        assert fields == {"submitted_latitude", "submitted_longitude"}

    @pytest.mark.asyncio
    async def test_two_addresses_rejected(self, client: AsyncClient, auth_headers: dict, volunteer: User) -> None:
        body = _body([_new_address(), _new_address()])
        resp = await client.post(URL, json=body, headers=auth_headers)
        assert resp.status_code == 422


class TestVisitAggregation:
    """A recorded visit flows into totals and boards once its job runs."""

    @pytest.mark.asyncio
    async def test_points_reach_every_board(
        self,
        client: AsyncClient,
        auth_headers: dict,
        async_session: AsyncSession,
        volunteer: User,
        task_queue: RecordingQueue,
    ) -> None:
        resp = await client.post(URL, json=_body([_new_address()]), headers=auth_headers)
        assert resp.status_code == 201

        (score_id,) = task_queue.score_ids
        await leaderboard_service.on_score_created(async_session, score_id)
        await async_session.refresh(volunteer)
        assert volunteer.total_points == 5

        for board in ("everyone", "state", "friends"):
            ranking = await client.get(f"/api/v1/rankings/{board}", headers=auth_headers)
            assert ranking.status_code == 200
            assert ranking.json()["items"] == [
                {"rank": 1, "user_id": str(volunteer.id), "username": "canvasser", "score": 5}
            ]
