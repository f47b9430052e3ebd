"""Visit service — record a visit end to end.

Steps, in order:

1. Draft a Visit owned by the acting user.
2. Resolve the Address (reverse geocode, then the lookup chain).
3. Reconcile each included person, then recompute the address ranking.
4. Persist the Visit, Address, People and PersonUpdates.
5. Score the visit and persist the Score.
6. Enqueue leaderboard aggregation.

Steps 2-5 share one transaction. Concurrent visits to the same address
serialize on the address version counter: a stale write rolls back and the
steps are re-run. Reverse geocoding happens once, before any attempt.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from canvass_api.core.background import TaskQueue
from canvass_api.core.config import Settings, get_settings
from canvass_api.core.errors import ConcurrentAddressConflictError, ValidationFailedError
from canvass_api.lib.geocoder import CanvassGeocoder, ReverseGeocodeResult
from canvass_api.models.address import Address
from canvass_api.models.person import Person
from canvass_api.models.person_update import PersonUpdate
from canvass_api.models.score import Score
from canvass_api.models.user import User
from canvass_api.models.visit import Visit
from canvass_api.schemas.visit import VisitCreateRequest
from canvass_api.services import address_service, person_service, rank_service, score_service


@dataclass
class IngestedVisit:
    """Everything the caller needs once a visit is recorded."""

    visit: Visit
    address: Address
    score: Score
    people: list[Person] = field(default_factory=list)
    person_updates: list[PersonUpdate] = field(default_factory=list)
    job_id: str | None = None


def _first_present(*values: Any) -> Any:
    return next((value for value in values if value is not None), None)


async def _visit_coordinates(
    session: AsyncSession,
    request: VisitCreateRequest,
    address_attributes: dict[str, Any],
) -> tuple[float, float]:
    """Pick the coordinates to reverse geocode.

    Visit attributes win, then the included address attributes, then the
    stored coordinates of a referenced address.

    Raises:
        RecordNotFoundError: If a referenced address does not exist.
        ValidationFailedError: If no coordinates are available at all.
    """
    attrs = request.data.attributes
    latitude = _first_present(attrs.submitted_latitude, address_attributes.get("latitude"))
    longitude = _first_present(attrs.submitted_longitude, address_attributes.get("longitude"))

    included = request.address
    if (latitude is None or longitude is None) and included is not None and included.id is not None:
        stored = await address_service.get_address(session, included.id)
        latitude = _first_present(latitude, stored.latitude)
        longitude = _first_present(longitude, stored.longitude)

    if latitude is None or longitude is None:
        raise ValidationFailedError(
            {
                "submitted_latitude": "visit coordinates are required",
                "submitted_longitude": "visit coordinates are required",
            }
        )
    return latitude, longitude


async def _record(
    session: AsyncSession,
    request: VisitCreateRequest,
    user_id: uuid.UUID,
    corrected: ReverseGeocodeResult,
    submitted: tuple[float, float, str | None],
    geocoder: CanvassGeocoder,
    settings: Settings,
) -> IngestedVisit:
    """One attempt at steps 1-5; the caller owns commit and rollback."""
    submitted_latitude, submitted_longitude, submitted_street = submitted
    visit = Visit(
        id=uuid.uuid4(),
        user_id=user_id,
        duration_sec=request.data.attributes.duration_sec,
        submitted_latitude=submitted_latitude,
        submitted_longitude=submitted_longitude,
        submitted_street_1=submitted_street,
        corrected_latitude=corrected.latitude,
        corrected_longitude=corrected.longitude,
    )

    included_address = request.address
    address_attributes = included_address.attributes.model_dump(mode="json") if included_address else {}
    if included_address is not None and included_address.id is not None:
        address = await address_service.get_address(session, included_address.id)
        is_new = False
    else:
        resolved = await address_service.resolve(session, corrected, submitted_street)
        address, is_new = resolved.address, resolved.is_new

    street_changed = address_service.apply_address_attributes(address, address_attributes, corrected, is_new=is_new)
    if is_new or street_changed:
        await address_service.verify_address(address, geocoder)
    session.add(address)
    # No relationship() links between these rows, so parents are flushed before children
    await session.flush()

    visit.address_id = address.id
    session.add(visit)
    await session.flush()

    touched: list[Person] = []
    updates: list[PersonUpdate] = []
    vacated: list[uuid.UUID] = []
    for included in request.people:
        existing = await person_service.get_person(session, included.id) if included.id is not None else None
        if existing is not None and existing.address_id not in (None, address.id, *vacated):
            vacated.append(existing.address_id)
        payload = included.attributes.model_dump(mode="json")
        person, update = person_service.reconcile(existing, payload, visit)
        session.add(person)
        if update is not None:
            updates.append(update)
        if payload.get("canvass_response") is not None:
            touched.append(person)

    await session.flush()
    session.add_all(updates)

    if request.people:
        residents = await person_service.list_residents(session, address.id)
        rank_service.recompute(address, residents, touched)

    for previous_id in vacated:
        previous = await address_service.get_address(session, previous_id)
        rank_service.recompute(previous, await person_service.list_residents(session, previous_id))
        session.add(previous)
        logger.debug(f"Recomputed address {previous_id} after residents moved to {address.id}")

    score = await score_service.create_score(session, visit, updates, settings)
    await session.flush()

    people = await person_service.list_residents(session, address.id)
    return IngestedVisit(visit=visit, address=address, score=score, people=people, person_updates=updates)


async def ingest(
    session: AsyncSession,
    request: VisitCreateRequest,
    acting_user: User,
    *,
    geocoder: CanvassGeocoder,
    task_queue: TaskQueue,
    settings: Settings | None = None,
) -> IngestedVisit:
    """Record a visit for ``acting_user``.

    Args:
        session: Async database session; committed on success.
        request: Visit payload with side-loaded address and people.
        acting_user: The volunteer who made the visit.
        geocoder: Tiered reverse geocoder and address verifier.
        task_queue: Receives the new score for leaderboard aggregation.
        settings: Point table and retry limit; defaults to application settings.

    Returns:
        IngestedVisit with the committed visit, address, score and the
        address's people. Aggregation may still be pending.

    Raises:
        RecordNotFoundError: If an included address or person id does not exist.
        GeocodeUnavailableError: If the coordinates cannot be reverse geocoded.
        ValidationFailedError: If no coordinates were supplied or an audit record is invalid.
        ConcurrentAddressConflictError: If every attempt lost a race on the address.
    """
    settings = settings or get_settings()
    # Rollback expires loaded instances, so keep the id rather than the user
    user_id = acting_user.id

    included_address = request.address
    address_attributes = included_address.attributes.model_dump(mode="json") if included_address else {}
    try:
        latitude, longitude = await _visit_coordinates(session, request, address_attributes)
    except Exception:
        await session.rollback()
        raise
    submitted_street = _first_present(request.data.attributes.submitted_street_1, address_attributes.get("street_1"))

    corrected = await address_service.reverse_geocode(geocoder, latitude, longitude)

    attempts = settings.address_conflict_max_retries
    ingested: IngestedVisit | None = None
    for attempt in range(1, attempts + 1):
        try:
            ingested = await _record(
                session,
                request,
                user_id,
                corrected,
                (latitude, longitude, submitted_street),
                geocoder,
                settings,
            )
            await session.commit()
        except StaleDataError:
            await session.rollback()
            logger.warning(f"Address changed concurrently during visit ingestion (attempt {attempt}/{attempts})")
            ingested = None
            continue
        except Exception:
            await session.rollback()
            raise
        break

    if ingested is None:
        raise ConcurrentAddressConflictError(attempts)

    logger.info(
        f"Recorded visit {ingested.visit.id} at address {ingested.address.id}: "
        f"{ingested.visit.total_points} points, {len(ingested.person_updates)} person updates"
    )

    try:
        ingested.job_id = task_queue.enqueue(ingested.score.id)
    except Exception:
        # The visit is committed; `canvass-api rankings rebuild` recovers the missed aggregation
        logger.exception(f"Failed to enqueue aggregation for score {ingested.score.id}")
    return ingested
