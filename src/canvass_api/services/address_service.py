"""Address service — resolve the canonical address for a visit and merge address updates.

Resolution is a strict fallback chain (first match wins):

1. Reverse geocode the submitted coordinates to corrected coordinates.
2. Existing address at exactly the corrected (latitude, longitude).
3. Existing address with exactly the submitted street_1.
4. A new, unsaved address keyed by the submitted street.

There is no fuzzy matching; typo variants of a street are distinct addresses.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.errors import GeocodeUnavailableError, RecordNotFoundError
from canvass_api.lib.canvass import (
    DIRECTLY_SETTABLE_BEST_RESPONSES,
    CanvassResponse,
    apply_changes,
    merge_attributes,
)
from canvass_api.lib.geocoder import (
    CanvassGeocoder,
    GeocodingProviderError,
    ReverseGeocodeResult,
    one_line_address,
)
from canvass_api.models.address import Address

# Plain attributes a visit payload may merge into an address
ADDRESS_MERGE_FIELDS: tuple[str, ...] = (
    "latitude",
    "longitude",
    "street_1",
    "street_2",
    "city",
    "state_code",
    "zip_code",
)


@dataclass
class ResolvedAddress:
    """Outcome of address resolution.

    Attributes:
        address: The matched or newly constructed address.
        corrected: Reverse-geocoded coordinates for the visit.
        is_new: True when the address was constructed rather than found.
    """

    address: Address
    corrected: ReverseGeocodeResult
    is_new: bool


async def reverse_geocode(geocoder: CanvassGeocoder, latitude: float, longitude: float) -> ReverseGeocodeResult:
    """Reverse geocode submitted coordinates, failing hard when nothing comes back.

    Raises:
        GeocodeUnavailableError: If every provider failed or none found a place.
    """
    try:
        result = await geocoder.reverse_geocode(latitude, longitude)
    except GeocodingProviderError as e:
        logger.warning(f"Reverse geocoding unavailable: {e}")
        raise GeocodeUnavailableError(
            "Could not reverse geocode visit coordinates", details={"provider": e.provider_name}
        ) from e
    if result is None:
        logger.info("Reverse geocoding returned no place for visit coordinates")
        raise GeocodeUnavailableError("No place found for visit coordinates")
    return result


async def get_address(session: AsyncSession, address_id: uuid.UUID) -> Address:
    """Load an address by id.

    Raises:
        RecordNotFoundError: If no address has that id.
    """
    address = await session.get(Address, address_id)
    if address is None:
        raise RecordNotFoundError("address", address_id)
    return address


async def find_by_coordinates(session: AsyncSession, latitude: float, longitude: float) -> Address | None:
    """Exact-match lookup on (latitude, longitude)."""
    result = await session.execute(
        select(Address)
        .where(Address.latitude == latitude, Address.longitude == longitude)
        .order_by(Address.created_at)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def find_by_street(session: AsyncSession, street_1: str) -> Address | None:
    """Exact-match lookup on street_1."""
    result = await session.execute(
        select(Address).where(Address.street_1 == street_1).order_by(Address.created_at).limit(1)
    )
    return result.scalar_one_or_none()


def new_address(street_1: str | None) -> Address:
    """Construct an unsaved address with its defaults populated client-side."""
    return Address(
        id=uuid.uuid4(),
        street_1=street_1,
        best_canvass_response=CanvassResponse.NOT_YET_VISITED.value,
        last_canvass_response=CanvassResponse.NOT_YET_VISITED.value,
    )


async def resolve(
    session: AsyncSession,
    corrected: ReverseGeocodeResult,
    submitted_street: str | None,
) -> ResolvedAddress:
    """Run the lookup steps of the resolution chain for already-corrected coordinates.

    Args:
        session: Async database session.
        corrected: Result of reverse geocoding the submitted coordinates.
        submitted_street: Street line reported with the visit, if any.

    Returns:
        ResolvedAddress with the first match, or a new unsaved address.
    """
    address = await find_by_coordinates(session, corrected.latitude, corrected.longitude)
    if address is not None:
        logger.debug(f"Resolved address {address.id} by corrected coordinates")
        return ResolvedAddress(address=address, corrected=corrected, is_new=False)

    if submitted_street:
        address = await find_by_street(session, submitted_street)
        if address is not None:
            logger.debug(f"Resolved address {address.id} by submitted street")
            return ResolvedAddress(address=address, corrected=corrected, is_new=False)

    logger.debug("No existing address matched; constructing a new one")
    return ResolvedAddress(address=new_address(submitted_street), corrected=corrected, is_new=True)


def apply_address_attributes(
    address: Address,
    attributes: Mapping[str, Any],
    corrected: ReverseGeocodeResult,
    *,
    is_new: bool,
) -> bool:
    """Merge payload attributes into an address and apply direct status writes.

    Null or absent attributes keep their stored value. A new address without
    payload coordinates takes the corrected coordinates, so later visits to
    the same place resolve to it. ``best_canvass_response`` accepts only the
    operational statuses not_home, not_yet_visited and asked_to_leave; ranked
    values must be derived from residents and are ignored here, as is
    ``unknown``. ``last_canvass_response`` accepts any value.

    Returns:
        True when street_1 changed, so the postal fields need re-verifying.
    """
    current = {name: getattr(address, name) for name in ADDRESS_MERGE_FIELDS}
    merge = merge_attributes(current, attributes, ADDRESS_MERGE_FIELDS)
    apply_changes(address, merge.changes)

    if is_new and address.latitude is None and address.longitude is None:
        address.latitude = corrected.latitude
        address.longitude = corrected.longitude

    best = attributes.get("best_canvass_response")
    if best is not None:
        best = CanvassResponse(best)
        if best in DIRECTLY_SETTABLE_BEST_RESPONSES:
            address.best_canvass_response = best.value
        else:
            logger.info(f"Ignoring direct best_canvass_response={best.value!r} on address {address.id}")

    last = attributes.get("last_canvass_response")
    if last is not None:
        address.last_canvass_response = CanvassResponse(last).value

    return "street_1" in merge.changes


async def verify_address(address: Address, geocoder: CanvassGeocoder) -> bool:
    """Populate the postal-verified fields of an address.

    A verification miss or provider failure leaves the verified fields as
    they were; neither is fatal to the visit.

    Returns:
        True when verified fields were written.
    """
    if not address.street_1:
        return False

    query = one_line_address(
        street_1=address.street_1,
        street_2=address.street_2,
        city=address.city,
        state=address.state_code,
        zip_code=address.zip_code,
    )
    try:
        verified = await geocoder.forward_verify(query)
    except GeocodingProviderError as e:
        logger.warning(f"Address verification failed for address {address.id}: {e.message}")
        return False
    if verified is None:
        logger.info(f"Address verification found no match for address {address.id}")
        return False

    address.usps_verified_street_1 = verified.street_1
    address.usps_verified_street_2 = verified.street_2
    address.usps_verified_city = verified.city
    address.usps_verified_state = verified.state
    address.usps_verified_zip = verified.zip
    return True
