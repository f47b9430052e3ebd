"""Rank service — derive an address's aggregate canvass status from its residents."""

from collections.abc import Sequence

from loguru import logger

from canvass_api.lib.canvass import ResidentResponse, is_ranked, most_supportive
from canvass_api.models.address import Address
from canvass_api.models.person import Person


def recompute(address: Address, residents: Sequence[Person], touched: Sequence[Person] = ()) -> Address:
    """Recompute ``best_canvass_response``, ``most_supportive_resident_id`` and ``last_canvass_response``.

    Only ranked responses compete for best; operational statuses are never
    derived from residents. Ties go to the most recently canvassed resident.
    With no ranked resident the stored best is kept and a stale
    ``most_supportive_resident_id`` is cleared.

    Args:
        address: Address to mutate.
        residents: Every person currently at the address.
        touched: People whose canvass_response this visit supplied, in
            payload order; the last one sets ``last_canvass_response``.

    Returns:
        The same address, mutated.
    """
    winner = most_supportive(
        ResidentResponse(resident_id=person.id, response=person.canvass_response, canvassed_at=person.canvassed_at)
        for person in residents
    )

    if winner is not None:
        address.best_canvass_response = winner.response
        address.most_supportive_resident_id = winner.resident_id
    elif address.most_supportive_resident_id is not None:
        still_ranked = any(
            person.id == address.most_supportive_resident_id and is_ranked(person.canvass_response)
            for person in residents
        )
        if not still_ranked:
            logger.debug(f"Clearing most supportive resident on address {address.id}")
            address.most_supportive_resident_id = None

    if touched:
        address.last_canvass_response = touched[-1].canvass_response

    return address
