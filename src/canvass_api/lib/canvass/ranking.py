"""Selection of an address's most supportive resident."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from canvass_api.lib.canvass.responses import priority_of

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class ResidentResponse:
    """A resident's current canvass response and when a visit last touched them."""

    resident_id: uuid.UUID
    response: str
    canvassed_at: datetime | None = None


def _as_utc(moment: datetime | None) -> datetime:
    # Timestamps read back from SQLite are naive but always stored as UTC
    if moment is None:
        return _EPOCH
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def most_supportive(candidates: Iterable[ResidentResponse]) -> ResidentResponse | None:
    """Pick the resident holding the highest-ranked response.

    Residents whose response is operational (unknown, not_home, ...) are not
    considered. Ties on priority go to the most recently canvassed resident;
    a remaining tie keeps the later candidate in iteration order.

    Returns:
        The winning resident, or None when no candidate holds a ranked response.
    """
    best: ResidentResponse | None = None
    best_key: tuple[int, datetime] | None = None
    for candidate in candidates:
        priority = priority_of(candidate.response)
        if priority is None:
            continue
        key = (-priority, _as_utc(candidate.canvassed_at))
        if best_key is None or key >= best_key:
            best, best_key = candidate, key
    return best
