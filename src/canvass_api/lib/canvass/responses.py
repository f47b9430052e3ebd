"""Closed vocabularies for canvassing data and the supportiveness priority table."""

import enum


class CanvassResponse(enum.StrEnum):
    """A resident's stated support level, or the operational outcome of a knock."""

    STRONGLY_FOR = "strongly_for"
    LEANING_FOR = "leaning_for"
    UNDECIDED = "undecided"
    LEANING_AGAINST = "leaning_against"
    STRONGLY_AGAINST = "strongly_against"
    UNKNOWN = "unknown"
    NOT_HOME = "not_home"
    NOT_YET_VISITED = "not_yet_visited"
    ASKED_TO_LEAVE = "asked_to_leave"


class PartyAffiliation(enum.StrEnum):
    """Self-reported party affiliation of a resident."""

    UNKNOWN = "unknown_affiliation"
    UNDECLARED = "undeclared_affiliation"
    DEMOCRAT = "democrat_affiliation"
    REPUBLICAN = "republican_affiliation"
    INDEPENDENT = "independent_affiliation"
    OTHER = "other_affiliation"


class PreferredContactMethod(enum.StrEnum):
    """How a resident prefers to be contacted."""

    EMAIL = "email"
    PHONE = "phone"


class UpdateType(enum.StrEnum):
    """Whether a visit created the person or modified an existing one."""

    CREATED = "created"
    MODIFIED = "modified"


# Supportiveness ranking (lower = more supportive). Operational statuses are absent on purpose.
RESPONSE_PRIORITY: dict[CanvassResponse, int] = {
    CanvassResponse.STRONGLY_FOR: 0,
    CanvassResponse.LEANING_FOR: 1,
    CanvassResponse.UNDECIDED: 2,
    CanvassResponse.LEANING_AGAINST: 3,
    CanvassResponse.STRONGLY_AGAINST: 4,
}

OPERATIONAL_RESPONSES: frozenset[CanvassResponse] = frozenset(
    {
        CanvassResponse.UNKNOWN,
        CanvassResponse.NOT_HOME,
        CanvassResponse.NOT_YET_VISITED,
        CanvassResponse.ASKED_TO_LEAVE,
    }
)

# The only values a visit may write straight into ``address.best_canvass_response``
DIRECTLY_SETTABLE_BEST_RESPONSES: frozenset[CanvassResponse] = OPERATIONAL_RESPONSES - {CanvassResponse.UNKNOWN}


def priority_of(response: str | None) -> int | None:
    """Return the supportiveness priority of ``response``, or None if it is not ranked."""
    if response is None:
        return None
    try:
        return RESPONSE_PRIORITY.get(CanvassResponse(response))
    except ValueError:
        return None


def is_ranked(response: str | None) -> bool:
    """Whether ``response`` sits on the supportiveness scale."""
    return priority_of(response) is not None
