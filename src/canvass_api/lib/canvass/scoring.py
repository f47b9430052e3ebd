"""Point table and visit scoring."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from canvass_api.lib.canvass.responses import UpdateType

if TYPE_CHECKING:
    from canvass_api.core.config import Settings


class ScorableUpdate(Protocol):
    """The audit fields scoring looks at (satisfied by the PersonUpdate model)."""

    update_type: str
    old_canvass_response: str | None
    new_canvass_response: str
    old_party_affiliation: str | None
    new_party_affiliation: str


@dataclass(frozen=True)
class PointTable:
    """Configured point weights."""

    knock: int = 5
    response_change: int = 2
    affiliation_change: int = 1
    new_person: int = 0

    @classmethod
    def from_settings(cls, settings: "Settings") -> "PointTable":
        return cls(
            knock=settings.score_points_for_knock,
            response_change=settings.score_points_per_response_change,
            affiliation_change=settings.score_points_per_affiliation_change,
            new_person=settings.score_points_per_new_person,
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    points_for_knock: int
    points_for_updates: int

    @property
    def total(self) -> int:
        return self.points_for_knock + self.points_for_updates


def points_for_update(update: ScorableUpdate, table: PointTable) -> int:
    """Points earned by a single audit record.

    A newly created person has no prior values to diff against and earns the
    flat ``new_person`` weight. A modified person earns weight per audited
    field whose value actually moved.
    """
    if update.update_type == UpdateType.CREATED:
        return table.new_person

    points = 0
    if update.old_canvass_response != update.new_canvass_response:
        points += table.response_change
    if update.old_party_affiliation != update.new_party_affiliation:
        points += table.affiliation_change
    return points


def score_visit(updates: Iterable[ScorableUpdate], table: PointTable) -> ScoreBreakdown:
    """Score a completed visit from the audit records it produced."""
    return ScoreBreakdown(
        points_for_knock=table.knock,
        points_for_updates=sum(points_for_update(update, table) for update in updates),
    )
