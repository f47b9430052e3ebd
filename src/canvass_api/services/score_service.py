"""Score service — compute and attach the Score for a visit."""

import uuid
from collections.abc import Sequence

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from canvass_api.core.config import Settings, get_settings
from canvass_api.lib.canvass import PointTable, score_visit
from canvass_api.models.person_update import PersonUpdate
from canvass_api.models.score import Score
from canvass_api.models.visit import Visit


def score(visit: Visit, person_updates: Sequence[PersonUpdate], settings: Settings | None = None) -> Score:
    """Build the Score for ``visit`` and set ``visit.total_points``.

    Args:
        visit: The visit being scored; its ``total_points`` is written here.
        person_updates: Audit records produced by this visit.
        settings: Supplies the point table; defaults to application settings.

    Returns:
        The unsaved Score.
    """
    table = PointTable.from_settings(settings or get_settings())
    breakdown = score_visit(person_updates, table)
    visit.total_points = breakdown.total
    logger.debug(
        f"Visit {visit.id} scored {breakdown.total} "
        f"(knock={breakdown.points_for_knock}, updates={breakdown.points_for_updates})"
    )
    return Score(
        id=uuid.uuid4(),
        visit_id=visit.id,
        points_for_knock=breakdown.points_for_knock,
        points_for_updates=breakdown.points_for_updates,
    )


async def create_score(
    session: AsyncSession,
    visit: Visit,
    person_updates: Sequence[PersonUpdate],
    settings: Settings | None = None,
) -> Score:
    """Score ``visit`` and add the Score to the session (no commit)."""
    result = score(visit, person_updates, settings)
    session.add(result)
    return result
