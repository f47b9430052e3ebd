"""Unit tests for most-supportive resident selection."""

import uuid
from datetime import UTC, datetime, timedelta

from canvass_api.lib.canvass import ResidentResponse, most_supportive

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _resident(response: str, canvassed_at: datetime | None = NOW) -> ResidentResponse:
    return ResidentResponse(resident_id=uuid.uuid4(), response=response, canvassed_at=canvassed_at)


class TestMostSupportive:
    """Tests for most_supportive."""

    def test_highest_ranked_wins(self) -> None:
        strong = _resident("strongly_for")
        undecided = _resident("undecided")
        assert most_supportive([undecided, strong]) == strong

    def test_operational_responses_never_win(self) -> None:
        against = _resident("strongly_against")
        candidates = [_resident("unknown"), _resident("not_home"), _resident("asked_to_leave"), against]
        assert most_supportive(candidates) == against

    def test_no_ranked_resident_returns_none(self) -> None:
        assert most_supportive([_resident("unknown"), _resident("not_yet_visited")]) is None
        assert most_supportive([]) is None

    def test_tie_goes_to_most_recently_canvassed(self) -> None:
        recent = _resident("leaning_for", NOW)
        older = _resident("leaning_for", NOW - timedelta(days=2))
        assert most_supportive([recent, older]) == recent
        assert most_supportive([older, recent]) == recent

    def test_never_canvassed_loses_tie(self) -> None:
        never = _resident("undecided", None)
        dated = _resident("undecided", NOW)
        assert most_supportive([dated, never]) == dated

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        naive_recent = _resident("leaning_for", datetime(2026, 3, 2, 12, 0))
        aware_older = _resident("leaning_for", NOW)
        assert most_supportive([naive_recent, aware_older]) == naive_recent
