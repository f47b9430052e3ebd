"""Competition ranking of volunteer point totals."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class RankedEntry:
    """One leaderboard line."""

    user_id: uuid.UUID
    username: str
    score: int
    rank: int


def assign_ranks(totals: Iterable[tuple[uuid.UUID, str, int]]) -> list[RankedEntry]:
    """Order ``(user_id, username, points)`` rows and assign competition ranks.

    Highest points first; equal points share a rank and the next distinct
    score skips ahead ("1224" ranking). Within a tie users are ordered by
    username so repeated recomputes produce identical rows.
    """
    ordered = sorted(totals, key=lambda row: (-row[2], row[1], str(row[0])))
    entries: list[RankedEntry] = []
    previous_score: int | None = None
    rank = 0
    for position, (user_id, username, score) in enumerate(ordered, start=1):
        if score != previous_score:
            rank = position
            previous_score = score
        entries.append(RankedEntry(user_id=user_id, username=username, score=score, rank=rank))
    return entries
