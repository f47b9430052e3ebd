"""Canvassing domain library — vocabularies, merging, ranking and scoring.

Pure functions with no database access; the services layer feeds them ORM
rows and persists the outcome.
"""

from canvass_api.lib.canvass.leaderboard import RankedEntry, assign_ranks
from canvass_api.lib.canvass.merge import MergeResult, apply_changes, merge_attributes
from canvass_api.lib.canvass.ranking import ResidentResponse, most_supportive
from canvass_api.lib.canvass.responses import (
    DIRECTLY_SETTABLE_BEST_RESPONSES,
    OPERATIONAL_RESPONSES,
    RESPONSE_PRIORITY,
    CanvassResponse,
    PartyAffiliation,
    PreferredContactMethod,
    UpdateType,
    is_ranked,
    priority_of,
)
from canvass_api.lib.canvass.scoring import PointTable, ScoreBreakdown, points_for_update, score_visit

__all__ = [
    "DIRECTLY_SETTABLE_BEST_RESPONSES",
    "OPERATIONAL_RESPONSES",
    "RESPONSE_PRIORITY",
    "CanvassResponse",
    "MergeResult",
    "PartyAffiliation",
    "PointTable",
    "PreferredContactMethod",
    "RankedEntry",
    "ResidentResponse",
    "ScoreBreakdown",
    "UpdateType",
    "apply_changes",
    "assign_ranks",
    "is_ranked",
    "merge_attributes",
    "most_supportive",
    "points_for_update",
    "priority_of",
    "score_visit",
]
