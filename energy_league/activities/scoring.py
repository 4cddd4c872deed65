from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Sequence

from energy_league.activities.errors import NotFound
from energy_league.activities.interface import ActivityStore
from energy_league.activities.records import Activity, ActivityAdjustment, ActivityStatus
from energy_league.utils.tracing import traced

COUNTED_STATUSES = frozenset({ActivityStatus.APPROVED, ActivityStatus.AUTO_APPROVED})


@dataclass(frozen=True)
class ScoredActivity:
    activity: Activity
    adjustments: tuple[ActivityAdjustment, ...]
    final_points: int

    @property
    def adjustment_total(self) -> int:
        return sum(a.points_adjustment for a in self.adjustments)


def compute_final_points(
    activity: Activity, adjustments: Iterable[ActivityAdjustment]
) -> int:
    '''Base energy plus every bonus and penalty, floored at zero.'''
    total = reduce(
        lambda acc, adj: acc + adj.points_adjustment, adjustments, activity.energy
    )
    return max(total, 0)


def counts_toward_totals(activity: Activity) -> bool:
    return activity.status in COUNTED_STATUSES


def team_points(
    activities: Sequence[Activity],
    adjustments_by_activity: dict[int, list[ActivityAdjustment]],
) -> int:
    '''Sum of final points over the activities that count for the team.'''
    return sum(
        compute_final_points(a, adjustments_by_activity.get(a.id, []))
        for a in activities
        if counts_toward_totals(a)
    )


@traced('scoring.score_activity')
def score_activity(store: ActivityStore, activity_id: int) -> ScoredActivity:
    activity = store.get_activity(activity_id)
    if activity is None:
        raise NotFound('Activity', activity_id)
    return score_activities(store, [activity])[0]


def score_activities(
    store: ActivityStore, activities: Sequence[Activity]
) -> list[ScoredActivity]:
    '''Score a batch of activities with a single adjustments lookup.'''
    adjustments = store.list_adjustments([a.id for a in activities])
    scored = []
    for activity in activities:
        attached = tuple(adjustments.get(activity.id, []))
        scored.append(
            ScoredActivity(
                activity=activity,
                adjustments=attached,
                final_points=compute_final_points(activity, attached),
            )
        )
    return scored
