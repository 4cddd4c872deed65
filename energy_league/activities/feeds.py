'''
Scored activity listings. Only activities that count toward totals appear,
each with its adjustments and final points, newest first.
'''

from __future__ import annotations

from energy_league.activities.errors import NotFound
from energy_league.activities.interface import ActivityStore, LeagueDirectory
from energy_league.activities.scoring import (
    COUNTED_STATUSES,
    ScoredActivity,
    score_activities,
)
from energy_league.utils.constants import DEFAULT_PAGE_SIZE
from energy_league.utils.helper import check_paging
from energy_league.utils.tracing import trace_span


def team_activities(
    store: ActivityStore, directory: LeagueDirectory, team_id: int
) -> list[ScoredActivity]:
    if directory.get_team(team_id) is None:
        raise NotFound('Team', team_id)
    with trace_span('feeds.team', {'team_id': team_id}):
        return score_activities(
            store, store.list_activities(COUNTED_STATUSES, team_id=team_id)
        )


def event_activities(
    store: ActivityStore,
    directory: LeagueDirectory,
    event_id: int,
    page: int = 0,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[ScoredActivity]:
    check_paging(page, page_size)
    if directory.get_event(event_id) is None:
        raise NotFound('Event', event_id)
    with trace_span('feeds.event', {'event_id': event_id, 'page': page}):
        activities = store.list_activities(
            COUNTED_STATUSES,
            event_id=event_id,
            limit=page_size,
            offset=page * page_size,
        )
        return score_activities(store, activities)
