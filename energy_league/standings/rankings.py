from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

from energy_league.activities.errors import NotFound
from energy_league.activities.interface import ActivityStore, LeagueDirectory
from energy_league.activities.records import Activity, Participant, Team
from energy_league.activities.scoring import (
    COUNTED_STATUSES,
    compute_final_points,
    team_points,
)
from energy_league.utils.tracing import trace_span

S = TypeVar('S')
T = TypeVar('T')


@dataclass(frozen=True)
class TeamSnapshot:
    '''Everything the standings need about one team, read in one pass.'''

    team: Team
    activities: tuple[Activity, ...]
    total_points: int
    participant_count: int


@dataclass(frozen=True)
class TeamRanking:
    team_id: int
    name: str
    total_points: int
    participant_count: int
    rank: int


@dataclass(frozen=True)
class ParticipantSnapshot:
    participant: Participant
    total_points: int


@dataclass(frozen=True)
class ParticipantRanking:
    participant_id: int
    name: str
    total_points: int
    rank: int


def snapshot_team(
    store: ActivityStore, directory: LeagueDirectory, team: Team
) -> TeamSnapshot:
    activities = store.list_team_activities(team.id)
    adjustments = store.list_adjustments([a.id for a in activities])
    return TeamSnapshot(
        team=team,
        activities=tuple(activities),
        total_points=team_points(activities, adjustments),
        participant_count=directory.count_team_participants(team.id),
    )


def snapshot_all(store: ActivityStore, directory: LeagueDirectory) -> list[TeamSnapshot]:
    teams = directory.list_teams()
    with trace_span('standings.snapshot', {'teams': len(teams)}):
        return [snapshot_team(store, directory, team) for team in teams]


def assign_ranks(
    snapshots: Sequence[S],
    build: Callable[[S, int], T],
) -> list[T]:
    '''
    Order by total points, highest first, and number the positions from 1.
    The sort is stable, so equal totals keep their incoming order.
    '''
    ordered = sorted(snapshots, key=lambda s: s.total_points, reverse=True)
    return [build(snap, position) for position, snap in enumerate(ordered, start=1)]


def team_rankings(store: ActivityStore, directory: LeagueDirectory) -> list[TeamRanking]:
    return assign_ranks(
        snapshot_all(store, directory),
        lambda snap, rank: TeamRanking(
            team_id=snap.team.id,
            name=snap.team.name,
            total_points=snap.total_points,
            participant_count=snap.participant_count,
            rank=rank,
        ),
    )


def participant_totals(store: ActivityStore, event_id: int) -> dict[int, int]:
    '''Final points per activity author over the event's counted activities.'''
    activities = store.list_activities(COUNTED_STATUSES, event_id=event_id)
    adjustments = store.list_adjustments([a.id for a in activities])
    totals: dict[int, int] = {}
    for activity in activities:
        points = compute_final_points(activity, adjustments.get(activity.id, []))
        totals[activity.participant_id] = totals.get(activity.participant_id, 0) + points
    return totals


def participant_rankings(
    store: ActivityStore, directory: LeagueDirectory, event_id: int
) -> list[ParticipantRanking]:
    '''
    Rank the participants of one event by the points their own activities
    earned. Participants without points are left out, and equal totals keep
    ascending participant id.
    '''
    if directory.get_event(event_id) is None:
        raise NotFound('Event', event_id)

    with trace_span('standings.participants', {'event_id': event_id}):
        totals = participant_totals(store, event_id)
        snapshots = []
        for participant_id in sorted(totals):
            participant = directory.get_participant(participant_id)
            if participant is None or totals[participant_id] <= 0:
                continue
            snapshots.append(ParticipantSnapshot(participant, totals[participant_id]))

    return assign_ranks(
        snapshots,
        lambda snap, rank: ParticipantRanking(
            participant_id=snap.participant.id,
            name=snap.participant.name,
            total_points=snap.total_points,
            rank=rank,
        ),
    )
