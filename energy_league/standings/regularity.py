from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import AbstractSet, Iterable, Optional

from energy_league.activities.errors import NotFound, ValidationError
from energy_league.activities.interface import ActivityStore, LeagueDirectory
from energy_league.activities.records import Activity
from energy_league.standings.rankings import TeamSnapshot, assign_ranks, snapshot_all
from energy_league.utils.constants import (
    CALENDAR_WINDOW_DAYS,
    DEFAULT_LEAGUE_TIMEZONE,
    HEATMAP_WINDOW_DAYS,
    STREAK_GRACE_DAYS,
)
from energy_league.utils.helper import local_date, today_in, trailing_days


@dataclass(frozen=True)
class TeamRegularity:
    team_id: int
    name: str
    total_points: int
    participant_count: int
    rank: int
    current_streak: int
    active_days: int
    last_14_days: tuple[bool, ...]


@dataclass(frozen=True)
class HeatmapDay:
    day: date
    count: int


def activity_dates(activities: Iterable[Activity], tz_name: str) -> set[date]:
    '''Distinct league-local days with at least one activity, any status.'''
    return {local_date(a.created_at, tz_name) for a in activities}


def current_streak(
    dates: AbstractSet[date], today: date, grace_days: int = STREAK_GRACE_DAYS
) -> int:
    '''
    Consecutive active days counted backwards. Counting starts today, or on
    the most recent active day within the grace window when today is empty.
    '''
    for offset in range(grace_days + 1):
        start = today - timedelta(days=offset)
        if start in dates:
            break
    else:
        return 0

    streak = 0
    cur = start
    while cur in dates:
        streak += 1
        cur = cur - timedelta(days=1)
    return streak


def calendar(
    dates: AbstractSet[date], today: date, days: int = CALENDAR_WINDOW_DAYS
) -> tuple[bool, ...]:
    '''One flag per day, oldest first, the last entry being today.'''
    return tuple(d in dates for d in trailing_days(today, days))


def _regularity(snap: TeamSnapshot, rank: int, today: date, tz_name: str):
    dates = activity_dates(snap.activities, tz_name)
    return TeamRegularity(
        team_id=snap.team.id,
        name=snap.team.name,
        total_points=snap.total_points,
        participant_count=snap.participant_count,
        rank=rank,
        current_streak=current_streak(dates, today),
        active_days=len(dates),
        last_14_days=calendar(dates, today),
    )


def team_regularity(
    store: ActivityStore,
    directory: LeagueDirectory,
    tz_name: str = DEFAULT_LEAGUE_TIMEZONE,
    today: Optional[date] = None,
) -> list[TeamRegularity]:
    today = today or today_in(tz_name)
    return assign_ranks(
        snapshot_all(store, directory),
        lambda snap, rank: _regularity(snap, rank, today, tz_name),
    )


def team_activity_heatmap(
    store: ActivityStore,
    directory: LeagueDirectory,
    team_id: int,
    tz_name: str = DEFAULT_LEAGUE_TIMEZONE,
    days: int = HEATMAP_WINDOW_DAYS,
    today: Optional[date] = None,
) -> list[HeatmapDay]:
    '''Activity counts per active day over the trailing window, oldest first.'''
    if days < 1:
        raise ValidationError('days must be >= 1', {'days': days})
    if directory.get_team(team_id) is None:
        raise NotFound('Team', team_id)

    today = today or today_in(tz_name)
    window_start = today - timedelta(days=days - 1)
    counts = Counter(
        d
        for d in (
            local_date(a.created_at, tz_name)
            for a in store.list_team_activities(team_id)
        )
        if window_start <= d <= today
    )
    return [HeatmapDay(day=d, count=counts[d]) for d in sorted(counts)]
