import itertools
import threading
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from energy_league.activities.moderation import ModerationWorkflow
from energy_league.activities.records import (
    Activity,
    ActivityAdjustment,
    ActivityDraft,
    ActivityStatus,
    ActivityType,
    AdjustmentDraft,
    AutoApproved,
    BonusKind,
    BonusType,
    Event,
    ModerationState,
    Participant,
    Pending,
    Role,
    Team,
    Verdict,
)
from energy_league.utils.env import Settings
from tests.helpers import NOW, RecordingSink


class InMemoryLeague:
    '''Activity store and league directory in one, backed by dicts.'''

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1000)
        self.activities: dict[int, Activity] = {}
        self.adjustments: list[ActivityAdjustment] = []
        self.participants: dict[int, Participant] = {}
        self.teams: dict[int, Team] = {}
        self.events: dict[int, Event] = {}
        self.activity_types: dict[int, ActivityType] = {}
        self.bonus_types: dict[int, BonusType] = {}
        self.memberships: dict[int, set[int]] = {}
        # Set to a threading.Barrier to hold readers until all arrive
        self.read_barrier: Optional[threading.Barrier] = None

    # --- seeding ---

    def add_participant(self, pid: int, name: str, role: Role = Role.USER) -> Participant:
        self.participants[pid] = Participant(pid, name, role)
        return self.participants[pid]

    def add_event(self, eid: int, name: str = 'Spring', approval: bool = True) -> Event:
        self.events[eid] = Event(eid, name, requires_activity_approval=approval)
        return self.events[eid]

    def add_team(
        self, tid: int, name: str, event_id: Optional[int] = None, members: Iterable[int] = ()
    ) -> Team:
        self.teams[tid] = Team(tid, name, event_id)
        self.memberships[tid] = set(members)
        return self.teams[tid]

    def add_activity_type(self, atid: int, name: str) -> ActivityType:
        self.activity_types[atid] = ActivityType(atid, name)
        return self.activity_types[atid]

    def add_bonus_type(
        self,
        btid: int,
        event_id: int,
        name: str,
        points: int,
        kind: BonusKind = BonusKind.BONUS,
        is_active: bool = True,
    ) -> BonusType:
        self.bonus_types[btid] = BonusType(
            btid, event_id, name, points, kind, is_active=is_active
        )
        return self.bonus_types[btid]

    def seed_activity(
        self,
        team_id: int,
        participant_id: int,
        energy: int,
        state: Optional[ModerationState] = None,
        created_at: datetime = NOW,
        activity_type_id: int = 1,
        participant_ids: Iterable[int] = (),
    ) -> Activity:
        activity = Activity(
            id=next(self._ids),
            team_id=team_id,
            participant_id=participant_id,
            activity_type_id=activity_type_id,
            energy=energy,
            state=state if state is not None else AutoApproved(),
            created_at=created_at,
            participant_ids=frozenset(participant_ids),
        )
        self.activities[activity.id] = activity
        return activity

    def seed_adjustment(self, activity_id: int, points: int, bonus_type_id: int = 1):
        adj = ActivityAdjustment(
            id=next(self._ids),
            activity_id=activity_id,
            bonus_type_id=bonus_type_id,
            moderator_id=0,
            points_adjustment=points,
            created_at=NOW,
        )
        self.adjustments.append(adj)
        return adj

    # --- ActivityStore ---

    def get_activity(self, activity_id: int) -> Optional[Activity]:
        if self.read_barrier is not None:
            self.read_barrier.wait(timeout=5)
        return self.activities.get(activity_id)

    def add_activity(self, draft: ActivityDraft) -> Activity:
        with self._lock:
            activity = Activity(
                id=next(self._ids),
                team_id=draft.team_id,
                participant_id=draft.participant_id,
                activity_type_id=draft.activity_type_id,
                energy=draft.energy,
                state=draft.state,
                created_at=NOW,
                description=draft.description,
                duration_minutes=draft.duration_minutes,
                photo_urls=draft.photo_urls,
                participant_ids=draft.participant_ids,
            )
            self.activities[activity.id] = activity
        return activity

    def apply_verdict(
        self, activity_id: int, verdict: Verdict, adjustments: Sequence[AdjustmentDraft]
    ) -> Optional[Activity]:
        with self._lock:
            current = self.activities.get(activity_id)
            if current is None or current.status is not ActivityStatus.PENDING:
                return None
            updated = replace(current, state=verdict)
            self.activities[activity_id] = updated
            for adj in adjustments:
                self.adjustments.append(
                    ActivityAdjustment(
                        id=next(self._ids),
                        activity_id=activity_id,
                        bonus_type_id=adj.bonus_type_id,
                        moderator_id=adj.moderator_id,
                        points_adjustment=adj.points_adjustment,
                        created_at=verdict.moderated_at,
                        comment=adj.comment,
                    )
                )
        return updated

    def list_adjustments(self, activity_ids: Iterable[int]) -> dict[int, list[ActivityAdjustment]]:
        wanted = set(activity_ids)
        grouped: dict[int, list[ActivityAdjustment]] = {}
        for adj in self.adjustments:
            if adj.activity_id in wanted:
                grouped.setdefault(adj.activity_id, []).append(adj)
        return grouped

    def list_pending(
        self, event_id: Optional[int], team_id: Optional[int], limit: int, offset: int
    ) -> list[Activity]:
        pending = [
            a
            for a in self.activities.values()
            if a.status is ActivityStatus.PENDING
            and (team_id is None or a.team_id == team_id)
            and (event_id is None or self.teams[a.team_id].event_id == event_id)
        ]
        pending.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return pending[offset : offset + limit]

    def count_by_status(self, status: ActivityStatus) -> int:
        return sum(1 for a in self.activities.values() if a.status is status)

    def count_moderated_by(self, moderator_id: int, status: ActivityStatus) -> int:
        return sum(
            1
            for a in self.activities.values()
            if a.status is status and a.moderator_id == moderator_id
        )

    def list_team_activities(self, team_id: int) -> list[Activity]:
        return sorted(
            (a for a in self.activities.values() if a.team_id == team_id),
            key=lambda a: (a.created_at, a.id),
            reverse=True,
        )

    def list_activities(
        self,
        statuses: Iterable[ActivityStatus],
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Activity]:
        wanted = set(statuses)
        found = sorted(
            (
                a
                for a in self.activities.values()
                if a.status in wanted
                and (team_id is None or a.team_id == team_id)
                and (event_id is None or self.teams[a.team_id].event_id == event_id)
            ),
            key=lambda a: (a.created_at, a.id),
            reverse=True,
        )
        return found[offset:] if limit is None else found[offset : offset + limit]

    # --- LeagueDirectory ---

    def get_participant(self, participant_id: int) -> Optional[Participant]:
        return self.participants.get(participant_id)

    def get_team(self, team_id: int) -> Optional[Team]:
        return self.teams.get(team_id)

    def get_event(self, event_id: int) -> Optional[Event]:
        return self.events.get(event_id)

    def get_activity_type(self, activity_type_id: int) -> Optional[ActivityType]:
        return self.activity_types.get(activity_type_id)

    def get_bonus_type(self, bonus_type_id: int) -> Optional[BonusType]:
        return self.bonus_types.get(bonus_type_id)

    def list_teams(self) -> list[Team]:
        return [self.teams[k] for k in sorted(self.teams)]

    def list_events(self) -> list[Event]:
        return [self.events[k] for k in sorted(self.events)]

    def count_team_participants(self, team_id: int) -> int:
        return len(self.memberships.get(team_id, ()))

    def list_bonus_types(self, event_id: int, active_only: bool = True) -> list[BonusType]:
        return [
            bt
            for _, bt in sorted(self.bonus_types.items())
            if bt.event_id == event_id and (bt.is_active or not active_only)
        ]

    def insert_bonus_type(
        self,
        event_id: int,
        name: str,
        description: Optional[str],
        points_adjustment: int,
        kind: BonusKind,
    ) -> BonusType:
        bt = BonusType(
            id=next(self._ids),
            event_id=event_id,
            name=name,
            points_adjustment=points_adjustment,
            kind=kind,
            description=description,
        )
        self.bonus_types[bt.id] = bt
        return bt

    def update_bonus_type(self, bonus_type: BonusType) -> BonusType:
        self.bonus_types[bonus_type.id] = bonus_type
        return bonus_type


@pytest.fixture()
def league_db() -> InMemoryLeague:
    '''A small league: one approval-gated event, two teams, a moderator.'''
    db = InMemoryLeague()
    db.add_event(1, 'Spring Challenge', approval=True)
    db.add_participant(1, 'Alice')
    db.add_participant(2, 'Bob')
    db.add_participant(9, 'Mia', Role.MODERATOR)
    db.add_participant(10, 'Ada', Role.ADMIN)
    db.add_team(1, 'Rockets', event_id=1, members=[1, 2])
    db.add_team(2, 'Comets', event_id=1, members=[2])
    db.add_activity_type(1, 'Running')
    db.add_bonus_type(5, 1, 'Team photo', 50)
    db.add_bonus_type(6, 1, 'Late entry', -20, BonusKind.PENALTY)
    return db


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def workflow(league_db, sink) -> ModerationWorkflow:
    return ModerationWorkflow(league_db, league_db, sink, clock=lambda: NOW)


@pytest.fixture()
def pending_activity(league_db) -> Activity:
    return league_db.seed_activity(team_id=1, participant_id=1, energy=100, state=Pending())


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url=None,
        db_pool_min_size=1,
        db_pool_max_size=2,
        league_timezone='UTC',
        max_photos_per_activity=10,
        log_level='INFO',
        notification_sink='database',
    )


@pytest.fixture()
def mock_db_manager(monkeypatch):
    '''Patch DBManager everywhere the Postgres adapters open transactions.'''
    from energy_league.models import activity as activity_module
    from energy_league.models import base as base_module
    from energy_league.services import activity_store as store_module

    mock_db = MagicMock()
    mock_manager = MagicMock()
    mock_manager.__enter__.return_value = mock_db
    mock_manager.__exit__.return_value = None

    monkeypatch.setattr(base_module, 'DBManager', lambda: mock_manager)
    monkeypatch.setattr(activity_module, 'DBManager', lambda: mock_manager)
    monkeypatch.setattr(store_module, 'DBManager', lambda: mock_manager)
    return mock_db
