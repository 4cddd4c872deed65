from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

from energy_league.activities.records import (
    Activity,
    ActivityAdjustment,
    ActivityDraft,
    ActivityStatus,
    ActivityType,
    AdjustmentDraft,
    BonusKind,
    BonusType,
    Event,
    Participant,
    Team,
    Verdict,
)


@runtime_checkable
class ActivityStore(Protocol):
    def get_activity(self, activity_id: int) -> Optional[Activity]:
        pass

    def add_activity(self, draft: ActivityDraft) -> Activity:
        pass

    def apply_verdict(
        self,
        activity_id: int,
        verdict: Verdict,
        adjustments: Sequence[AdjustmentDraft],
    ) -> Optional[Activity]:
        '''
        Move a PENDING activity to the verdict's status and attach adjustments,
        all in one transaction. Returns None (and writes nothing) if the
        activity was no longer PENDING.
        '''
        pass

    def list_adjustments(
        self, activity_ids: Iterable[int]
    ) -> dict[int, list[ActivityAdjustment]]:
        '''Adjustments keyed by activity id, oldest first.'''
        pass

    def list_pending(
        self,
        event_id: Optional[int],
        team_id: Optional[int],
        limit: int,
        offset: int,
    ) -> list[Activity]:
        '''PENDING activities, newest first.'''
        pass

    def count_by_status(self, status: ActivityStatus) -> int:
        pass

    def count_moderated_by(self, moderator_id: int, status: ActivityStatus) -> int:
        pass

    def list_team_activities(self, team_id: int) -> list[Activity]:
        '''Every activity of the team regardless of status, newest first.'''
        pass

    def list_activities(
        self,
        statuses: Iterable[ActivityStatus],
        event_id: Optional[int] = None,
        team_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Activity]:
        '''
        Activities in any of `statuses`, optionally narrowed to one event or
        team, newest first. Without a limit every match is returned.
        '''
        pass


@runtime_checkable
class LeagueDirectory(Protocol):
    def get_participant(self, participant_id: int) -> Optional[Participant]:
        pass

    def get_team(self, team_id: int) -> Optional[Team]:
        pass

    def get_event(self, event_id: int) -> Optional[Event]:
        pass

    def get_activity_type(self, activity_type_id: int) -> Optional[ActivityType]:
        pass

    def get_bonus_type(self, bonus_type_id: int) -> Optional[BonusType]:
        pass

    def list_teams(self) -> list[Team]:
        '''All teams ordered by id.'''
        pass

    def list_events(self) -> list[Event]:
        pass

    def count_team_participants(self, team_id: int) -> int:
        pass

    def list_bonus_types(
        self, event_id: int, active_only: bool = True
    ) -> list[BonusType]:
        pass

    def insert_bonus_type(
        self,
        event_id: int,
        name: str,
        description: Optional[str],
        points_adjustment: int,
        kind: BonusKind,
    ) -> BonusType:
        pass

    def update_bonus_type(self, bonus_type: BonusType) -> BonusType:
        pass
