from typing import Any, Optional

from energy_league.activities.errors import NotFound
from energy_league.activities.records import (
    ActivityType,
    BonusKind,
    BonusType,
    Event,
    Participant,
    Role,
    Team,
)
from energy_league.models.activity_type import ActivityTypeModel
from energy_league.models.bonus_type import BonusTypeModel
from energy_league.models.event import EventModel
from energy_league.models.participant import ParticipantModel
from energy_league.models.team import TeamModel, TeamParticipantModel


def bonus_type_from_row(row: dict[str, Any]) -> BonusType:
    return BonusType(
        id=row['id'],
        event_id=row['event_id'],
        name=row['name'],
        description=row.get('description'),
        points_adjustment=int(row['points_adjustment']),
        kind=BonusKind(row['kind']),
        is_active=bool(row['is_active']),
    )


def event_from_row(row: dict[str, Any]) -> Event:
    return Event(
        id=row['id'],
        name=row['name'],
        requires_activity_approval=bool(row['requires_activity_approval']),
        team_based_competition=bool(row['team_based_competition']),
        multiplier=float(row['multiplier']),
    )


def team_from_row(row: dict[str, Any]) -> Team:
    return Team(id=row['id'], name=row['name'], event_id=row.get('event_id'))


class PostgresLeagueDirectory:
    '''LeagueDirectory over the participants/teams/events/bonus_types tables.'''

    def get_participant(self, participant_id: int) -> Optional[Participant]:
        row = ParticipantModel.get(participant_id)
        if not row:
            return None
        return Participant(id=row['id'], name=row['name'], role=Role(row['role']))

    def get_team(self, team_id: int) -> Optional[Team]:
        row = TeamModel.get(team_id)
        return team_from_row(row) if row else None

    def get_event(self, event_id: int) -> Optional[Event]:
        row = EventModel.get(event_id)
        return event_from_row(row) if row else None

    def get_activity_type(self, activity_type_id: int) -> Optional[ActivityType]:
        row = ActivityTypeModel.get(activity_type_id)
        return ActivityType(id=row['id'], name=row['name']) if row else None

    def get_bonus_type(self, bonus_type_id: int) -> Optional[BonusType]:
        row = BonusTypeModel.get(bonus_type_id)
        return bonus_type_from_row(row) if row else None

    def list_teams(self) -> list[Team]:
        return [team_from_row(r) for r in TeamModel.all()]

    def list_events(self) -> list[Event]:
        return [event_from_row(r) for r in EventModel.all()]

    def count_team_participants(self, team_id: int) -> int:
        return TeamParticipantModel.count_for_team(team_id)

    def list_bonus_types(
        self, event_id: int, active_only: bool = True
    ) -> list[BonusType]:
        return [
            bonus_type_from_row(r)
            for r in BonusTypeModel.for_event(event_id, active_only=active_only)
        ]

    def insert_bonus_type(
        self,
        event_id: int,
        name: str,
        description: Optional[str],
        points_adjustment: int,
        kind: BonusKind,
    ) -> BonusType:
        row = BonusTypeModel.insert(
            event_id, name, description, points_adjustment, kind.value
        )
        return bonus_type_from_row(row)

    def update_bonus_type(self, bonus_type: BonusType) -> BonusType:
        row = BonusTypeModel.update(
            bonus_type.id,
            {
                'name': bonus_type.name,
                'description': bonus_type.description,
                'points_adjustment': bonus_type.points_adjustment,
                'kind': bonus_type.kind.value,
                'is_active': bonus_type.is_active,
            },
        )
        if not row:
            raise NotFound('Bonus type', bonus_type.id)
        return bonus_type_from_row(row)
