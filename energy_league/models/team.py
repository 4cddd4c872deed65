from typing import Any

from energy_league.models.base import BaseModel


class TeamModel(BaseModel):
    table = 'teams'

    @classmethod
    def all(cls) -> list[dict[str, Any]]:
        return cls.get_many(order_by='id ASC')


class TeamParticipantModel(BaseModel):
    table = 'team_participants'

    @classmethod
    def count_for_team(cls, team_id: int) -> int:
        return cls.count('team_id = %s', (team_id,))
