from energy_league.models.base import BaseModel


class ParticipantModel(BaseModel):
    table = 'participants'
