from energy_league.models.base import BaseModel


class ActivityTypeModel(BaseModel):
    table = 'activity_types'
