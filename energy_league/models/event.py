from typing import Any

from energy_league.models.base import BaseModel


class EventModel(BaseModel):
    table = 'events'

    @classmethod
    def all(cls) -> list[dict[str, Any]]:
        return cls.get_many(order_by='id ASC')
