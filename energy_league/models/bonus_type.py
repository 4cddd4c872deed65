from typing import Any, Optional

from energy_league.models.base import BaseModel


class BonusTypeModel(BaseModel):
    table = 'bonus_types'

    @classmethod
    def for_event(cls, event_id: int, active_only: bool = True) -> list[dict[str, Any]]:
        where = 'event_id = %s AND is_active = TRUE' if active_only else 'event_id = %s'
        return cls.get_many(where, (event_id,), order_by='kind ASC, name ASC')

    @classmethod
    def insert(
        cls,
        event_id: int,
        name: str,
        description: Optional[str],
        points_adjustment: int,
        kind: str,
    ) -> dict[str, Any]:
        return cls.create(
            {
                'event_id': event_id,
                'name': name,
                'description': description,
                'points_adjustment': points_adjustment,
                'kind': kind,
                'is_active': True,
            }
        )
