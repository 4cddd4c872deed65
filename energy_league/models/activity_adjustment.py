from typing import Any, Iterable, Optional, cast

from energy_league.database.db_manager import DBManager
from energy_league.models.base import BaseModel


class AdjustmentModel(BaseModel):
    table = 'activity_adjustments'

    @classmethod
    def for_activities(cls, activity_ids: Iterable[int]) -> list[dict[str, Any]]:
        ids = list(activity_ids)
        if not ids:
            return []
        return cls.get_many(
            'activity_id = ANY(%s)', (ids,), order_by='created_at ASC, id ASC'
        )

    @classmethod
    def insert(
        cls,
        activity_id: int,
        bonus_type_id: int,
        moderator_id: int,
        points_adjustment: int,
        comment: Optional[str],
        db: Optional[DBManager] = None,
    ) -> dict[str, Any]:
        return cast(
            dict[str, Any],
            cls.create(
                {
                    'activity_id': activity_id,
                    'bonus_type_id': bonus_type_id,
                    'moderator_id': moderator_id,
                    'points_adjustment': points_adjustment,
                    'comment': comment,
                },
                db=db,
            ),
        )
