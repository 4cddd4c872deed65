from typing import Any, Optional

from energy_league.models.base import BaseModel


class NotificationModel(BaseModel):
    table = 'notifications'

    @classmethod
    def insert(
        cls,
        participant_id: int,
        activity_id: Optional[int],
        category: str,
        title: str,
        message: str,
    ) -> dict[str, Any]:
        return cls.create(
            {
                'participant_id': participant_id,
                'activity_id': activity_id,
                'category': category,
                'title': title,
                'message': message,
            }
        )

