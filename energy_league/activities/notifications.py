from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Protocol, Sequence, runtime_checkable

from energy_league.activities.records import Activity, BonusKind, BonusType, Participant

logger = logging.getLogger(__name__)

NO_REASON_GIVEN = 'Not specified'


class NotificationCategory(str, Enum):
    ACTIVITY_APPROVED = 'ACTIVITY_APPROVED'
    ACTIVITY_REJECTED = 'ACTIVITY_REJECTED'


@dataclass(frozen=True)
class Notification:
    participant_id: int
    title: str
    message: str
    category: NotificationCategory
    related_activity_id: Optional[int] = None


@runtime_checkable
class NotificationSink(Protocol):
    def send(self, notification: Notification) -> None:
        pass


def describe_adjustment(bonus_type: BonusType) -> str:
    '''e.g. `bonus "Team photo" (+50 points)` or `penalty "Late" (-20 points)`.'''
    delta = bonus_type.points_adjustment
    if bonus_type.kind is BonusKind.PENALTY or delta < 0:
        return f'penalty "{bonus_type.name}" ({delta} points)'
    return f'bonus "{bonus_type.name}" ({delta:+d} points)'


def approved_notification(
    activity: Activity,
    activity_type_name: str,
    moderator: Participant,
    adjustment_types: Sequence[BonusType] = (),
    comment: Optional[str] = None,
) -> Notification:
    message = (
        f'Your activity "{activity_type_name}" was approved by moderator '
        f'{moderator.name}. You earned {activity.energy} points'
    )
    for bonus_type in adjustment_types:
        message += f' + {describe_adjustment(bonus_type)}'
    message += '.'
    if comment and comment.strip():
        message += f'\n\nModerator comment: {comment}'

    return Notification(
        participant_id=activity.participant_id,
        title='Activity approved',
        message=message,
        category=NotificationCategory.ACTIVITY_APPROVED,
        related_activity_id=activity.id,
    )


def rejected_notification(
    activity: Activity,
    activity_type_name: str,
    moderator: Participant,
    reason: Optional[str],
    penalty_type: Optional[BonusType] = None,
) -> Notification:
    message = (
        f'Your activity "{activity_type_name}" was rejected by moderator '
        f'{moderator.name}'
    )
    if penalty_type is not None:
        message += f' + {describe_adjustment(penalty_type)}'
    message += f'.\n\nReason: {reason or NO_REASON_GIVEN}'

    return Notification(
        participant_id=activity.participant_id,
        title='Activity rejected',
        message=message,
        category=NotificationCategory.ACTIVITY_REJECTED,
        related_activity_id=activity.id,
    )


def dispatch(sink: NotificationSink, notifications: Iterable[Notification]) -> int:
    '''
    Hand notifications to the sink after the moderation transaction committed.
    Delivery is best-effort: a failing sink is logged and skipped so it can
    never undo a verdict. Returns how many were delivered.
    '''
    delivered = 0
    for notification in notifications:
        try:
            sink.send(notification)
            delivered += 1
        except Exception:
            logger.exception(
                f'Failed to deliver {notification.category.value} notification '
                f'to participant={notification.participant_id} '
                f'(activity={notification.related_activity_id})'
            )
    return delivered
