import logging

from energy_league.activities.notifications import Notification
from energy_league.models.notification import NotificationModel

logger = logging.getLogger(__name__)


class DatabaseNotificationSink:
    '''Stores notifications in the `notifications` table for delivery elsewhere.'''

    def send(self, notification: Notification) -> None:
        NotificationModel.insert(
            participant_id=notification.participant_id,
            activity_id=notification.related_activity_id,
            category=notification.category.value,
            title=notification.title,
            message=notification.message,
        )


class LoggingNotificationSink:
    '''Writes notifications to the application log instead of storing them.'''

    def send(self, notification: Notification) -> None:
        logger.info(
            f'[{notification.category.value}] to participant '
            f'{notification.participant_id}: {notification.title}'
        )
