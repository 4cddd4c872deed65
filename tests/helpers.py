from datetime import datetime, timedelta, timezone

from energy_league.activities.notifications import Notification

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def days_ago(n: int, hour: int = 12) -> datetime:
    return NOW.replace(hour=hour) - timedelta(days=n)


class RecordingSink:
    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def send(self, notification: Notification) -> None:
        self.sent.append(notification)


class FailingSink:
    def __init__(self) -> None:
        self.attempts = 0

    def send(self, notification: Notification) -> None:
        self.attempts += 1
        raise ConnectionError('notification backend down')
