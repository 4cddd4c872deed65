from datetime import date, datetime, timedelta, timezone

import pendulum

from energy_league.activities.errors import ValidationError
from energy_league.utils.constants import MAX_PAGE_SIZE


def local_date(ts: datetime, tz_name: str) -> date:
    '''Calendar date of `ts` in the given zone; naive timestamps are UTC.'''
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(pendulum.timezone(tz_name)).date()


def today_in(tz_name: str) -> date:
    return datetime.now(pendulum.timezone(tz_name)).date()


def trailing_days(end: date, days: int) -> list[date]:
    '''`days` consecutive dates ending at `end`, oldest first.'''
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def check_paging(page: int, page_size: int) -> None:
    if page < 0:
        raise ValidationError('page must be >= 0', {'page': page})
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValidationError(
            f'page_size must be between 1 and {MAX_PAGE_SIZE}',
            {'page_size': page_size},
        )
