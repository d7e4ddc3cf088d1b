from datetime import datetime, date, time, timedelta

import pytz

from settings import APP_TIMEZONE

APP_TZ = pytz.timezone(APP_TIMEZONE)


def now_local() -> datetime:
    """Timezone-aware 'now' in the application timezone."""
    return datetime.now(APP_TZ)


def today_local() -> date:
    return now_local().date()


def as_local_naive(value: datetime) -> datetime:
    """
    Normalise a timestamp to a naive wall-clock time in the application timezone.

    PostgreSQL hands back aware datetimes while SQLite drops the offset, so any
    ordering or window comparison goes through this first.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(APP_TZ).replace(tzinfo=None)


def to_date(value) -> date:
    if isinstance(value, datetime):
        return as_local_naive(value).date()
    return value


def local_day_bounds(day: date):
    """[start, end) of a calendar day in the application timezone, as aware datetimes."""
    start = APP_TZ.localize(datetime.combine(day, time.min))
    end = APP_TZ.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start, end
