"""UTC normalisation helpers shared by the attendance and leave services."""
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utcnow().date()


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def to_utc_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return to_utc_naive(value).date()
    return value


def split_timestamp(value: datetime) -> Tuple[date, time]:
    """Split a timestamp into its UTC calendar date and time-of-day."""
    moment = to_utc_naive(value)
    return moment.date(), moment.time()


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month, inclusive."""
    first = date(year, month, 1)
    if month == 12:
        return first, date(year, 12, 31)
    return first, date(year, month + 1, 1) - timedelta(days=1)


def time_span(start: time, end: time) -> timedelta:
    """Signed elapsed time between two times-of-day on the same date."""
    return datetime.combine(date.min, end) - datetime.combine(date.min, start)
