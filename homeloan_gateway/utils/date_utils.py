"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def age_on(birth_date: date, today: date) -> int:
    """
    Whole years between birth_date and today.

    Calendar arithmetic: year difference, minus one if the birthday has not
    come round yet this year. A 29 February birthday counts as reached on
    1 March in non-leap years.
    """
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def days_ago(days: int, now: datetime | None = None) -> datetime:
    """Start of a trailing window of `days` days ending at now"""
    return (now or utcnow()) - timedelta(days=days)
