"""Date manipulation utilities"""

from datetime import date, datetime, timezone
from dateutil.relativedelta import relativedelta


def add_months(start: date, months: int) -> date:
    """
    Advance a date by whole calendar months.

    Keeps the day of month; when the target month is shorter the day is
    clamped to its last day (2024-01-31 + 1 month -> 2024-02-29).
    """
    return start + relativedelta(months=months)


def utcnow() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)
