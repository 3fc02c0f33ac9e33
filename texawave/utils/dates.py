"""
Date helpers.
Documents store dates as YYYY-MM-DD strings and months as YYYY-MM.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().isoformat()


def parse_date(value) -> date:
    """Parse a YYYY-MM-DD string (or pass through a date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def to_date_str(value) -> Optional[str]:
    if value is None:
        return None
    return parse_date(value).isoformat()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def current_month() -> str:
    return date.today().strftime("%Y-%m")


def previous_month(month: str) -> str:
    first = datetime.strptime(month, "%Y-%m").date()
    return add_months(first, -1).strftime("%Y-%m")


def month_bounds(month: str) -> Tuple[str, str]:
    """Return first and last date strings of a YYYY-MM month."""
    first = datetime.strptime(month, "%Y-%m").date()
    last_day = calendar.monthrange(first.year, first.month)[1]
    return first.isoformat(), first.replace(day=last_day).isoformat()


def is_sunday(value) -> bool:
    return parse_date(value).weekday() == 6
