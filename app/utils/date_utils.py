from datetime import date, datetime
from typing import Union

from dateutil.relativedelta import relativedelta


def add_months(start: date, months: int) -> date:
    """
    Add whole calendar months to a date.

    Days past the end of the target month clamp to its last day,
    e.g. 2025-01-31 + 1 month == 2025-02-28.
    """
    return start + relativedelta(months=months)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open overlap test: [a_start, a_end) intersects [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Accept ``YYYY-MM-DD`` or a full ISO-8601 datetime and return the date part.

    Raises:
        ValueError: when the value is not a parseable ISO date string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError("Date must be an ISO-8601 string")

    text = value.strip()
    if "T" in text or " " in text:
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()
    return date.fromisoformat(text)
