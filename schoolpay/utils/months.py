"""Calendar-month helpers used by billing"""

from datetime import date
from typing import List, Tuple

MonthKey = Tuple[int, int]


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, landing on the 1st of the resulting month."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_key(value: date) -> MonthKey:
    return (value.year, value.month)


def clamp_months(months_count: int, maximum: int = 24) -> int:
    """Clamp a requested repetition count to [1, maximum]."""
    return max(1, min(maximum, months_count))


def month_sequence(start: date, count: int) -> List[date]:
    """
    ``count`` consecutive months beginning with ``start``'s month.

    >>> month_sequence(date(2024, 1, 15), 3)
    [datetime.date(2024, 1, 1), datetime.date(2024, 2, 1), datetime.date(2024, 3, 1)]
    """
    base = first_of_month(start)
    return [add_months(base, offset) for offset in range(count)]


def months_between(start: date, end: date) -> List[date]:
    """Every month from ``start``'s month through ``end``'s month, inclusive."""
    first = first_of_month(start)
    last = first_of_month(end)
    if last < first:
        return []
    count = (last.year - first.year) * 12 + (last.month - first.month) + 1
    return month_sequence(first, count)
