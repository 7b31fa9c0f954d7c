"""Unit tests for calendar-month helpers."""

from datetime import date

from schoolpay.utils.months import (
    add_months,
    clamp_months,
    first_of_month,
    month_key,
    month_sequence,
    months_between,
)


def test_first_of_month():
    assert first_of_month(date(2024, 3, 31)) == date(2024, 3, 1)


def test_add_months_crosses_year():
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 1)
    assert add_months(date(2024, 1, 31), -1) == date(2023, 12, 1)


def test_month_key_ignores_day():
    assert month_key(date(2024, 7, 1)) == month_key(date(2024, 7, 28)) == (2024, 7)


def test_clamp_months():
    assert clamp_months(0) == 1
    assert clamp_months(-5) == 1
    assert clamp_months(12) == 12
    assert clamp_months(100) == 24
    assert clamp_months(100, maximum=6) == 6


def test_month_sequence_normalizes_start_day():
    assert month_sequence(date(2024, 1, 15), 3) == [
        date(2024, 1, 1),
        date(2024, 2, 1),
        date(2024, 3, 1),
    ]


def test_month_sequence_over_year_boundary():
    months = month_sequence(date(2024, 7, 20), 12)
    assert months[0] == date(2024, 7, 1)
    assert months[5] == date(2024, 12, 1)
    assert months[6] == date(2025, 1, 1)
    assert months[-1] == date(2025, 6, 1)


def test_months_between_academic_year():
    months = months_between(date(2024, 7, 15), date(2025, 6, 30))
    assert len(months) == 12
    assert months[0] == date(2024, 7, 1)
    assert months[-1] == date(2025, 6, 1)


def test_months_between_reversed_is_empty():
    assert months_between(date(2025, 1, 1), date(2024, 1, 1)) == []
