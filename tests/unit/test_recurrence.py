"""Unit tests for recurrence date generation and next-occurrence decisions"""

import calendar
import pytest
from datetime import date, datetime
from zenith_gateway.domain.recurrence import (
    generate_installment_dates,
    next_date,
    plan_next_occurrence,
    recurrence_label,
    recurrence_status_label,
    should_generate_next,
)
from zenith_gateway.domain.exceptions import ValidationError
from zenith_gateway.domain.models import RecurrenceStatus, RecurrenceType


def test_next_date_unica_is_terminal():
    assert next_date(date(2025, 1, 15), RecurrenceType.UNICA) is None


def test_next_date_cadences():
    """Test month/quarter/year steps"""
    start = date(2025, 1, 15)

    assert next_date(start, RecurrenceType.MENSAL) == date(2025, 2, 15)
    assert next_date(start, RecurrenceType.TRIMESTRAL) == date(2025, 4, 15)
    assert next_date(start, RecurrenceType.ANUAL) == date(2026, 1, 15)


def test_next_date_accepts_string_type():
    assert next_date(date(2025, 11, 20), "trimestral") == date(2026, 2, 20)


def test_next_date_month_overflow_clamps():
    """Test Jan 31 + 1 month lands on the last day of February"""
    assert next_date(date(2025, 1, 31), RecurrenceType.MENSAL) == date(2025, 2, 28)
    assert next_date(date(2024, 1, 31), RecurrenceType.MENSAL) == date(2024, 2, 29)


def test_next_date_leap_day_yearly():
    assert next_date(date(2024, 2, 29), RecurrenceType.ANUAL) == date(2025, 2, 28)


@pytest.mark.parametrize("month", range(1, 13))
def test_next_date_month_end_policy_is_consistent(month):
    """Test clamp policy for every month-end start of the year"""
    start = date(2025, month, calendar.monthrange(2025, month)[1])

    result = next_date(start, RecurrenceType.MENSAL)

    expected_month = month % 12 + 1
    expected_year = 2025 if month < 12 else 2026
    last_day = calendar.monthrange(expected_year, expected_month)[1]
    assert result == date(expected_year, expected_month, min(start.day, last_day))


def test_generate_monthly_dates_for_a_year():
    """Test 12 monthly installments from 2025-01-15"""
    dates = generate_installment_dates(date(2025, 1, 15), RecurrenceType.MENSAL, 12)

    assert len(dates) == 12
    assert dates[0] == date(2025, 1, 15)
    assert dates[-1] == date(2025, 12, 15)
    assert [d.month for d in dates] == list(range(1, 13))
    assert all(d.day == 15 for d in dates)


def test_generate_dates_chain_clamped_day():
    """Test a clamped day carries into the following steps"""
    dates = generate_installment_dates(date(2025, 1, 31), RecurrenceType.TRIMESTRAL, 4)

    assert dates == [date(2025, 1, 31), date(2025, 4, 30), date(2025, 7, 30), date(2025, 10, 30)]


def test_generate_yearly_dates():
    dates = generate_installment_dates(date(2025, 3, 1), RecurrenceType.ANUAL, 3)
    assert dates == [date(2025, 3, 1), date(2026, 3, 1), date(2027, 3, 1)]


def test_generate_single_date():
    assert generate_installment_dates(date(2025, 3, 1), RecurrenceType.MENSAL, 1) == [date(2025, 3, 1)]


def test_generate_dates_is_pure():
    """Test repeated calls recompute the same sequence"""
    first = generate_installment_dates(date(2025, 1, 31), RecurrenceType.MENSAL, 6)
    second = generate_installment_dates(date(2025, 1, 31), RecurrenceType.MENSAL, 6)
    assert first == second


def test_generate_dates_rejects_unica():
    with pytest.raises(ValidationError):
        generate_installment_dates(date(2025, 1, 15), RecurrenceType.UNICA, 3)


def test_generate_dates_rejects_zero_count():
    with pytest.raises(ValidationError):
        generate_installment_dates(date(2025, 1, 15), RecurrenceType.MENSAL, 0)


def test_should_generate_next_when_due():
    assert should_generate_next(
        RecurrenceType.MENSAL, RecurrenceStatus.ATIVA, date(2025, 3, 10), None, date(2025, 3, 10)
    )
    assert should_generate_next("mensal", "ativa", date(2025, 3, 10), date(2025, 12, 31), date(2025, 3, 11))


@pytest.mark.parametrize(
    "recurrence_type,status,next_due,end_date",
    [
        (RecurrenceType.UNICA, RecurrenceStatus.ATIVA, date(2025, 3, 10), None),
        (RecurrenceType.MENSAL, RecurrenceStatus.PAUSADA, date(2025, 3, 10), None),
        (RecurrenceType.MENSAL, RecurrenceStatus.CONCLUIDA, date(2025, 3, 10), None),
        (RecurrenceType.MENSAL, None, date(2025, 3, 10), None),
        (RecurrenceType.MENSAL, RecurrenceStatus.ATIVA, None, None),
        (RecurrenceType.MENSAL, RecurrenceStatus.ATIVA, date(2025, 3, 21), None),
        (RecurrenceType.MENSAL, RecurrenceStatus.ATIVA, date(2025, 3, 10), date(2025, 3, 19)),
    ],
)
def test_should_not_generate_next(recurrence_type, status, next_due, end_date):
    """Test every blocking condition (today = 2025-03-20)"""
    assert not should_generate_next(recurrence_type, status, next_due, end_date, date(2025, 3, 20))


def test_should_generate_next_ignores_time_of_day():
    """Test date-granularity comparison"""
    assert should_generate_next(
        RecurrenceType.MENSAL, RecurrenceStatus.ATIVA, datetime(2025, 3, 10, 18, 0), None, datetime(2025, 3, 10, 8, 0)
    )
    assert should_generate_next(
        RecurrenceType.MENSAL, RecurrenceStatus.ATIVA, date(2025, 3, 10), date(2025, 3, 10), datetime(2025, 3, 10, 23, 59)
    )


def test_plan_next_occurrence_keeps_issue_gap():
    """Test new installment keeps the parent's issue→due gap"""
    plan = plan_next_occurrence(
        RecurrenceType.MENSAL,
        date(2025, 3, 10),
        parent_due_date=date(2025, 1, 10),
        parent_issue_date=date(2025, 1, 5),
    )

    assert plan.due_date == date(2025, 3, 10)
    assert plan.issue_date == date(2025, 3, 5)
    assert plan.following_date == date(2025, 4, 10)
    assert plan.completes_series is False


def test_plan_next_occurrence_completes_at_end_date():
    plan = plan_next_occurrence(
        RecurrenceType.MENSAL,
        date(2025, 3, 10),
        parent_due_date=date(2025, 1, 10),
        parent_issue_date=date(2025, 1, 10),
        recurrence_end_date=date(2025, 3, 31),
    )

    assert plan.due_date == date(2025, 3, 10)
    assert plan.following_date is None
    assert plan.completes_series is True


def test_plan_next_occurrence_without_next_date():
    assert plan_next_occurrence(RecurrenceType.MENSAL, None, date(2025, 1, 10), date(2025, 1, 10)) is None
    assert plan_next_occurrence(RecurrenceType.UNICA, date(2025, 3, 10), date(2025, 1, 10), date(2025, 1, 10)) is None


def test_labels():
    assert recurrence_label("trimestral") == "Trimestral"
    assert recurrence_label(RecurrenceType.UNICA) == "Única"
    assert recurrence_status_label("concluida") == "Concluída"
