"""Recurrence rules for payables/receivables - due date generation and next-occurrence decisions"""

from datetime import date, datetime
from typing import List, Optional
from zenith_gateway.domain.models import RecurrenceType, RecurrenceStatus, NextOccurrence
from zenith_gateway.domain.exceptions import ValidationError
from zenith_gateway.utils.date_utils import add_months, as_date

RECURRENCE_LABELS = {
    RecurrenceType.UNICA: "Única",
    RecurrenceType.MENSAL: "Mensal",
    RecurrenceType.TRIMESTRAL: "Trimestral",
    RecurrenceType.ANUAL: "Anual",
}

RECURRENCE_STATUS_LABELS = {
    RecurrenceStatus.ATIVA: "Ativa",
    RecurrenceStatus.PAUSADA: "Pausada",
    RecurrenceStatus.CONCLUIDA: "Concluída",
}


def next_date(current: date, recurrence_type: RecurrenceType | str) -> Optional[date]:
    """
    Next due date after current for the given cadence.

    Month arithmetic clamps to the last day of the target month:
    2025-01-31 mensal → 2025-02-28, 2024-02-29 anual → 2025-02-28.

    Returns None for 'unica' (a single transaction has no next date).
    """
    recurrence_type = RecurrenceType(recurrence_type)
    current = as_date(current)

    if recurrence_type is RecurrenceType.UNICA:
        return None
    elif recurrence_type is RecurrenceType.MENSAL:
        return add_months(current, 1)
    elif recurrence_type is RecurrenceType.TRIMESTRAL:
        return add_months(current, 3)
    elif recurrence_type is RecurrenceType.ANUAL:
        return add_months(current, 12)
    raise ValueError(f"Unhandled recurrence type: {recurrence_type}")


def generate_installment_dates(
    start_date: date,
    recurrence_type: RecurrenceType | str,
    count: int,
) -> List[date]:
    """
    Generate count due dates starting at start_date.

    Each date is next_date() of the previous one, so a clamped day carries
    forward (2025-01-31 → 02-28 → 03-28 ...).

    Raises:
        ValidationError: for 'unica' or count < 1
    """
    recurrence_type = RecurrenceType(recurrence_type)
    if recurrence_type is RecurrenceType.UNICA:
        raise ValidationError(["Recorrência única não gera parcelas"])
    if count < 1:
        raise ValidationError(["A quantidade de parcelas deve ser pelo menos 1"])

    dates = [as_date(start_date)]
    while len(dates) < count:
        dates.append(next_date(dates[-1], recurrence_type))
    return dates


def should_generate_next(
    recurrence_type: RecurrenceType | str,
    recurrence_status: RecurrenceStatus | str | None,
    recurrence_next_date: date | datetime | None,
    recurrence_end_date: date | datetime | None,
    today: date | datetime,
) -> bool:
    """
    Decide whether an active series is due to materialize its next installment.

    Comparison is at date granularity; time of day is ignored.
    """
    if RecurrenceType(recurrence_type) is RecurrenceType.UNICA:
        return False
    if recurrence_status is None or RecurrenceStatus(recurrence_status) is not RecurrenceStatus.ATIVA:
        return False
    if recurrence_next_date is None:
        return False

    today = as_date(today)
    if today < as_date(recurrence_next_date):
        return False
    if recurrence_end_date is not None and today > as_date(recurrence_end_date):
        return False
    return True


def plan_next_occurrence(
    recurrence_type: RecurrenceType | str,
    recurrence_next_date: date | None,
    parent_due_date: date,
    parent_issue_date: date,
    recurrence_end_date: date | None = None,
) -> Optional[NextOccurrence]:
    """
    Work out the next installment of a series and where the series goes after it.

    The new installment keeps the parent's gap between issue and due date.
    The series completes when the following date would pass the end date.
    """
    recurrence_type = RecurrenceType(recurrence_type)
    if recurrence_type is RecurrenceType.UNICA or recurrence_next_date is None:
        return None

    due = as_date(recurrence_next_date)
    issue = due - (as_date(parent_due_date) - as_date(parent_issue_date))
    following = next_date(due, recurrence_type)
    completes = recurrence_end_date is not None and following > as_date(recurrence_end_date)

    return NextOccurrence(
        due_date=due,
        issue_date=issue,
        following_date=None if completes else following,
        completes_series=completes,
    )


def recurrence_label(recurrence_type: RecurrenceType | str) -> str:
    return RECURRENCE_LABELS[RecurrenceType(recurrence_type)]


def recurrence_status_label(status: RecurrenceStatus | str) -> str:
    return RECURRENCE_STATUS_LABELS[RecurrenceStatus(status)]
