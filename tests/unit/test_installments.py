"""Unit tests for installment preview"""

import pytest
from datetime import date
from decimal import Decimal
from zenith_gateway.domain.installments import InstallmentPreview
from zenith_gateway.domain.models import RecurrenceType


def test_build_preview_full_base_amount():
    """Test each installment carries the full base amount"""
    preview = InstallmentPreview.build(RecurrenceType.MENSAL, 3, date(2025, 1, 15), "250")

    assert len(preview) == 3
    assert all(inst.amount == Decimal("250.00") for inst in preview.installments)
    assert preview.total == Decimal("750.00")


def test_build_preview_numbers_and_dates():
    """Test numbering from 1 and monthly due dates"""
    preview = InstallmentPreview.build(RecurrenceType.MENSAL, 3, date(2025, 1, 15), "100.00")

    assert [inst.installment_number for inst in preview.installments] == [1, 2, 3]
    assert [inst.due_date for inst in preview.installments] == [
        date(2025, 1, 15),
        date(2025, 2, 15),
        date(2025, 3, 15),
    ]


@pytest.mark.parametrize(
    "recurrence_type,count,start",
    [
        (RecurrenceType.UNICA, 3, date(2025, 1, 15)),
        (RecurrenceType.MENSAL, 0, date(2025, 1, 15)),
        (RecurrenceType.MENSAL, None, date(2025, 1, 15)),
        (RecurrenceType.MENSAL, 3, None),
    ],
)
def test_build_preview_empty(recurrence_type, count, start):
    """Test missing or single-transaction parameters produce no installments"""
    preview = InstallmentPreview.build(recurrence_type, count, start, "100.00")

    assert preview.installments == []
    assert preview.total == Decimal("0.00")


def test_edit_amount_leaves_others_untouched():
    """Test per-installment override"""
    preview = InstallmentPreview.build(RecurrenceType.MENSAL, 3, date(2025, 1, 15), "250.00")

    preview.edit(1, amount="300")

    amounts = [inst.amount for inst in preview.installments]
    assert amounts == [Decimal("250.00"), Decimal("300.00"), Decimal("250.00")]
    assert preview.installments[1].due_date == date(2025, 2, 15)
    assert preview.total == Decimal("800.00")


def test_edit_due_date_only():
    preview = InstallmentPreview.build(RecurrenceType.TRIMESTRAL, 2, date(2025, 1, 15), "90.00")

    edited = preview.edit(1, due_date=date(2025, 4, 20))

    assert edited.installment_number == 2
    assert edited.due_date == date(2025, 4, 20)
    assert edited.amount == Decimal("90.00")
    assert preview.installments[0].due_date == date(2025, 1, 15)


def test_edit_out_of_range():
    preview = InstallmentPreview.build(RecurrenceType.MENSAL, 2, date(2025, 1, 15), "90.00")

    with pytest.raises(IndexError):
        preview.edit(2, amount="1.00")


def test_installments_returns_copy():
    """Test callers can't mutate the preview through the list"""
    preview = InstallmentPreview.build(RecurrenceType.MENSAL, 2, date(2025, 1, 15), "90.00")

    preview.installments.clear()

    assert len(preview) == 2
