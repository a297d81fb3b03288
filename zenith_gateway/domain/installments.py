"""Installment preview for recurring payables/receivables"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from zenith_gateway.domain.models import Installment, RecurrenceType
from zenith_gateway.domain.recurrence import generate_installment_dates
from zenith_gateway.utils.money import quantize_money


class InstallmentPreview:
    """
    Editable list of installments shown before a recurring series is saved.

    Every installment starts with the full base amount (no redistribution);
    individual due dates and amounts can then be overridden one at a time.
    """

    def __init__(self, installments: Optional[List[Installment]] = None):
        self._installments = list(installments or [])

    @classmethod
    def build(
        cls,
        recurrence_type: RecurrenceType | str,
        count: Optional[int],
        start_date: Optional[date],
        base_amount: Decimal | int | str,
    ) -> "InstallmentPreview":
        """
        Generate the preview from recurrence parameters.

        Returns an empty preview for 'unica', a missing start date or count < 1.

        Example:
            mensal, 3, 2025-01-15, R$ 250.00
            → #1 2025-01-15 250.00, #2 2025-02-15 250.00, #3 2025-03-15 250.00
        """
        recurrence_type = RecurrenceType(recurrence_type)
        if recurrence_type is RecurrenceType.UNICA or not count or count < 1 or start_date is None:
            return cls()

        amount = quantize_money(base_amount)
        dates = generate_installment_dates(start_date, recurrence_type, count)
        return cls(
            [
                Installment(installment_number=i, due_date=due, amount=amount)
                for i, due in enumerate(dates, start=1)
            ]
        )

    @property
    def installments(self) -> List[Installment]:
        return list(self._installments)

    @property
    def total(self) -> Decimal:
        """Sum of installment amounts (display only)"""
        return quantize_money(sum((inst.amount for inst in self._installments), Decimal(0)))

    def edit(
        self,
        index: int,
        due_date: Optional[date] = None,
        amount: Decimal | int | str | None = None,
    ) -> Installment:
        """Override one installment's date and/or amount, leaving the others untouched"""
        if not 0 <= index < len(self._installments):
            raise IndexError(f"Installment index {index} out of range")

        current = self._installments[index]
        updated = Installment(
            installment_number=current.installment_number,
            due_date=due_date if due_date is not None else current.due_date,
            amount=quantize_money(amount) if amount is not None else current.amount,
        )
        self._installments[index] = updated
        return updated

    def __len__(self) -> int:
        return len(self._installments)
