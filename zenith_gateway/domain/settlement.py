"""Payment settlement (baixa) - status transitions for payables/receivables"""

from datetime import date, datetime
from decimal import Decimal
from zenith_gateway.config import settings
from zenith_gateway.domain.models import (
    Transaction,
    TransactionType,
    TransactionStatus,
    SettlementResult,
    BalanceAdjustment,
)
from zenith_gateway.domain.exceptions import ValidationError, InvalidStateError, OverpaymentError
from zenith_gateway.utils.date_utils import as_date
from zenith_gateway.utils.money import ZERO, quantize_money

TERMINAL_STATUSES = frozenset({TransactionStatus.PAGO, TransactionStatus.CANCELADO})
OPEN_STATUSES = frozenset({TransactionStatus.PENDENTE, TransactionStatus.PARCIAL})


def apply_settlement(
    transaction: Transaction,
    payment_amount: Decimal | int | str,
    bank_account_id: str | None = None,
    tolerance: Decimal | None = None,
) -> SettlementResult:
    """
    Apply one payment to a transaction and derive its new status.

    State flow:
    - pendente → parcial: 0 < settled < total
    - pendente/parcial → pago: settled ≥ total - tolerance
    - pago, cancelado: no further payments

    Overpayment beyond the tolerance is rejected. Within the tolerance the
    stored settled amount is capped at the total.

    When a bank account is given, the result carries the balance instruction:
    receivables credit the account, payables debit it.

    Raises:
        ValidationError: payment_amount ≤ 0
        InvalidStateError: transaction already paid or cancelled
        OverpaymentError: payment exceeds the remaining balance
    """
    if tolerance is None:
        tolerance = settings.financial_tolerance

    amount = quantize_money(payment_amount)
    if amount <= 0:
        raise ValidationError(["O valor do pagamento deve ser maior que zero"])

    status = TransactionStatus(transaction.status)
    if status in TERMINAL_STATUSES:
        raise InvalidStateError(f"Transaction is {status.value} and cannot receive payments")

    total = quantize_money(transaction.total_amount)
    new_settled = quantize_money(transaction.amount_settled) + amount

    if new_settled > total + tolerance:
        remaining = max(total - quantize_money(transaction.amount_settled), ZERO)
        raise OverpaymentError(f"Payment of {amount} exceeds remaining balance of {remaining}")

    if new_settled >= total - tolerance:
        new_status = TransactionStatus.PAGO
    else:
        new_status = TransactionStatus.PARCIAL

    new_settled = min(new_settled, total)

    adjustment = None
    if bank_account_id:
        adjustment = BalanceAdjustment(
            bank_account_id=bank_account_id,
            delta=balance_delta(TransactionType(transaction.transaction_type), amount),
        )

    return SettlementResult(
        amount_settled=new_settled,
        status=new_status,
        remaining=max(total - new_settled, ZERO),
        balance_adjustment=adjustment,
    )


def balance_delta(transaction_type: TransactionType, amount: Decimal) -> Decimal:
    """Signed bank balance change for settling amount"""
    if transaction_type is TransactionType.RECEIVABLE:
        return amount
    elif transaction_type is TransactionType.PAYABLE:
        return -amount
    raise ValueError(f"Unhandled transaction type: {transaction_type}")


def remaining_balance(transaction: Transaction) -> Decimal:
    """Outstanding amount, never negative"""
    remaining = quantize_money(transaction.total_amount) - quantize_money(transaction.amount_settled)
    return max(remaining, ZERO)


def display_status(
    status: TransactionStatus | str,
    due_date: date | datetime | None,
    today: date | datetime,
) -> TransactionStatus:
    """Open transactions past their due date show as vencido"""
    status = TransactionStatus(status)
    if status in OPEN_STATUSES and due_date is not None and as_date(due_date) < as_date(today):
        return TransactionStatus.VENCIDO
    return status
