"""Income statement (DRE) aggregation with optional cost-center weighting"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple
from zenith_gateway.domain.models import (
    TransactionType,
    TransactionStatus,
    StatementLine,
    IncomeStatement,
)
from zenith_gateway.domain.exceptions import ValidationError
from zenith_gateway.utils.money import HUNDRED, quantize_money, to_decimal


@dataclass
class StatementSource:
    """Transaction fields the report needs"""

    transaction_id: str
    transaction_type: TransactionType
    account_code: Optional[str]
    total_amount: Decimal
    issue_date: date
    status: TransactionStatus


@dataclass
class StoredAllocation:
    """Persisted allocation row"""

    transaction_type: TransactionType
    transaction_id: str
    cost_center_id: str
    percentage: Decimal


def cost_center_share(
    allocations: Iterable[StoredAllocation],
    cost_center_id: str,
) -> Dict[Tuple[TransactionType, str], Decimal]:
    """Fraction (0-1) of each transaction allocated to cost_center_id"""
    shares: Dict[Tuple[TransactionType, str], Decimal] = defaultdict(Decimal)
    for alloc in allocations:
        if alloc.cost_center_id == cost_center_id:
            key = (TransactionType(alloc.transaction_type), alloc.transaction_id)
            shares[key] += to_decimal(alloc.percentage) / HUNDRED
    return dict(shares)


def build_income_statement(
    transactions: Iterable[StatementSource],
    allocations: Iterable[StoredAllocation],
    start_date: date,
    end_date: date,
    cost_center_id: Optional[str] = None,
) -> IncomeStatement:
    """
    Aggregate revenues (receivables) and expenses (payables) by account.

    Rules:
    - Only transactions issued within [start_date, end_date]
    - Cancelled transactions are ignored
    - Transactions without an account code are ignored
    - With a cost-center filter, each transaction counts with the share
      allocated to that center; unallocated transactions drop out
    """
    if start_date > end_date:
        raise ValidationError(["A data inicial deve ser anterior à data final"])

    shares = cost_center_share(allocations, cost_center_id) if cost_center_id else None

    revenue_by_account: Dict[str, Decimal] = defaultdict(Decimal)
    expense_by_account: Dict[str, Decimal] = defaultdict(Decimal)

    for txn in transactions:
        if not txn.account_code:
            continue
        if TransactionStatus(txn.status) is TransactionStatus.CANCELADO:
            continue
        if not start_date <= txn.issue_date <= end_date:
            continue

        txn_type = TransactionType(txn.transaction_type)
        weight = Decimal(1)
        if shares is not None:
            weight = shares.get((txn_type, txn.transaction_id), Decimal(0))
            if weight == 0:
                continue

        amount = to_decimal(txn.total_amount) * weight
        if txn_type is TransactionType.RECEIVABLE:
            revenue_by_account[txn.account_code] += amount
        elif txn_type is TransactionType.PAYABLE:
            expense_by_account[txn.account_code] += amount

    revenues = _to_lines(revenue_by_account)
    expenses = _to_lines(expense_by_account)
    total_revenue = quantize_money(sum((line.amount for line in revenues), Decimal(0)))
    total_expense = quantize_money(sum((line.amount for line in expenses), Decimal(0)))

    return IncomeStatement(
        start_date=start_date,
        end_date=end_date,
        revenues=revenues,
        expenses=expenses,
        total_revenue=total_revenue,
        total_expense=total_expense,
        net_result=total_revenue - total_expense,
        cost_center_id=cost_center_id,
    )


def _to_lines(amounts: Dict[str, Decimal]) -> List[StatementLine]:
    return [
        StatementLine(account_code=code, amount=quantize_money(amount))
        for code, amount in sorted(amounts.items())
    ]
