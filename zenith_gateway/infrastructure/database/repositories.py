"""Data access layer for payables/receivables, allocations, payments and bank accounts"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session
from zenith_gateway.infrastructure.database.models import FinancialTransaction, CostAllocation, Payment, BankAccount
from zenith_gateway.domain.models import (
    AllocationAmount,
    AllocationEntry,
    Installment,
    PaymentRecord,
    RecurrenceConfig,
    RecurrenceStatus,
    RecurrenceType,
    SettlementResult,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from zenith_gateway.domain.reports import StatementSource, StoredAllocation
from zenith_gateway.utils.money import ZERO, quantize_money


def to_domain(db_txn: FinancialTransaction) -> Transaction:
    """Map an ORM row to the settlement view of a transaction"""
    return Transaction(
        transaction_type=TransactionType(db_txn.transaction_type),
        total_amount=quantize_money(db_txn.total_amount),
        amount_settled=quantize_money(db_txn.amount_settled),
        status=TransactionStatus(db_txn.status),
        due_date=db_txn.due_date,
    )


class TransactionRepository:
    """Repository for payables and receivables"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        owner_id: str,
        transaction_type: TransactionType,
        description: str,
        total_amount: Decimal,
        due_date: date,
        issue_date: Optional[date] = None,
        account_code: Optional[str] = None,
        cost_center_id: Optional[str] = None,
        bank_account_id: Optional[uuid.UUID] = None,
        **extra,
    ) -> FinancialTransaction:
        """Persist a single transaction in status pendente"""
        extra.setdefault("recurrence_type", RecurrenceType.UNICA.value)
        db_txn = FinancialTransaction(
            owner_id=owner_id,
            transaction_type=TransactionType(transaction_type).value,
            description=description,
            total_amount=quantize_money(total_amount),
            amount_settled=ZERO,
            due_date=due_date,
            issue_date=issue_date or due_date,
            status=TransactionStatus.PENDENTE.value,
            account_code=account_code,
            cost_center_id=cost_center_id,
            bank_account_id=bank_account_id,
            **extra,
        )
        self.db.add(db_txn)
        self.db.flush()  # Get ID without committing
        return db_txn

    def create_series(
        self,
        owner_id: str,
        transaction_type: TransactionType,
        description: str,
        installments: Sequence[Installment],
        recurrence: RecurrenceConfig,
        next_date: Optional[date],
        issue_date: Optional[date] = None,
        account_code: Optional[str] = None,
        cost_center_id: Optional[str] = None,
        bank_account_id: Optional[uuid.UUID] = None,
    ) -> List[FinancialTransaction]:
        """
        Batch-insert a recurring series.

        The first installment is the parent and carries the recurrence
        fields; the rest point back at it through recurrence_parent_id.
        """
        if not installments:
            return []

        # Keep the parent's issue→due gap on every installment
        first_due = installments[0].due_date
        gap = first_due - (issue_date or first_due)
        common = dict(
            owner_id=owner_id,
            transaction_type=transaction_type,
            description=description,
            account_code=account_code,
            cost_center_id=cost_center_id,
            bank_account_id=bank_account_id,
        )

        parent = self.create_transaction(
            total_amount=installments[0].amount,
            due_date=first_due,
            issue_date=first_due - gap,
            installment_number=installments[0].installment_number,
            total_installments=len(installments),
            recurrence_type=RecurrenceType(recurrence.type).value,
            recurrence_status=RecurrenceStatus(recurrence.status).value,
            recurrence_start_date=recurrence.start_date or first_due,
            recurrence_end_date=recurrence.end_date,
            recurrence_next_date=next_date,
            **common,
        )

        created = [parent]
        for inst in installments[1:]:
            db_txn = FinancialTransaction(
                total_amount=quantize_money(inst.amount),
                amount_settled=ZERO,
                due_date=inst.due_date,
                issue_date=inst.due_date - gap,
                status=TransactionStatus.PENDENTE.value,
                installment_number=inst.installment_number,
                total_installments=len(installments),
                recurrence_type=RecurrenceType.UNICA.value,
                recurrence_parent_id=parent.id,
                **{**common, "transaction_type": TransactionType(transaction_type).value},
            )
            self.db.add(db_txn)
            created.append(db_txn)

        self.db.flush()
        return created

    def get_transaction(
        self,
        transaction_id: uuid.UUID,
        owner_id: str,
        for_update: bool = False,
    ) -> Optional[FinancialTransaction]:
        """Fetch a transaction scoped to its owner; for_update takes a row lock"""
        query = self.db.query(FinancialTransaction).filter(
            FinancialTransaction.id == transaction_id,
            FinancialTransaction.owner_id == owner_id,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_transactions_in_period(self, owner_id: str, start: date, end: date) -> List[FinancialTransaction]:
        """Transactions issued within [start, end]"""
        return (
            self.db.query(FinancialTransaction)
            .filter(
                FinancialTransaction.owner_id == owner_id,
                FinancialTransaction.issue_date >= start,
                FinancialTransaction.issue_date <= end,
            )
            .order_by(FinancialTransaction.issue_date)
            .all()
        )

    def get_due_recurrences(self, today: date) -> List[FinancialTransaction]:
        """Active series whose next date has arrived (candidates for materialization)"""
        return (
            self.db.query(FinancialTransaction)
            .filter(
                FinancialTransaction.recurrence_type != RecurrenceType.UNICA.value,
                FinancialTransaction.recurrence_status == RecurrenceStatus.ATIVA.value,
                FinancialTransaction.recurrence_next_date.isnot(None),
                FinancialTransaction.recurrence_next_date <= today,
            )
            .order_by(FinancialTransaction.recurrence_next_date)
            .with_for_update()
            .all()
        )

    def count_series_installments(self, parent_id: uuid.UUID) -> int:
        """Installments in a series, parent included"""
        children = (
            self.db.query(FinancialTransaction)
            .filter(FinancialTransaction.recurrence_parent_id == parent_id)
            .count()
        )
        return children + 1

    def apply_settlement(self, db_txn: FinancialTransaction, result: SettlementResult) -> FinancialTransaction:
        """Store the new settled amount and status"""
        db_txn.amount_settled = result.amount_settled
        db_txn.status = result.status.value
        self.db.flush()
        return db_txn

    @staticmethod
    def to_statement_source(db_txn: FinancialTransaction) -> StatementSource:
        return StatementSource(
            transaction_id=str(db_txn.id),
            transaction_type=TransactionType(db_txn.transaction_type),
            account_code=db_txn.account_code,
            total_amount=quantize_money(db_txn.total_amount),
            issue_date=db_txn.issue_date,
            status=TransactionStatus(db_txn.status),
        )


class AllocationRepository:
    """Repository for cost-center allocations (replace-all semantics)"""

    def __init__(self, db: Session):
        self.db = db

    def get_allocations(self, db_txn: FinancialTransaction) -> List[CostAllocation]:
        return (
            self.db.query(CostAllocation)
            .filter(
                CostAllocation.transaction_type == db_txn.transaction_type,
                CostAllocation.transaction_id == db_txn.id,
            )
            .order_by(CostAllocation.position)
            .all()
        )

    def delete_allocations(self, db_txn: FinancialTransaction) -> int:
        """Remove every allocation of a transaction; returns rows removed"""
        deleted = (
            self.db.query(CostAllocation)
            .filter(
                CostAllocation.transaction_type == db_txn.transaction_type,
                CostAllocation.transaction_id == db_txn.id,
            )
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return deleted

    def replace_allocations(
        self,
        db_txn: FinancialTransaction,
        allocations: Sequence[AllocationAmount],
    ) -> List[CostAllocation]:
        """Delete existing allocations, then insert the new set"""
        self.delete_allocations(db_txn)

        created = []
        for position, alloc in enumerate(allocations):
            db_alloc = CostAllocation(
                owner_id=db_txn.owner_id,
                transaction_type=db_txn.transaction_type,
                transaction_id=db_txn.id,
                cost_center_id=alloc.cost_center_id,
                percentage=alloc.percentage,
                amount=alloc.amount,
                position=position,
            )
            self.db.add(db_alloc)
            created.append(db_alloc)

        self.db.flush()
        return created

    def get_owner_allocations(self, owner_id: str) -> List[StoredAllocation]:
        rows = self.db.query(CostAllocation).filter(CostAllocation.owner_id == owner_id).all()
        return [
            StoredAllocation(
                transaction_type=TransactionType(row.transaction_type),
                transaction_id=str(row.transaction_id),
                cost_center_id=row.cost_center_id,
                percentage=row.percentage,
            )
            for row in rows
        ]

    @staticmethod
    def to_entries(rows: Sequence[CostAllocation]) -> List[AllocationEntry]:
        return [AllocationEntry(cost_center_id=row.cost_center_id, percentage=row.percentage) for row in rows]


class PaymentRepository:
    """Repository for settlement records (insert only)"""

    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, owner_id: str, record: PaymentRecord) -> Payment:
        db_payment = Payment(
            owner_id=owner_id,
            transaction_type=TransactionType(record.transaction_type).value,
            transaction_id=uuid.UUID(record.transaction_id),
            payment_method=record.method.value,
            bank_account_id=uuid.UUID(record.bank_account_id) if record.bank_account_id else None,
            amount=quantize_money(record.amount),
            payment_date=record.payment_date,
            notes=record.notes,
        )
        self.db.add(db_payment)
        self.db.flush()
        return db_payment

    def get_payments(self, db_txn: FinancialTransaction) -> List[Payment]:
        return (
            self.db.query(Payment)
            .filter(
                Payment.transaction_type == db_txn.transaction_type,
                Payment.transaction_id == db_txn.id,
            )
            .order_by(Payment.payment_date, Payment.created_at)
            .all()
        )


class BankAccountRepository:
    """Repository for bank accounts"""

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, owner_id: str, name: str, opening_balance: Decimal = ZERO) -> BankAccount:
        db_account = BankAccount(owner_id=owner_id, name=name, balance=quantize_money(opening_balance))
        self.db.add(db_account)
        self.db.flush()
        return db_account

    def get_account(
        self,
        account_id: uuid.UUID,
        owner_id: str,
        for_update: bool = False,
    ) -> Optional[BankAccount]:
        query = self.db.query(BankAccount).filter(
            BankAccount.id == account_id,
            BankAccount.owner_id == owner_id,
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def adjust_balance(self, db_account: BankAccount, delta: Decimal) -> BankAccount:
        """Credit (positive delta) or debit (negative delta) the account"""
        db_account.balance = quantize_money(db_account.balance) + quantize_money(delta)
        self.db.flush()
        return db_account
