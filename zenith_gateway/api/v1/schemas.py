"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, UUID4

from zenith_gateway.config import settings
from zenith_gateway.domain.models import (
    PaymentMethod,
    RecurrenceStatus,
    RecurrenceType,
    TransactionStatus,
    TransactionType,
)
from zenith_gateway.domain.settlement import display_status, remaining_balance
from zenith_gateway.infrastructure.database.repositories import to_domain
from zenith_gateway.utils.money import quantize_money


class AllocationInput(BaseModel):
    """One cost-center share as submitted by the client"""

    cost_center_id: str = Field("", description="Cost center identifier")
    percentage: Decimal = Field(..., max_digits=5, decimal_places=2, description="Share of the total, 0 < p ≤ 100")


class AllocationSchema(BaseModel):
    """Allocation with its computed amount"""

    cost_center_id: str
    percentage: Decimal
    amount: Decimal


class AllocationRequest(BaseModel):
    """Request body for PUT /v1/transactions/{id}/allocations"""

    allocations: List[AllocationInput]


class AllocationsResponse(BaseModel):
    """Response for allocation endpoints"""

    transaction_id: str
    total_amount: Decimal
    allocations: List[AllocationSchema]


class EqualSplitRequest(BaseModel):
    """Request body for POST /v1/allocations/equal-split"""

    cost_center_ids: List[str]


class EqualSplitResponse(BaseModel):
    allocations: List[AllocationInput]


class TransactionBase(BaseModel):
    """Fields shared by single and recurring transaction creation"""

    transaction_type: TransactionType
    description: str = Field(..., min_length=1, max_length=500)
    issue_date: Optional[date] = None
    account_code: Optional[str] = None
    cost_center_id: Optional[str] = Field(None, description="Single cost center (stored as a 100% allocation)")
    bank_account_id: Optional[UUID4] = None
    allocations: Optional[List[AllocationInput]] = None


class TransactionCreateRequest(TransactionBase):
    """Request body for POST /v1/transactions"""

    total_amount: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    due_date: date


class RecurrenceSchema(BaseModel):
    """Recurrence parameters"""

    type: RecurrenceType
    count: Optional[int] = Field(
        None, le=settings.max_installments, description="Number of installments (required unless unica)"
    )
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class InstallmentSchema(BaseModel):
    """Single installment in a preview or series"""

    installment_number: int = Field(..., ge=1)
    due_date: date
    amount: Decimal


class SeriesCreateRequest(TransactionBase):
    """Request body for POST /v1/transactions/series"""

    base_amount: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    recurrence: RecurrenceSchema
    installments: Optional[List[InstallmentSchema]] = Field(
        None, description="Edited preview rows; override generated ones by installment_number"
    )


class InstallmentOverride(BaseModel):
    """Edit of one preview row (0-based index)"""

    index: int = Field(..., ge=0)
    due_date: Optional[date] = None
    amount: Optional[Decimal] = None


class PreviewRequest(BaseModel):
    """Request body for POST /v1/recurrences/preview"""

    recurrence_type: RecurrenceType
    count: Optional[int] = Field(None, le=settings.max_installments)
    start_date: Optional[date] = None
    base_amount: Decimal = Field(..., ge=0)
    overrides: List[InstallmentOverride] = Field(default_factory=list)


class PreviewResponse(BaseModel):
    """Response for POST /v1/recurrences/preview"""

    installments: List[InstallmentSchema]
    count: int
    total: Decimal


class TransactionResponse(BaseModel):
    """Payable/receivable as returned by the API"""

    id: str
    transaction_type: TransactionType
    description: str
    total_amount: Decimal
    amount_settled: Decimal
    remaining: Decimal
    status: TransactionStatus
    display_status: TransactionStatus
    due_date: date
    issue_date: date
    account_code: Optional[str] = None
    bank_account_id: Optional[str] = None
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    recurrence_type: RecurrenceType
    recurrence_status: Optional[RecurrenceStatus] = None
    recurrence_next_date: Optional[date] = None
    recurrence_end_date: Optional[date] = None
    recurrence_parent_id: Optional[str] = None

    @classmethod
    def from_row(cls, db_txn, today: date) -> "TransactionResponse":
        txn = to_domain(db_txn)
        return cls(
            id=str(db_txn.id),
            transaction_type=txn.transaction_type,
            description=db_txn.description,
            total_amount=txn.total_amount,
            amount_settled=txn.amount_settled,
            remaining=remaining_balance(txn),
            status=txn.status,
            display_status=display_status(txn.status, txn.due_date, today),
            due_date=db_txn.due_date,
            issue_date=db_txn.issue_date,
            account_code=db_txn.account_code,
            bank_account_id=str(db_txn.bank_account_id) if db_txn.bank_account_id else None,
            installment_number=db_txn.installment_number,
            total_installments=db_txn.total_installments,
            recurrence_type=db_txn.recurrence_type,
            recurrence_status=db_txn.recurrence_status,
            recurrence_next_date=db_txn.recurrence_next_date,
            recurrence_end_date=db_txn.recurrence_end_date,
            recurrence_parent_id=str(db_txn.recurrence_parent_id) if db_txn.recurrence_parent_id else None,
        )


class SeriesResponse(BaseModel):
    """Response for POST /v1/transactions/series"""

    transactions: List[TransactionResponse]
    total: Decimal


class SettlementRequest(BaseModel):
    """Request body for POST /v1/transactions/{id}/settlements"""

    payment_method: PaymentMethod
    amount: Decimal = Field(..., max_digits=15, decimal_places=2)
    payment_date: date
    bank_account_id: Optional[UUID4] = None
    notes: Optional[str] = None


class PaymentSchema(BaseModel):
    """Recorded payment (baixa)"""

    id: str
    payment_method: PaymentMethod
    amount: Decimal
    payment_date: date
    bank_account_id: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_row(cls, db_payment) -> "PaymentSchema":
        return cls(
            id=str(db_payment.id),
            payment_method=db_payment.payment_method,
            amount=quantize_money(db_payment.amount),
            payment_date=db_payment.payment_date,
            bank_account_id=str(db_payment.bank_account_id) if db_payment.bank_account_id else None,
            notes=db_payment.notes,
        )


class SettlementResponse(BaseModel):
    """Response for POST /v1/transactions/{id}/settlements"""

    transaction: TransactionResponse
    payment: PaymentSchema


class PaymentHistoryResponse(BaseModel):
    """Response for GET /v1/transactions/{id}/settlements"""

    transaction_id: str
    remaining: Decimal
    payments: List[PaymentSchema]


class RecurrenceRunResponse(BaseModel):
    """Response for POST /v1/recurrences/run"""

    run_date: date
    generated: int
    completed_series: int
    transaction_ids: List[str]


class BankAccountCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    opening_balance: Decimal = Field(Decimal("0.00"), max_digits=15, decimal_places=2)


class BankAccountResponse(BaseModel):
    id: str
    name: str
    balance: Decimal


class StatementLineSchema(BaseModel):
    account_code: str
    amount: Decimal


class IncomeStatementResponse(BaseModel):
    """Response for GET /v1/reports/dre"""

    start_date: date
    end_date: date
    cost_center_id: Optional[str] = None
    revenues: List[StatementLineSchema]
    expenses: List[StatementLineSchema]
    total_revenue: Decimal
    total_expense: Decimal
    net_result: Decimal
