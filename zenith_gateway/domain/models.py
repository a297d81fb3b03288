"""Domain models - pure Python enums and dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class TransactionStatus(str, Enum):
    """Settlement status of a payable/receivable"""

    PENDENTE = "pendente"
    PARCIAL = "parcial"
    PAGO = "pago"
    VENCIDO = "vencido"  # display-only, derived from due date
    CANCELADO = "cancelado"


class RecurrenceType(str, Enum):
    UNICA = "unica"
    MENSAL = "mensal"
    TRIMESTRAL = "trimestral"
    ANUAL = "anual"


class RecurrenceStatus(str, Enum):
    ATIVA = "ativa"
    PAUSADA = "pausada"
    CONCLUIDA = "concluida"


class PaymentMethod(str, Enum):
    DINHEIRO = "dinheiro"
    PIX = "pix"
    CARTAO_CREDITO = "cartao_credito"
    CARTAO_DEBITO = "cartao_debito"
    BOLETO = "boleto"
    TRANSFERENCIA = "transferencia"
    CHEQUE = "cheque"
    OUTROS = "outros"


@dataclass(frozen=True)
class AllocationEntry:
    """Share of a transaction assigned to one cost center"""

    cost_center_id: str
    percentage: Decimal


@dataclass
class AllocationAmount:
    """Allocation entry with its computed monetary amount"""

    cost_center_id: str
    percentage: Decimal
    amount: Decimal


@dataclass
class Installment:
    """Single installment of a recurring series"""

    installment_number: int
    due_date: date
    amount: Decimal


@dataclass
class RecurrenceConfig:
    """Recurrence parameters stored inline on the parent transaction"""

    type: RecurrenceType
    count: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: RecurrenceStatus = RecurrenceStatus.ATIVA


@dataclass
class Transaction:
    """Payable or receivable as seen by the settlement rules"""

    transaction_type: TransactionType
    total_amount: Decimal
    amount_settled: Decimal = Decimal("0.00")
    status: TransactionStatus = TransactionStatus.PENDENTE
    due_date: Optional[date] = None


@dataclass(frozen=True)
class PaymentRecord:
    """Immutable record of one settlement action (baixa)"""

    transaction_type: TransactionType
    transaction_id: str
    method: PaymentMethod
    amount: Decimal
    payment_date: date
    bank_account_id: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class BalanceAdjustment:
    """Instruction for the bank-account ledger: positive credits, negative debits"""

    bank_account_id: str
    delta: Decimal


@dataclass
class SettlementResult:
    """Outcome of applying one payment to a transaction"""

    amount_settled: Decimal
    status: TransactionStatus
    remaining: Decimal
    balance_adjustment: Optional[BalanceAdjustment] = None


@dataclass
class NextOccurrence:
    """Next installment to materialize for an active recurring series"""

    due_date: date
    issue_date: date
    following_date: Optional[date]
    completes_series: bool


@dataclass
class StatementLine:
    """One account line of an income statement"""

    account_code: str
    amount: Decimal


@dataclass
class IncomeStatement:
    """DRE: revenues minus expenses over a period"""

    start_date: date
    end_date: date
    revenues: list[StatementLine] = field(default_factory=list)
    expenses: list[StatementLine] = field(default_factory=list)
    total_revenue: Decimal = Decimal("0.00")
    total_expense: Decimal = Decimal("0.00")
    net_result: Decimal = Decimal("0.00")
    cost_center_id: Optional[str] = None
