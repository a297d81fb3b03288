"""SQLAlchemy ORM models for payables/receivables, allocations, payments and bank accounts"""

import uuid
from sqlalchemy import Column, Text, Numeric, DateTime, Date, Integer, ForeignKey, Uuid, Index
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class FinancialTransaction(Base):
    """Payable (conta a pagar) or receivable (conta a receber), with inline recurrence fields"""

    __tablename__ = "financial_transaction"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Text, nullable=False, index=True)
    transaction_type = Column(Text, nullable=False)  # payable | receivable
    description = Column(Text, nullable=False)
    account_code = Column(Text, nullable=True)  # chart-of-accounts code for DRE
    cost_center_id = Column(Text, nullable=True)  # legacy single cost center
    total_amount = Column(Numeric(15, 2), nullable=False)
    amount_settled = Column(Numeric(15, 2), nullable=False, default=0)
    due_date = Column(Date, nullable=False, index=True)
    issue_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="pendente", index=True)
    bank_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_account.id"), nullable=True)

    # Installments
    installment_number = Column(Integer, nullable=True)
    total_installments = Column(Integer, nullable=True)

    # Recurrence
    recurrence_type = Column(Text, nullable=False, default="unica")
    recurrence_status = Column(Text, nullable=True)
    recurrence_start_date = Column(Date, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    recurrence_next_date = Column(Date, nullable=True, index=True)
    recurrence_parent_id = Column(Uuid(as_uuid=True), nullable=True, index=True)  # back-reference only

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    allocations = relationship("CostAllocation", back_populates="transaction", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="transaction", cascade="all, delete-orphan")


class CostAllocation(Base):
    """Share of a transaction assigned to a cost center (rateio)"""

    __tablename__ = "cost_allocation"
    __table_args__ = (Index("idx_cost_allocation_transaction", "transaction_type", "transaction_id"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Text, nullable=False, index=True)
    transaction_type = Column(Text, nullable=False)
    transaction_id = Column(
        Uuid(as_uuid=True), ForeignKey("financial_transaction.id", ondelete="CASCADE"), nullable=False
    )
    cost_center_id = Column(Text, nullable=False, index=True)
    percentage = Column(Numeric(5, 2), nullable=False)
    amount = Column(Numeric(15, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # input order
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("FinancialTransaction", back_populates="allocations")


class Payment(Base):
    """Settlement record (baixa) - insert only"""

    __tablename__ = "payment"
    __table_args__ = (Index("idx_payment_transaction", "transaction_type", "transaction_id"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Text, nullable=False, index=True)
    transaction_type = Column(Text, nullable=False)
    transaction_id = Column(
        Uuid(as_uuid=True), ForeignKey("financial_transaction.id", ondelete="CASCADE"), nullable=False
    )
    payment_method = Column(Text, nullable=False)
    bank_account_id = Column(Uuid(as_uuid=True), ForeignKey("bank_account.id"), nullable=True, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("FinancialTransaction", back_populates="payments")


class BankAccount(Base):
    """Bank account whose balance moves with settlements"""

    __tablename__ = "bank_account"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    balance = Column(Numeric(15, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
