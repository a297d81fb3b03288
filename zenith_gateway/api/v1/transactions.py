"""Payable/receivable creation endpoints - single transactions and recurring series"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from zenith_gateway.api.v1.schemas import (
    SeriesCreateRequest,
    SeriesResponse,
    TransactionCreateRequest,
    TransactionResponse,
)
from zenith_gateway.api.v1.allocations import check_allocations, save_allocations, to_entries
from zenith_gateway.api.v1.errors import domain_http_error, parse_uuid
from zenith_gateway.api.dependencies import get_clock, get_owner_id, get_request_id
from zenith_gateway.infrastructure.database.session import get_db
from zenith_gateway.infrastructure.database.repositories import (
    AllocationRepository,
    BankAccountRepository,
    TransactionRepository,
)
from zenith_gateway.infrastructure.observability.metrics import installments_generated_counter
from zenith_gateway.domain.allocation import legacy_allocation
from zenith_gateway.domain.clock import Clock
from zenith_gateway.domain.exceptions import ValidationError, RoundingInvariantViolation
from zenith_gateway.domain.installments import InstallmentPreview
from zenith_gateway.domain.models import AllocationEntry, RecurrenceConfig, RecurrenceStatus, RecurrenceType
from zenith_gateway.domain.recurrence import next_date

router = APIRouter()


def _resolve_allocations(request_body) -> Optional[List[AllocationEntry]]:
    """Explicit allocation list wins; a lone cost center becomes a 100% allocation"""
    if request_body.allocations is not None:
        entries = to_entries(request_body.allocations)
        check_allocations(entries)
        return entries
    if request_body.cost_center_id:
        return [legacy_allocation(request_body.cost_center_id)]
    return None


def _check_bank_account(db: Session, request_body, owner_id: str) -> None:
    if request_body.bank_account_id is None:
        return
    if not BankAccountRepository(db).get_account(request_body.bank_account_id, owner_id):
        raise HTTPException(status_code=404, detail="Bank account not found")


def _validate_recurrence(config: RecurrenceConfig) -> None:
    """Recurring series need a cadence, a count and a start date"""
    errors = []
    if config.type is RecurrenceType.UNICA:
        errors.append("Recorrência única deve ser criada como lançamento simples")
    if config.count is None or config.count < 1:
        errors.append("A quantidade de parcelas deve ser pelo menos 1")
    if config.start_date is None:
        errors.append("A data inicial da recorrência é obrigatória")
    if config.start_date and config.end_date and config.end_date < config.start_date:
        errors.append("A data final da recorrência deve ser posterior à data inicial")
    if errors:
        raise ValidationError(errors)


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    request_body: TransactionCreateRequest,
    request: Request,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Create a single payable or receivable.

    Allocations, when given, are validated before anything is written and
    stored with amounts that add up exactly to the total.
    """
    request_id = get_request_id(request)
    _check_bank_account(db, request_body, owner_id)

    try:
        entries = _resolve_allocations(request_body)

        db_txn = TransactionRepository(db).create_transaction(
            owner_id=owner_id,
            transaction_type=request_body.transaction_type,
            description=request_body.description,
            total_amount=request_body.total_amount,
            due_date=request_body.due_date,
            issue_date=request_body.issue_date,
            account_code=request_body.account_code,
            cost_center_id=request_body.cost_center_id,
            bank_account_id=request_body.bank_account_id,
        )
        if entries:
            save_allocations(AllocationRepository(db), db_txn, entries)

        db.commit()

    except ValidationError as e:
        db.rollback()
        logging.warning(f"Invalid transaction: {e}", extra={"request_id": request_id})
        raise domain_http_error(e)

    except RoundingInvariantViolation as e:
        db.rollback()
        logging.error(f"Allocation rounding invariant violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return TransactionResponse.from_row(db_txn, clock.today())


@router.post("/transactions/series", response_model=SeriesResponse, status_code=201)
def create_series(
    request_body: SeriesCreateRequest,
    request: Request,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Create a recurring series in one batch.

    Flow:
    1. Build the installment preview (full base amount per installment)
    2. Apply client edits by installment number
    3. Insert parent + installments; each installment gets its own allocations
    4. With an end date, the parent stays active and the recurrence job keeps
       materializing installments until the end date; otherwise the series is
       complete on creation
    """
    request_id = get_request_id(request)
    _check_bank_account(db, request_body, owner_id)

    recurrence = RecurrenceConfig(
        type=request_body.recurrence.type,
        count=request_body.recurrence.count,
        start_date=request_body.recurrence.start_date,
        end_date=request_body.recurrence.end_date,
    )

    try:
        _validate_recurrence(recurrence)
        entries = _resolve_allocations(request_body)

        preview = InstallmentPreview.build(
            recurrence.type, recurrence.count, recurrence.start_date, request_body.base_amount
        )
        for edited in request_body.installments or []:
            if edited.installment_number > len(preview):
                raise ValidationError([f"Parcela {edited.installment_number} não existe na série"])
            preview.edit(edited.installment_number - 1, due_date=edited.due_date, amount=edited.amount)

        installments = preview.installments
        following = next_date(installments[-1].due_date, recurrence.type)
        if recurrence.end_date is not None and following <= recurrence.end_date:
            recurrence.status = RecurrenceStatus.ATIVA
        else:
            recurrence.status = RecurrenceStatus.CONCLUIDA
            following = None

        created = TransactionRepository(db).create_series(
            owner_id=owner_id,
            transaction_type=request_body.transaction_type,
            description=request_body.description,
            installments=installments,
            recurrence=recurrence,
            next_date=following,
            issue_date=request_body.issue_date,
            account_code=request_body.account_code,
            cost_center_id=request_body.cost_center_id,
            bank_account_id=request_body.bank_account_id,
        )

        if entries:
            alloc_repo = AllocationRepository(db)
            for db_txn in created:
                save_allocations(alloc_repo, db_txn, entries)

        db.commit()

    except ValidationError as e:
        db.rollback()
        logging.warning(f"Invalid recurring series: {e}", extra={"request_id": request_id})
        raise domain_http_error(e)

    except RoundingInvariantViolation as e:
        db.rollback()
        logging.error(f"Allocation rounding invariant violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    installments_generated_counter.labels(recurrence_type=recurrence.type.value).inc(len(created))
    logging.info(
        "Recurring series created",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "parent_id": str(created[0].id),
            "installments": len(created),
            "recurrence_status": recurrence.status.value,
        },
    )

    today = clock.today()
    return SeriesResponse(
        transactions=[TransactionResponse.from_row(db_txn, today) for db_txn in created],
        total=preview.total,
    )


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Retrieve a payable/receivable.

    Returns:
        Stored status plus display status (vencido when overdue) and remaining balance
    """
    db_txn = TransactionRepository(db).get_transaction(parse_uuid(transaction_id, "transaction"), owner_id)
    if not db_txn:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionResponse.from_row(db_txn, clock.today())
