"""Cost-center allocation endpoints (replace-all semantics)"""

import logging
from typing import List, Sequence
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from zenith_gateway.api.v1.schemas import (
    AllocationInput,
    AllocationRequest,
    AllocationSchema,
    AllocationsResponse,
    EqualSplitRequest,
    EqualSplitResponse,
)
from zenith_gateway.api.v1.errors import domain_http_error, parse_uuid
from zenith_gateway.api.dependencies import get_owner_id, get_request_id
from zenith_gateway.infrastructure.database.session import get_db
from zenith_gateway.infrastructure.database.models import CostAllocation, FinancialTransaction
from zenith_gateway.infrastructure.database.repositories import AllocationRepository, TransactionRepository
from zenith_gateway.infrastructure.observability.metrics import (
    allocation_validation_failures_counter,
    rounding_violation_counter,
)
from zenith_gateway.domain.allocation import compute_amounts, equal_split, validate_allocations
from zenith_gateway.domain.exceptions import ValidationError, RoundingInvariantViolation
from zenith_gateway.domain.models import AllocationEntry
from zenith_gateway.utils.money import quantize_money

router = APIRouter()


def to_entries(inputs: Sequence[AllocationInput]) -> List[AllocationEntry]:
    return [AllocationEntry(cost_center_id=a.cost_center_id, percentage=a.percentage) for a in inputs]


def check_allocations(entries: Sequence[AllocationEntry]) -> None:
    """validate_allocations with failure metrics"""
    try:
        validate_allocations(entries)
    except ValidationError:
        allocation_validation_failures_counter.inc()
        raise


def save_allocations(
    repo: AllocationRepository,
    db_txn: FinancialTransaction,
    entries: Sequence[AllocationEntry],
) -> List[CostAllocation]:
    """Compute amounts against the transaction total and replace stored allocations"""
    try:
        amounts = compute_amounts(entries, db_txn.total_amount)
    except RoundingInvariantViolation:
        rounding_violation_counter.inc()
        raise
    return repo.replace_allocations(db_txn, amounts)


def allocations_response(db_txn: FinancialTransaction, rows: Sequence[CostAllocation]) -> AllocationsResponse:
    return AllocationsResponse(
        transaction_id=str(db_txn.id),
        total_amount=quantize_money(db_txn.total_amount),
        allocations=[
            AllocationSchema(
                cost_center_id=row.cost_center_id,
                percentage=quantize_money(row.percentage),
                amount=quantize_money(row.amount),
            )
            for row in rows
        ],
    )


def _load_transaction(db: Session, transaction_id: str, owner_id: str) -> FinancialTransaction:
    db_txn = TransactionRepository(db).get_transaction(parse_uuid(transaction_id, "transaction"), owner_id)
    if not db_txn:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return db_txn


@router.get("/transactions/{transaction_id}/allocations", response_model=AllocationsResponse)
def get_allocations(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Retrieve the cost-center allocations of a payable/receivable"""
    db_txn = _load_transaction(db, transaction_id, owner_id)
    rows = AllocationRepository(db).get_allocations(db_txn)
    return allocations_response(db_txn, rows)


@router.put("/transactions/{transaction_id}/allocations", response_model=AllocationsResponse)
def replace_allocations(
    transaction_id: str,
    request_body: AllocationRequest,
    request: Request,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    Replace every allocation of a transaction.

    Percentages are validated as a whole (all violations reported together),
    amounts are computed against the transaction total so they add up to it
    exactly, then old rows are deleted and the new set inserted.
    """
    request_id = get_request_id(request)
    db_txn = _load_transaction(db, transaction_id, owner_id)
    entries = to_entries(request_body.allocations)

    try:
        check_allocations(entries)
        rows = save_allocations(AllocationRepository(db), db_txn, entries)
        db.commit()
    except ValidationError as e:
        db.rollback()
        logging.warning(f"Invalid allocations: {e}", extra={"request_id": request_id})
        raise domain_http_error(e)
    except RoundingInvariantViolation as e:
        db.rollback()
        logging.error(f"Allocation rounding invariant violated: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return allocations_response(db_txn, rows)


@router.delete("/transactions/{transaction_id}/allocations", status_code=204)
def delete_allocations(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Remove every allocation of a transaction"""
    db_txn = _load_transaction(db, transaction_id, owner_id)
    AllocationRepository(db).delete_allocations(db_txn)
    db.commit()
    return Response(status_code=204)


@router.post("/allocations/equal-split", response_model=EqualSplitResponse)
def create_equal_split(request_body: EqualSplitRequest):
    """Suggest an even percentage split across cost centers"""
    entries = equal_split(request_body.cost_center_ids)
    return EqualSplitResponse(
        allocations=[AllocationInput(cost_center_id=e.cost_center_id, percentage=e.percentage) for e in entries]
    )
