"""Recurrence endpoints - installment preview and materialization of due installments"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from zenith_gateway.api.v1.schemas import (
    InstallmentSchema,
    PreviewRequest,
    PreviewResponse,
    RecurrenceRunResponse,
)
from zenith_gateway.api.v1.errors import domain_http_error
from zenith_gateway.api.dependencies import get_clock, get_request_id
from zenith_gateway.infrastructure.database.session import get_db
from zenith_gateway.infrastructure.database.models import FinancialTransaction
from zenith_gateway.infrastructure.database.repositories import AllocationRepository, TransactionRepository
from zenith_gateway.infrastructure.observability.metrics import recurrence_materialized_counter
from zenith_gateway.domain.allocation import recalculate_allocations
from zenith_gateway.domain.clock import Clock
from zenith_gateway.domain.exceptions import ValidationError
from zenith_gateway.domain.installments import InstallmentPreview
from zenith_gateway.domain.models import RecurrenceStatus
from zenith_gateway.domain.recurrence import plan_next_occurrence, should_generate_next

router = APIRouter()


@router.post("/recurrences/preview", response_model=PreviewResponse)
def preview_installments(request_body: PreviewRequest):
    """
    Preview the installments of a recurring series before saving.

    Each installment carries the full base amount; overrides edit single rows.
    The total is informational only.
    """
    preview = InstallmentPreview.build(
        request_body.recurrence_type,
        request_body.count,
        request_body.start_date,
        request_body.base_amount,
    )
    for override in request_body.overrides:
        if override.index >= len(preview):
            raise domain_http_error(ValidationError([f"Parcela {override.index + 1} não existe na prévia"]))
        preview.edit(override.index, due_date=override.due_date, amount=override.amount)

    return PreviewResponse(
        installments=[
            InstallmentSchema(
                installment_number=inst.installment_number,
                due_date=inst.due_date,
                amount=inst.amount,
            )
            for inst in preview.installments
        ],
        count=len(preview),
        total=preview.total,
    )


def _series_is_due(parent: FinancialTransaction, today) -> bool:
    return should_generate_next(
        parent.recurrence_type,
        parent.recurrence_status,
        parent.recurrence_next_date,
        parent.recurrence_end_date,
        today,
    )


@router.post("/recurrences/run", response_model=RecurrenceRunResponse)
def run_recurrences(
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Materialize the next installment of every active series that is due.

    Called by an external scheduler. A series that missed runs catches up,
    one installment per elapsed period. Each new installment copies the
    parent's fields and allocation percentages and points back at the parent.
    A series whose next date passes its end date is marked concluida.
    """
    request_id = get_request_id(request)
    today = clock.today()
    txn_repo = TransactionRepository(db)
    alloc_repo = AllocationRepository(db)

    generated_ids = []
    completed = 0

    try:
        for parent in txn_repo.get_due_recurrences(today):
            parent_allocations = AllocationRepository.to_entries(alloc_repo.get_allocations(parent))

            while _series_is_due(parent, today):
                plan = plan_next_occurrence(
                    parent.recurrence_type,
                    parent.recurrence_next_date,
                    parent.due_date,
                    parent.issue_date,
                    parent.recurrence_end_date,
                )
                child = txn_repo.create_transaction(
                    owner_id=parent.owner_id,
                    transaction_type=parent.transaction_type,
                    description=parent.description,
                    total_amount=parent.total_amount,
                    due_date=plan.due_date,
                    issue_date=plan.issue_date,
                    account_code=parent.account_code,
                    cost_center_id=parent.cost_center_id,
                    bank_account_id=parent.bank_account_id,
                    installment_number=txn_repo.count_series_installments(parent.id) + 1,
                    recurrence_parent_id=parent.id,
                )
                if parent_allocations:
                    alloc_repo.replace_allocations(
                        child, recalculate_allocations(parent_allocations, child.total_amount)
                    )

                parent.recurrence_next_date = plan.following_date
                if plan.completes_series:
                    parent.recurrence_status = RecurrenceStatus.CONCLUIDA.value
                    completed += 1

                generated_ids.append(str(child.id))
                recurrence_materialized_counter.labels(transaction_type=parent.transaction_type).inc()

            # Past the end date with nothing left to generate
            if (
                parent.recurrence_status == RecurrenceStatus.ATIVA.value
                and parent.recurrence_end_date is not None
                and today > parent.recurrence_end_date
            ):
                parent.recurrence_status = RecurrenceStatus.CONCLUIDA.value
                parent.recurrence_next_date = None
                completed += 1

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Recurrence run failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        "Recurrence run completed",
        extra={
            "request_id": request_id,
            "run_date": today.isoformat(),
            "generated": len(generated_ids),
            "completed_series": completed,
        },
    )

    return RecurrenceRunResponse(
        run_date=today,
        generated=len(generated_ids),
        completed_series=completed,
        transaction_ids=generated_ids,
    )
