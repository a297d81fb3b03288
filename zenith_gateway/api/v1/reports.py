"""GET /v1/reports/dre - Income statement (Demonstração de Resultado do Exercício)"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from zenith_gateway.api.v1.schemas import IncomeStatementResponse, StatementLineSchema
from zenith_gateway.api.v1.errors import domain_http_error
from zenith_gateway.api.dependencies import get_owner_id
from zenith_gateway.config import settings
from zenith_gateway.infrastructure.database.session import get_db
from zenith_gateway.infrastructure.database.repositories import AllocationRepository, TransactionRepository
from zenith_gateway.domain.exceptions import ValidationError
from zenith_gateway.domain.reports import build_income_statement

router = APIRouter()


@router.get("/reports/dre", response_model=IncomeStatementResponse)
def get_income_statement(
    start_date: date = Query(..., description="First issue date included"),
    end_date: date = Query(..., description="Last issue date included"),
    cost_center_id: Optional[str] = Query(None, description="Weight transactions by this cost center's share"),
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    Revenues (receivables) minus expenses (payables) by account over a period.

    Cancelled transactions are excluded. With cost_center_id, each
    transaction counts with the percentage allocated to that center.
    """
    if (end_date - start_date).days > settings.dre_max_range_days:
        raise domain_http_error(ValidationError(["Período do relatório muito longo"]))

    txn_repo = TransactionRepository(db)
    rows = txn_repo.get_transactions_in_period(owner_id, start_date, end_date)
    allocations = AllocationRepository(db).get_owner_allocations(owner_id) if cost_center_id else []

    try:
        statement = build_income_statement(
            [txn_repo.to_statement_source(row) for row in rows],
            allocations,
            start_date,
            end_date,
            cost_center_id=cost_center_id,
        )
    except ValidationError as e:
        raise domain_http_error(e)

    return IncomeStatementResponse(
        start_date=statement.start_date,
        end_date=statement.end_date,
        cost_center_id=statement.cost_center_id,
        revenues=[StatementLineSchema(account_code=l.account_code, amount=l.amount) for l in statement.revenues],
        expenses=[StatementLineSchema(account_code=l.account_code, amount=l.amount) for l in statement.expenses],
        total_revenue=statement.total_revenue,
        total_expense=statement.total_expense,
        net_result=statement.net_result,
    )
