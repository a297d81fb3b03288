"""Bank account endpoints"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from zenith_gateway.api.v1.schemas import BankAccountCreateRequest, BankAccountResponse
from zenith_gateway.api.v1.errors import parse_uuid
from zenith_gateway.api.dependencies import get_owner_id
from zenith_gateway.infrastructure.database.session import get_db
from zenith_gateway.infrastructure.database.repositories import BankAccountRepository
from zenith_gateway.utils.money import quantize_money

router = APIRouter()


def _to_response(db_account) -> BankAccountResponse:
    return BankAccountResponse(
        id=str(db_account.id),
        name=db_account.name,
        balance=quantize_money(db_account.balance),
    )


@router.post("/bank-accounts", response_model=BankAccountResponse, status_code=201)
def create_bank_account(
    request_body: BankAccountCreateRequest,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Register a bank account with its opening balance"""
    db_account = BankAccountRepository(db).create_account(owner_id, request_body.name, request_body.opening_balance)
    db.commit()
    return _to_response(db_account)


@router.get("/bank-accounts/{account_id}", response_model=BankAccountResponse)
def get_bank_account(
    account_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """Retrieve a bank account and its current balance"""
    db_account = BankAccountRepository(db).get_account(parse_uuid(account_id, "bank account"), owner_id)
    if not db_account:
        raise HTTPException(status_code=404, detail="Bank account not found")
    return _to_response(db_account)
