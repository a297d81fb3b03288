"""POST/GET /v1/transactions/{id}/settlements - payment settlement (baixa)"""

import time
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from zenith_gateway.api.v1.schemas import (
    PaymentHistoryResponse,
    PaymentSchema,
    SettlementRequest,
    SettlementResponse,
    TransactionResponse,
)
from zenith_gateway.api.v1.errors import domain_http_error, parse_uuid
from zenith_gateway.api.dependencies import get_clock, get_ledger_client, get_owner_id, get_request_id
from zenith_gateway.infrastructure.database.session import get_db
from zenith_gateway.infrastructure.database.repositories import (
    BankAccountRepository,
    PaymentRepository,
    TransactionRepository,
    to_domain,
)
from zenith_gateway.infrastructure.clients.ledger import LedgerClient
from zenith_gateway.infrastructure.observability.metrics import record_settlement, settlement_rejected_counter
from zenith_gateway.infrastructure.observability.logging import log_settlement
from zenith_gateway.domain.clock import Clock
from zenith_gateway.domain.exceptions import ValidationError, InvalidStateError, OverpaymentError
from zenith_gateway.domain.models import PaymentRecord
from zenith_gateway.domain.settlement import apply_settlement, remaining_balance

router = APIRouter()


@router.post("/transactions/{transaction_id}/settlements", response_model=SettlementResponse, status_code=201)
async def create_settlement(
    transaction_id: str,
    request_body: SettlementRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    ledger_client: LedgerClient = Depends(get_ledger_client),
):
    """
    Apply a (partial or full) payment to a payable/receivable.

    Flow:
    1. Lock the transaction row (and the bank account, if any)
    2. Derive the new settled amount and status
    3. Insert the payment, update the transaction, adjust the bank balance
    4. Commit all three writes together
    5. Send async settlement event to ledger
    """
    start_time = time.time()
    request_id = get_request_id(request)
    txn_uuid = parse_uuid(transaction_id, "transaction")

    try:
        txn_repo = TransactionRepository(db)
        db_txn = txn_repo.get_transaction(txn_uuid, owner_id, for_update=True)
        if not db_txn:
            raise HTTPException(status_code=404, detail="Transaction not found")

        db_account = None
        if request_body.bank_account_id is not None:
            bank_repo = BankAccountRepository(db)
            db_account = bank_repo.get_account(request_body.bank_account_id, owner_id, for_update=True)
            if not db_account:
                raise HTTPException(status_code=404, detail="Bank account not found")

        # 1. Settlement rules
        result = apply_settlement(
            to_domain(db_txn),
            request_body.amount,
            bank_account_id=str(db_account.id) if db_account else None,
        )

        # 2. Payment record
        db_payment = PaymentRepository(db).create_payment(
            owner_id,
            PaymentRecord(
                transaction_type=db_txn.transaction_type,
                transaction_id=str(db_txn.id),
                method=request_body.payment_method,
                amount=request_body.amount,
                payment_date=request_body.payment_date,
                bank_account_id=str(db_account.id) if db_account else None,
                notes=request_body.notes,
            ),
        )

        # 3. Transaction status and bank balance
        txn_repo.apply_settlement(db_txn, result)
        if result.balance_adjustment is not None:
            bank_repo.adjust_balance(db_account, result.balance_adjustment.delta)

        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except ValidationError as e:
        db.rollback()
        settlement_rejected_counter.labels(reason="validation").inc()
        logging.warning(f"Invalid settlement: {e}", extra={"request_id": request_id})
        raise domain_http_error(e)

    except InvalidStateError as e:
        db.rollback()
        settlement_rejected_counter.labels(reason="invalid_state").inc()
        logging.warning(f"Settlement on closed transaction: {e}", extra={"request_id": request_id})
        raise domain_http_error(e)

    except OverpaymentError as e:
        db.rollback()
        settlement_rejected_counter.labels(reason="overpayment").inc()
        logging.warning(f"Overpayment rejected: {e}", extra={"request_id": request_id})
        raise domain_http_error(e)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # 4. Notify ledger
    background_tasks.add_task(
        ledger_client.send_settlement_event,
        {
            "event": "SETTLEMENT_RECORDED",
            "payment_id": str(db_payment.id),
            "transaction_id": str(db_txn.id),
            "transaction_type": db_txn.transaction_type,
            "owner_id": owner_id,
            "amount": f"{request_body.amount:.2f}",
            "status": result.status.value,
            "bank_account_id": str(db_account.id) if db_account else None,
            "balance_delta": f"{result.balance_adjustment.delta:.2f}" if result.balance_adjustment else None,
        },
    )

    duration_ms = (time.time() - start_time) * 1000
    record_settlement(db_txn.transaction_type, result.status.value, request_body.amount)
    log_settlement(
        request_id,
        owner_id,
        str(db_txn.id),
        db_txn.transaction_type,
        request_body.amount,
        result.status.value,
        duration_ms,
    )

    return SettlementResponse(
        transaction=TransactionResponse.from_row(db_txn, clock.today()),
        payment=PaymentSchema.from_row(db_payment),
    )


@router.get("/transactions/{transaction_id}/settlements", response_model=PaymentHistoryResponse)
def get_settlements(
    transaction_id: str,
    owner_id: str = Depends(get_owner_id),
    db: Session = Depends(get_db),
):
    """
    Retrieve the payments recorded against a transaction.

    Returns:
        Payments in payment-date order and the remaining balance
    """
    db_txn = TransactionRepository(db).get_transaction(parse_uuid(transaction_id, "transaction"), owner_id)
    if not db_txn:
        raise HTTPException(status_code=404, detail="Transaction not found")

    payments = PaymentRepository(db).get_payments(db_txn)
    return PaymentHistoryResponse(
        transaction_id=str(db_txn.id),
        remaining=remaining_balance(to_domain(db_txn)),
        payments=[PaymentSchema.from_row(p) for p in payments],
    )
