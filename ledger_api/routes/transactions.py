"""
Transaction routes.

GET    /api/transactions             - list, optionally filtered
POST   /api/transactions             - income or expense
POST   /api/transactions/transfer    - paired transfer between two accounts
POST   /api/transactions/investment  - buy on an INVESTMENT account
GET    /api/transactions/{id}        - read
DELETE /api/transactions/{id}        - delete a non-transfer transaction

Filters on the list route apply one at a time: a date range wins over a
category, a category over a type, a type over an account.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ledger_api.dependencies import get_acting_user_id, get_session_factory
from ledger_api.responses import envelope
from ledger_api.schemas import (
    CreateInvestmentRequest,
    CreateTransactionRequest,
    CreateTransferRequest,
    InvestmentMetadataResponse,
    InvestmentTransactionResponse,
    TransactionResponse,
)
from ledger_kernel.db.engine import session_scope
from ledger_kernel.models.transaction import TransactionType
from ledger_kernel.services.transaction_orchestrator import (
    NewInvestmentTrade,
    NewTransaction,
    NewTransfer,
    TransactionOrchestrator,
)

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.get("")
def list_transactions(
    account_id: UUID | None = Query(default=None, alias="accountId"),
    category_id: UUID | None = Query(default=None, alias="categoryId"),
    transaction_type: TransactionType | None = Query(default=None, alias="type"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    filtered = any(
        value is not None
        for value in (account_id, category_id, transaction_type, start_date, end_date)
    )
    with session_scope(factory) as session:
        orchestrator = TransactionOrchestrator(session)
        if filtered:
            transactions = orchestrator.get_filtered(
                user_id,
                account_id=account_id,
                category_id=category_id,
                transaction_type=transaction_type,
                start=start_date,
                end=end_date,
            )
        else:
            transactions = orchestrator.get_all(user_id)
        data = [TransactionResponse.of(t) for t in transactions]

    message = (
        "Filtered transactions retrieved successfully"
        if filtered
        else "Transactions retrieved successfully"
    )
    return envelope(200, message, data)


@router.post("")
def create_transaction(
    body: CreateTransactionRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    request = NewTransaction(
        account_id=body.account_id,
        amount=body.amount,
        transaction_type=body.transaction_type,
        transaction_date=body.transaction_date,
        payment_mode=body.payment_mode,
        category_id=body.category_id,
        description=body.description,
    )
    with session_scope(factory) as session:
        transaction = TransactionOrchestrator(session).create_transaction(request, user_id)
        data = TransactionResponse.of(transaction)
    return envelope(201, "Transaction created successfully", data)


@router.post("/transfer")
def create_transfer(
    body: CreateTransferRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    request = NewTransfer(
        from_account_id=body.from_account_id,
        to_account_id=body.to_account_id,
        amount=body.amount,
        transaction_date=body.transaction_date,
        payment_mode=body.payment_mode,
        description=body.description,
    )
    with session_scope(factory) as session:
        legs = TransactionOrchestrator(session).create_transfer(request, user_id)
        data = {
            "debit": TransactionResponse.of(legs.debit),
            "credit": TransactionResponse.of(legs.credit),
        }
    return envelope(201, "Transfer completed successfully", data)


@router.post("/investment")
def create_investment(
    body: CreateInvestmentRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    request = NewInvestmentTrade(
        account_id=body.account_id,
        asset_symbol=body.asset_symbol,
        asset_type=body.asset_type,
        quantity=body.quantity,
        price_per_unit=body.price_per_unit,
        transaction_date=body.transaction_date,
        payment_mode=body.payment_mode,
        description=body.description,
    )
    with session_scope(factory) as session:
        trade = TransactionOrchestrator(session).create_investment_transaction(
            request, user_id
        )
        data = InvestmentTransactionResponse(
            transaction=TransactionResponse.of(trade.transaction),
            investment_metadata=InvestmentMetadataResponse.of(trade.metadata),
        )
    return envelope(201, "Investment transaction created successfully", data)


@router.get("/{transaction_id}")
def get_transaction(
    transaction_id: UUID,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        data = TransactionResponse.of(
            TransactionOrchestrator(session).get_by_id(transaction_id, user_id)
        )
    return envelope(200, "Transaction retrieved successfully", data)


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: UUID,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        TransactionOrchestrator(session).delete_transaction(transaction_id, user_id)
    return envelope(200, "Transaction deleted successfully")
