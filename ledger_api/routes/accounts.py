"""
Account routes.

GET    /api/accounts       - list (optional ?type=)
POST   /api/accounts       - create
GET    /api/accounts/{id}  - read
PUT    /api/accounts/{id}  - rename / change currency
DELETE /api/accounts/{id}  - delete an account with no transactions
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, sessionmaker

from ledger_api.dependencies import get_acting_user_id, get_session_factory
from ledger_api.responses import envelope
from ledger_api.schemas import AccountResponse, CreateAccountRequest, UpdateAccountRequest
from ledger_kernel.db.engine import session_scope
from ledger_kernel.models.account import AccountType
from ledger_kernel.services.account_service import AccountService

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.get("")
def list_accounts(
    account_type: AccountType | None = Query(default=None, alias="type"),
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        accounts = AccountService(session).list_accounts(user_id, account_type)
        data = [AccountResponse.of(a) for a in accounts]
    message = (
        f"{account_type.value} accounts retrieved successfully"
        if account_type is not None
        else "Accounts retrieved successfully"
    )
    return envelope(200, message, data)


@router.post("")
def create_account(
    body: CreateAccountRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        account = AccountService(session).create_account(
            user_id,
            name=body.name,
            account_type=body.account_type,
            currency=body.currency,
            initial_balance=body.initial_balance,
        )
        data = AccountResponse.of(account)
    return envelope(201, "Account created successfully", data)


@router.get("/{account_id}")
def get_account(
    account_id: UUID,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        data = AccountResponse.of(AccountService(session).get_account(account_id, user_id))
    return envelope(200, "Account retrieved successfully", data)


@router.put("/{account_id}")
def update_account(
    account_id: UUID,
    body: UpdateAccountRequest,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        account = AccountService(session).update_account(
            account_id, user_id, name=body.name, currency=body.currency
        )
        data = AccountResponse.of(account)
    return envelope(200, "Account updated successfully", data)


@router.delete("/{account_id}")
def delete_account(
    account_id: UUID,
    user_id: UUID = Depends(get_acting_user_id),
    factory: sessionmaker[Session] = Depends(get_session_factory),
):
    with session_scope(factory) as session:
        AccountService(session).delete_account(account_id, user_id)
    return envelope(200, "Account deleted successfully")
