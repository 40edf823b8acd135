"""Services for the ledger kernel (write side)."""

from ledger_kernel.services.account_service import AccountService
from ledger_kernel.services.balance_engine import BalanceEngine, TransferLegs
from ledger_kernel.services.category_service import CategoryService
from ledger_kernel.services.ownership_guard import Decision, OwnershipGuard, authorize
from ledger_kernel.services.transaction_orchestrator import (
    InvestmentTrade,
    NewInvestmentTrade,
    NewTransaction,
    NewTransfer,
    TransactionOrchestrator,
)
from ledger_kernel.services.user_service import UserService

__all__ = [
    "AccountService",
    "BalanceEngine",
    "CategoryService",
    "Decision",
    "InvestmentTrade",
    "NewInvestmentTrade",
    "NewTransaction",
    "NewTransfer",
    "OwnershipGuard",
    "TransactionOrchestrator",
    "TransferLegs",
    "UserService",
    "authorize",
]
