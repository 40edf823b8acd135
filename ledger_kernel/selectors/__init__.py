"""Selectors for the ledger kernel (read side)."""

from ledger_kernel.selectors.analytics_selector import (
    AccountSummary,
    AnalyticsSelector,
    CategorySpending,
    CategoryTotal,
    MonthlySummary,
    NetWorth,
)
from ledger_kernel.selectors.ledger_selector import AccountReconciliation, LedgerSelector
from ledger_kernel.selectors.transaction_selector import TransactionSelector

__all__ = [
    "AnalyticsSelector",
    "AccountSummary",
    "NetWorth",
    "MonthlySummary",
    "CategoryTotal",
    "CategorySpending",
    "LedgerSelector",
    "AccountReconciliation",
    "TransactionSelector",
]
