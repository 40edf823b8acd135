"""Domain models for the ledger kernel."""

from ledger_kernel.models.account import Account, AccountType, CurrencyCode
from ledger_kernel.models.category import Category, CategoryType
from ledger_kernel.models.investment import AssetType, InvestmentMetadata
from ledger_kernel.models.transaction import PaymentMode, Transaction, TransactionType
from ledger_kernel.models.user import User

__all__ = [
    "User",
    "Account",
    "AccountType",
    "CurrencyCode",
    "Category",
    "CategoryType",
    "Transaction",
    "TransactionType",
    "PaymentMode",
    "InvestmentMetadata",
    "AssetType",
]
