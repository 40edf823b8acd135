"""
Request and response schemas (pydantic).

JSON keys are camelCase on the wire and snake_case in Python.  Decimals
are serialized as strings; money is shown to two places.
"""

import re
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from ledger_kernel.db.types import (
    MONEY_PRECISION,
    MONEY_SCALE,
    QUANTITY_PRECISION,
    QUANTITY_SCALE,
    ZERO,
    round_money,
)
from ledger_kernel.domain.periods import to_utc
from ledger_kernel.models.account import Account, AccountType, CurrencyCode
from ledger_kernel.models.category import Category, CategoryType
from ledger_kernel.models.investment import AssetType, InvestmentMetadata
from ledger_kernel.models.transaction import PaymentMode, Transaction, TransactionType
from ledger_kernel.models.user import User
from ledger_kernel.selectors.analytics_selector import (
    CategorySpending,
    CategoryTotal,
    MonthlySummary,
    NetWorth,
)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_PATTERN = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#])[A-Za-z\d@$!%*?&#]{8,}$"
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _aware(instant: datetime | None) -> datetime | None:
    return None if instant is None else to_utc(instant)


def _plain(value: Decimal) -> str:
    """Decimal without trailing zeros or exponent."""
    return format(value.normalize(), "f")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class SignupRequest(CamelModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: str
    password: str
    confirm_password: str

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value.strip()):
            raise ValueError("Please provide a valid email address")
        return value.strip()

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(
                "Password must be at least 8 characters long and contain at least "
                "one uppercase letter, one lowercase letter, one number, and one "
                "special character"
            )
        return value

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and value != password:
            raise ValueError("Password and Confirm Password must match")
        return value


class LoginRequest(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(CamelModel):
    user_id: UUID
    first_name: str
    last_name: str
    email: str

    @classmethod
    def of(cls, user: User) -> "UserResponse":
        return cls(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class CreateAccountRequest(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    account_type: AccountType = Field(alias="type")
    currency: CurrencyCode
    initial_balance: Decimal = Field(
        default=ZERO, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE
    )


class UpdateAccountRequest(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    currency: CurrencyCode


class AccountResponse(CamelModel):
    id: UUID
    name: str
    account_type: AccountType = Field(alias="type")
    currency: CurrencyCode
    current_balance: Decimal
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def of(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            account_type=account.account_type,
            currency=account.currency,
            current_balance=round_money(account.current_balance),
            created_at=_aware(account.created_at),
            updated_at=_aware(account.updated_at),
        )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CreateCategoryRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    category_type: CategoryType = Field(alias="type")


class UpdateCategoryRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)


class CategoryResponse(CamelModel):
    id: UUID
    name: str
    category_type: CategoryType = Field(alias="type")
    is_global: bool
    created_at: datetime | None

    @classmethod
    def of(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            category_type=category.category_type,
            is_global=category.is_global,
            created_at=_aware(category.created_at),
        )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class CreateTransactionRequest(CamelModel):
    account_id: UUID
    category_id: UUID | None = None
    amount: Decimal = Field(max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE)
    transaction_type: TransactionType = Field(alias="type")
    description: str | None = Field(default=None, max_length=500)
    transaction_date: datetime
    payment_mode: PaymentMode


class CreateTransferRequest(CamelModel):
    from_account_id: UUID
    to_account_id: UUID
    amount: Decimal = Field(
        gt=0, max_digits=MONEY_PRECISION, decimal_places=MONEY_SCALE
    )
    description: str | None = Field(default=None, max_length=500)
    transaction_date: datetime
    payment_mode: PaymentMode


class CreateInvestmentRequest(CamelModel):
    account_id: UUID
    asset_symbol: str = Field(min_length=1, max_length=50)
    asset_type: AssetType
    quantity: Decimal = Field(
        gt=0, max_digits=QUANTITY_PRECISION, decimal_places=QUANTITY_SCALE
    )
    price_per_unit: Decimal = Field(
        gt=0, max_digits=QUANTITY_PRECISION, decimal_places=QUANTITY_SCALE
    )
    description: str | None = Field(default=None, max_length=500)
    transaction_date: datetime
    payment_mode: PaymentMode


class TransactionResponse(CamelModel):
    id: UUID
    account_id: UUID
    account_name: str
    category_id: UUID | None
    category_name: str | None
    related_transaction_id: UUID | None
    amount: Decimal
    transaction_type: TransactionType = Field(alias="type")
    description: str | None
    transaction_date: datetime
    payment_mode: PaymentMode
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def of(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            account_id=transaction.account_id,
            account_name=transaction.account.name,
            category_id=transaction.category_id,
            category_name=transaction.category.name if transaction.category else None,
            related_transaction_id=transaction.related_transaction_id,
            amount=round_money(transaction.amount),
            transaction_type=transaction.transaction_type,
            description=transaction.description,
            transaction_date=to_utc(transaction.transaction_date),
            payment_mode=transaction.payment_mode,
            created_at=_aware(transaction.created_at),
            updated_at=_aware(transaction.updated_at),
        )


class InvestmentMetadataResponse(CamelModel):
    transaction_id: UUID
    asset_symbol: str
    asset_type: AssetType
    quantity: str
    price_per_unit: str
    total_amount: Decimal

    @classmethod
    def of(cls, metadata: InvestmentMetadata) -> "InvestmentMetadataResponse":
        return cls(
            transaction_id=metadata.transaction_id,
            asset_symbol=metadata.asset_symbol,
            asset_type=metadata.asset_type,
            quantity=_plain(metadata.quantity),
            price_per_unit=_plain(metadata.price_per_unit),
            total_amount=round_money(metadata.total_amount),
        )


class InvestmentTransactionResponse(CamelModel):
    transaction: TransactionResponse
    investment_metadata: InvestmentMetadataResponse


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class AccountSummaryResponse(CamelModel):
    account_id: UUID
    account_name: str
    account_type: AccountType
    balance: Decimal


class NetWorthResponse(CamelModel):
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    accounts: list[AccountSummaryResponse]

    @classmethod
    def of(cls, result: NetWorth) -> "NetWorthResponse":
        return cls(
            total_assets=round_money(result.total_assets),
            total_liabilities=round_money(result.total_liabilities),
            net_worth=round_money(result.net_worth),
            accounts=[
                AccountSummaryResponse(
                    account_id=a.account_id,
                    account_name=a.account_name,
                    account_type=a.account_type,
                    balance=round_money(a.balance),
                )
                for a in result.accounts
            ],
        )


class MonthlySummaryResponse(CamelModel):
    year: int
    month: int
    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    income_transaction_count: int
    expense_transaction_count: int

    @classmethod
    def of(cls, result: MonthlySummary) -> "MonthlySummaryResponse":
        return cls(
            year=result.year,
            month=result.month,
            total_income=round_money(result.total_income),
            total_expenses=round_money(result.total_expenses),
            net_savings=round_money(result.net_savings),
            income_transaction_count=result.income_count,
            expense_transaction_count=result.expense_count,
        )


class CategoryTotalResponse(CamelModel):
    category_name: str
    amount: Decimal
    transaction_count: int

    @classmethod
    def of(cls, total: CategoryTotal) -> "CategoryTotalResponse":
        return cls(
            category_name=total.category_name,
            amount=round_money(total.amount),
            transaction_count=total.transaction_count,
        )


class CategorySpendingResponse(CamelModel):
    expenses: list[CategoryTotalResponse]
    income: list[CategoryTotalResponse]

    @classmethod
    def of(cls, result: CategorySpending) -> "CategorySpendingResponse":
        return cls(
            expenses=[CategoryTotalResponse.of(t) for t in result.expenses],
            income=[CategoryTotalResponse.of(t) for t in result.income],
        )


class ReportResponse(CamelModel):
    download_url: str
