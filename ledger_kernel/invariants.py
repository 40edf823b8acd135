"""
Ledger Invariants Contract.

These invariants are structural law for every posting path. No setting,
request flag, or caller may switch them off.

This module exists solely to declare them explicitly. The enforcement is
distributed across BalanceEngine, TransactionOrchestrator, OwnershipGuard,
and the account version column.
"""

from enum import Enum, unique


@unique
class LedgerInvariant(str, Enum):
    """Non-configurable invariants enforced by the ledger kernel."""

    BALANCE_CONSISTENCY = "balance_consistency"
    """current_balance equals opening_balance plus the signed sum of the
    account's transactions. Enforced by BalanceEngine, which moves the
    balance and writes the row in one flush unit."""

    SIGN_BY_TYPE = "sign_by_type"
    """INCOME amounts are positive and EXPENSE amounts negative. Enforced by
    BalanceEngine.post_single before any mutation."""

    TRANSFER_PAIRING = "transfer_pairing"
    """Transfer legs exist in linked, opposite-signed pairs and are never
    created or removed one at a time. Enforced by
    BalanceEngine.post_transfer_pair and reverse_single."""

    INVESTMENT_METADATA = "investment_metadata"
    """Investment metadata exists iff the transaction is a trade, and the
    trade amount is -(quantity * price). Enforced by
    TransactionOrchestrator.create_investment_transaction."""

    OWNERSHIP = "ownership"
    """No user reads or mutates another user's accounts, custom categories
    or transactions. Enforced by OwnershipGuard and user-scoped selectors."""

    NO_LOST_UPDATES = "no_lost_updates"
    """Concurrent postings to one account serialize. Enforced by row locks
    and the account version column."""


ALL_LEDGER_INVARIANTS: frozenset[LedgerInvariant] = frozenset(LedgerInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "ledger_config",
    "ledger_services",
    "ledger_api",
)
