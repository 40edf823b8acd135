"""
Ledger Kernel - personal finance transaction/balance core.

- Running account balances kept in lock-step with transaction history
- Atomic, row-locked postings for income, expense, transfer and trades
- Explicit ownership checks on every resource fetched by id
- Read-only analytics over the ledger
"""

__version__ = "0.1.0"
