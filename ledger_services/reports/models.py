"""
Report Domain Models (``ledger_services.reports.models``).

Frozen value objects describing an exported transaction report.  Pure data
with ZERO I/O; built by ``builder.build_report_document`` and consumed by
the renderer.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class ReportRow:
    """One transaction line as shown in the report."""

    transaction_date: date
    description: str
    transaction_type: str
    category_name: str
    account_name: str
    # Magnitude; the type column carries the direction
    amount: Decimal


@dataclass(frozen=True)
class ReportTotals:
    total_income: Decimal
    total_expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class ReportDocument:
    """Everything the renderer needs; nothing it has to look up."""

    title: str
    period_label: str
    owner_name: str
    generated_at: datetime
    rows: tuple[ReportRow, ...]
    totals: ReportTotals


@dataclass(frozen=True)
class GeneratedReport:
    """Where a stored report can be fetched from."""

    key: str
    download_url: str
    document: ReportDocument
