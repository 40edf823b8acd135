"""
Pure report assembly (``ledger_services.reports.builder``).

Turns already-loaded rows into a ``ReportDocument``.  No session, no
clock, no file system: every input is an argument.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from ledger_kernel.db.types import LEDGER_DECIMAL, ZERO
from ledger_services.reports.models import ReportDocument, ReportRow, ReportTotals

REPORT_TITLE = "Monthly Financial Report"

INCOME = "INCOME"
EXPENSE = "EXPENSE"


def compute_totals(rows: Iterable[ReportRow]) -> ReportTotals:
    """Income and expense magnitudes; transfers count toward neither."""
    income = expenses = ZERO
    for row in rows:
        if row.transaction_type == INCOME:
            income = LEDGER_DECIMAL.add(income, row.amount)
        elif row.transaction_type == EXPENSE:
            expenses = LEDGER_DECIMAL.add(expenses, row.amount)
    return ReportTotals(total_income=income, total_expenses=expenses)


def build_report_document(
    rows: Iterable[ReportRow],
    *,
    period_label: str,
    owner_name: str,
    generated_at: datetime,
    title: str = REPORT_TITLE,
) -> ReportDocument:
    row_tuple = tuple(rows)
    return ReportDocument(
        title=title,
        period_label=period_label,
        owner_name=owner_name,
        generated_at=generated_at,
        rows=row_tuple,
        totals=compute_totals(row_tuple),
    )
