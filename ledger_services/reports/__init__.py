"""Transaction report export: build, render to xlsx, store, link."""

from ledger_services.reports.models import (
    GeneratedReport,
    ReportDocument,
    ReportRow,
    ReportTotals,
)
from ledger_services.reports.service import ReportService
from ledger_services.reports.store import LocalReportStore, ReportStore

__all__ = [
    "GeneratedReport",
    "LocalReportStore",
    "ReportDocument",
    "ReportRow",
    "ReportService",
    "ReportStore",
    "ReportTotals",
]
